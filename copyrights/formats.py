"""
File formats known to the checker, in the order they are tried.
"""
from __future__ import annotations
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple
import enum
import logging
import re

from copyrights.io import starts_with, split_lines, guess_line_terminator
from copyrights.syntax import (
    BlockSyntax,
    CommentSyntax,
    ExtractedComment,
    LinePrefixSyntax,
    TextSyntax,
)


logger = logging.getLogger(__name__)


class FormatGroup(enum.Enum):
    """Groups of formats that can be switched on and off together."""
    JAVA = "java"
    XML = "xml"
    PROPS = "props"
    TEXT = "text"


@dataclass(frozen=True)
class FormatAdapter:
    name: str
    group: FormatGroup
    supports: Callable[[Path], bool] = field(compare=False)
    syntax: CommentSyntax = field(compare=False)

    def extract(self, content: str) -> Tuple[List[str], ExtractedComment]:
        """Split the file content into lines and read its leading comment."""
        lines = split_lines(content)
        comment = self.syntax.read_comment(lines)
        return lines, replace(comment, line_terminator=self.line_terminator(content))

    def line_terminator(self, content: str) -> str:
        """The terminator used when the file is rewritten."""
        return self.syntax.line_terminator or guess_line_terminator(content)


##################################################################################################
# File name tests
##################################################################################################

def _suffix_in(*suffixes: str) -> Callable[[Path], bool]:
    return lambda path: path.name.endswith(suffixes)


def _starts_with_ci(line: str, prefix: str) -> bool:
    """Case-insensitive prefix test ignoring surrounding whitespace."""
    return line.strip()[:len(prefix)].lower() == prefix.lower()


_JAVA_SUFFIXES = (".java", ".g", ".c", ".h", ".css", ".js")
_XML_SUFFIXES = (
    ".xml", ".xsl", ".html", ".xhtml", ".htm", ".dtd", ".xsd", ".wsdl",
    ".inc", ".jnlp", ".tld", ".xcs", ".jsf", ".hs", ".jhm",
)
_PROPS_SUFFIXES = (".properties", ".prefs", ".py", ".sh", ".ksh")
_PROPS_NAME_PREFIXES = ("Makefile", "GNUmakefile", "Rakefile")


def _is_java(path: Path) -> bool:
    return path.name.endswith(_JAVA_SUFFIXES) or starts_with(path, "/*\n")


def _is_xml(path: Path) -> bool:
    name = path.name
    if name.endswith(_XML_SUFFIXES):
        return True
    if name == "build.properties" and starts_with(path, "<"):
        return True
    return starts_with(path, "<?xml")


def _is_props(path: Path) -> bool:
    name = path.name
    if name.endswith(_PROPS_SUFFIXES) or name.startswith(_PROPS_NAME_PREFIXES):
        return True
    if name == "osgi.bundle":
        return True
    return starts_with(path, "#")


##################################################################################################
# Preamble lines
##################################################################################################

def _java_preamble(line: str) -> bool:
    return line.startswith("package ")


_XML_PREAMBLE = ("<?xml ", "<!DOCTYPE", "<html", "<head>", "<meta")

def _xml_preamble(line: str) -> bool:
    return any(_starts_with_ci(line, p) for p in _XML_PREAMBLE)


def _props_preamble(line: str) -> bool:
    return line.startswith("#!") or line.startswith("# -*-")


def _sig_preamble(line: str) -> bool:
    return line.startswith("#Signature") or line.startswith("#Version")


def _bat_preamble(line: str) -> bool:
    return line.startswith("@echo")


##################################################################################################
# Adapters
##################################################################################################

JAVA = FormatAdapter(
    "java", FormatGroup.JAVA, _is_java,
    BlockSyntax(start="/*", end=" */", prefix=" * ",
                blank_lines=False, move_preamble=True, is_preamble=_java_preamble))

JSP = FormatAdapter(
    "jsp", FormatGroup.XML, _suffix_in(".jsp"),
    BlockSyntax(start="<%--", end="--%>", prefix="    "))

XML = FormatAdapter(
    "xml", FormatGroup.XML, _is_xml,
    BlockSyntax(start="<!--", end="-->", prefix="    ", is_preamble=_xml_preamble))

BAT = FormatAdapter(
    "bat", FormatGroup.TEXT, _suffix_in(".bat"),
    LinePrefixSyntax(marker="REM", prefix="REM  ", is_preamble=_bat_preamble,
                     line_terminator="\r\n"))

MARKDOWN = FormatAdapter(
    "markdown", FormatGroup.TEXT, _suffix_in(".md", ".md.vm"),
    LinePrefixSyntax(marker='[//]: # " ', prefix='[//]: # " ', suffix=' "',
                     framed=False, skip_bare=False, escape_quotes=True))

_ASCIIDOC_DELIMITER = "/" * 79

ASCIIDOC = FormatAdapter(
    "asciidoc", FormatGroup.TEXT, _suffix_in(".adoc"),
    BlockSyntax(start=_ASCIIDOC_DELIMITER, end=_ASCIIDOC_DELIMITER, prefix="    ",
                delimiter=re.compile(r"////+")))

SIGNATURE = FormatAdapter(
    "signature", FormatGroup.PROPS, _suffix_in(".sig"),
    LinePrefixSyntax(marker="#", prefix="# ", is_preamble=_sig_preamble))

PROPERTIES = FormatAdapter(
    "properties", FormatGroup.PROPS, _is_props,
    LinePrefixSyntax(marker="#", prefix="# ", is_preamble=_props_preamble))

TEXT = FormatAdapter(
    "text", FormatGroup.TEXT, lambda path: True,
    TextSyntax())

# The first adapter that supports a file handles it.
ADAPTERS: Tuple[FormatAdapter, ...] = (
    JAVA,
    JSP,
    XML,
    BAT,
    MARKDOWN,
    ASCIIDOC,
    SIGNATURE,
    PROPERTIES,
    TEXT,
)


def select_adapter(path: Path, adapters: Sequence[FormatAdapter] = ADAPTERS) -> Optional[FormatAdapter]:
    for adapter in adapters:
        if adapter.supports(path):
            logger.debug(f"File {path} is a {adapter.name} file")
            return adapter
    return None
