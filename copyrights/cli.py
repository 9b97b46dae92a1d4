from typing import Any, List
import sys
import os
import argparse
import logging

from copyrights import __version__

##################################################################################################
# Main
##################################################################################################

ArgParser = argparse.ArgumentParser

class Commands:
    def __init__(self, parser: ArgParser) -> None:
        self.root_parser = parser
        self.parsers = {}
        self.subparsers = {}

    class Command:
        def __init__(self, commands: 'Commands', name: str) -> None:
            parsers = commands.parsers
            subparsers = commands.subparsers

            if '' not in parsers:
                parsers[''] = commands.root_parser

            if '' not in subparsers:
                subparsers[''] = commands.root_parser.add_subparsers(dest='command')

            if name not in parsers:
                parsers[name] = subparsers[''].add_parser(name)

            self.parser = parsers[name]

        def __enter__(self) -> ArgParser:
            return self.parser

        def __exit__(self, exc_type: Any, exc_value: Any, traceback: Any) -> None:
            pass

    def __call__(self, name: str) -> Any:
        return Commands.Command(self, name)


def add_common_arguments(cmd: ArgParser) -> None:
    cmd.add_argument('paths', type=str, nargs='*', help='Files and directories to check (default: the current directory).')

    templates = cmd.add_argument_group('templates')
    templates.add_argument('-C', '--correct-template', type=str, help='File containing the correct copyright template, using Java syntax.')
    templates.add_argument('-A', '--alternate-templates', type=str, action='append', default=[],
                           help=f'File(s) containing alternate correct copyright templates, separated by "{os.pathsep}".')
    templates.add_argument('-B', '--bsd-template', type=str, help='File containing the correct BSD copyright template.')

    checks = cmd.add_argument_group('checks')
    checks.add_argument('-w', '--no-warn', action='store_true', help='Suppress warnings.')
    checks.add_argument('-y', '--ignore-year', action='store_true', help="Don't check that the year is correct (much faster).")
    checks.add_argument('-e', '--explicit-exclude', action='store_true', help='Exclude files containing "DO NOT ALTER OR REMOVE COPYRIGHT NOTICES OR THIS HEADER." from repair.')

    scm = cmd.add_argument_group('version control')
    scm.add_argument('--scm', choices=['git', 'hg', 'mercurial', 'svn'], default='git', help='Version control system (default: git).')
    scm.add_argument('-g', '--git', dest='scm', action='store_const', const='git', help='Use Git.')
    scm.add_argument('-m', '--mercurial', dest='scm', action='store_const', const='hg', help='Use Mercurial.')
    scm.add_argument('-S', '--svn', dest='scm', action='store_const', const='svn', help='Use Subversion.')
    scm.add_argument('-s', '--scm-only', action='store_true', help='Skip files not under version control (slower).')
    scm.add_argument('--timeout', type=float, default=None, help='Timeout in seconds for version control commands.')

    files = cmd.add_argument_group('files')
    files.add_argument('-j', '--java', action='store_true', help='Check Java syntax files.')
    files.add_argument('-x', '--xml', action='store_true', help='Check XML syntax files.')
    files.add_argument('-p', '--props', action='store_true', help='Check properties syntax files.')
    files.add_argument('-t', '--text', action='store_true', help='Check other text files.')
    files.add_argument('-H', '--hidden', action='store_true', help='Check hidden files too.')
    files.add_argument('-X', '--exclude', type=str, action='append', default=[],
                       help='Exclude files whose path contains this substring; @file reads patterns from a file.')
    files.add_argument('--exclude-from', type=str, action='append', default=[],
                       help='Exclude files matching the gitignore style patterns in this file.')

    output = cmd.add_argument_group('output')
    output.add_argument('-c', '--count', action='store_true', help='Count errors and print a summary.')
    output.add_argument('-q', '--quiet', action='store_true', help="Don't print errors for each file.")
    output.add_argument('-v', '--verbose', action='store_true', help='Verbose output.')
    output.add_argument('-d', '--debug', action='store_true', help='Debug output.')

    cmd.add_argument('--jobs', type=int, default=1, help='Number of files checked in parallel.')


def make_options(args: argparse.Namespace) -> Any:
    from copyrights.config import Options, load_excludes
    from copyrights.formats import FormatGroup
    from copyrights.scm import DEFAULT_TIMEOUT
    from pathlib import Path

    alternates: List[str] = []
    for arg in args.alternate_templates:
        alternates.extend(a for a in arg.split(os.pathsep) if a)

    groups = [group for flag, group in (
        (args.java, FormatGroup.JAVA),
        (args.xml, FormatGroup.XML),
        (args.props, FormatGroup.PROPS),
        (args.text, FormatGroup.TEXT),
    ) if flag]

    return Options(
        correct_template=args.correct_template,
        alternate_templates=tuple(alternates),
        bsd_template=args.bsd_template,
        ignore_year=args.ignore_year,
        normalize=args.normalize,
        use_dash=args.dash,
        preserve_copyrights=args.preserve,
        warn=not args.no_warn,
        explicit_exclude=args.explicit_exclude,
        scm=args.scm,
        scm_only=args.scm_only,
        scm_timeout=args.timeout if args.timeout is not None else DEFAULT_TIMEOUT,
        repair=args.command == 'repair',
        dont_update=args.dont_update,
        quiet=args.quiet,
        verbose=args.verbose,
        debug=args.debug,
        count=args.count,
        groups=tuple(groups),
        hidden=args.hidden,
        excludes=load_excludes(args.exclude),
        exclude_from=tuple(Path(p) for p in args.exclude_from),
        jobs=args.jobs,
    )


def main(argv: List[str] | None = None) -> int:
    if sys.platform.lower() == "win32":
        os.system('color')
        sys.stdout.reconfigure(encoding='utf-8') # type: ignore
        sys.stderr.reconfigure(encoding='utf-8') # type: ignore

    parser = argparse.ArgumentParser(prog='copyrights', description='Check and repair copyright headers.')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    commands = Commands(parser)

    with commands('check') as cmd:
        add_common_arguments(cmd)
        cmd.set_defaults(dont_update=False, normalize=False, dash=False, preserve=False)

    with commands('repair') as cmd:
        add_common_arguments(cmd)
        cmd.add_argument('-n', '--dont-update', action='store_true', help='Leave the updated file in file.new.')
        cmd.add_argument('-N', '--normalize', action='store_true', help='Normalize the format of repaired copyrights to match the template.')
        cmd.add_argument('-D', '--dash', action='store_true', help='Use a dash instead of a comma between years.')
        cmd.add_argument('-P', '--preserve', action='store_true', help='Preserve original copyrights.')

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 0

    level = logging.DEBUG if args.debug else logging.INFO if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(message)s')
    logging.getLogger('git').setLevel(logging.INFO) # silence verbose git command logs

    match args.command:
        case 'check' | 'repair':
            from copyrights.messages import error
            from copyrights.tasks.check import check_main
            from copyrights.templates import TemplateError

            try:
                options = make_options(args)
                errors = check_main(args.paths, options)
            except (TemplateError, OSError, ValueError) as e:
                error(str(e))
                return 1
            return min(errors, 255)

        case _:
            raise ValueError(f"Unknown command: {args.command}")


if __name__ == '__main__':
    sys.exit(main())
