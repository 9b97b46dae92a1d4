import pytest

from copyrights.templates import (
    DEFAULT_LICENSOR,
    LEGACY_TEMPLATES,
    TemplateError,
    compile_template,
    fill_year,
    load_catalog,
    load_template,
)


def all_templates(catalog):
    templates = [catalog.primary, catalog.bsd, *catalog.alternates, *catalog.apache]
    for _, legacy in catalog.legacy:
        templates.extend(legacy)
    return templates


def test_default_catalog(catalog):
    assert catalog.primary.name == "epl-copyright.txt"
    assert catalog.bsd.name == "edl-copyright.txt"
    assert catalog.licensor == DEFAULT_LICENSOR
    assert [t.name for t in catalog.alternates] == [
        "apache-copyright.txt",
        "apacheold-copyright.txt",
        "mitsallings-copyright.txt",
        "w3c-copyright.txt",
    ]
    assert [kind for kind, _ in catalog.legacy] == [kind for kind, _ in LEGACY_TEMPLATES]
    assert catalog.plain_apache is not None
    assert not catalog.plain_apache.has_year_slot


def test_template_text(catalog):
    text = catalog.primary.text
    assert text.startswith("Copyright (c) YYYY Oracle and/or its affiliates. All rights reserved.\n\nThis program")
    assert text.endswith("SPDX-License-Identifier: EPL-2.0 OR GPL-2.0 WITH Classpath-exception-2.0\n")
    assert " * " not in text


def test_render(catalog, licensor):
    rendered = catalog.primary.render("2010, 2024", licensor)
    assert rendered.startswith(
        "Copyright (c) 2010, 2024 Oracle and/or its affiliates. All rights reserved.\n\n")
    assert "YYYY" not in rendered


def test_rendered_templates_match_themselves(catalog, licensor):
    for template in all_templates(catalog):
        if not template.has_year_slot:
            continue
        assert template.matches(template.render("2024", licensor)), template.name


def test_several_copyright_lines(catalog):
    comment = catalog.primary.text.replace(
        "Copyright (c) YYYY Oracle and/or its affiliates. All rights reserved.",
        "Copyright (c) 2012, 2020 Oracle and/or its affiliates. All rights reserved.\n"
        "Portions Copyright 2004 Acme Corp.\n"
        "Copyright 2001 by Someone Else")
    assert catalog.primary.matches(comment)


def test_template_without_slot_accepts_leading_copyright(catalog):
    apache = catalog.plain_apache
    assert apache.matches(apache.text)
    assert apache.matches("Copyright 2015 Acme Corp.\n\n" + apache.text)
    assert apache.matches("Copyright 2015 Acme Corp.\nCopyright 2016 Other Corp.\n\n" + apache.text)


def test_netbeans_prefix(catalog, licensor):
    comment = (
        "To change this template, choose Tools | Templates\n"
        "and open the template in the editor.\n"
        "\n"
    ) + catalog.primary.render("2020", licensor)
    assert catalog.primary.matches(comment)


def test_prefix_match(catalog, licensor):
    comment = catalog.primary.render("2020", licensor) + "More text below the license.\n"
    assert not catalog.primary.matches(comment)
    assert catalog.primary.matches(comment, full=False)


def test_licensor_of_custom_template(tmp_path):
    path = tmp_path / "acme.txt"
    path.write_text(
        "/*\n"
        " * Copyright (c) YYYY Acme Corp. All rights reserved.\n"
        " *\n"
        " * Licensed under the Acme License.\n"
        " */\n")
    template = load_template(path)
    assert template.name == "acme.txt"
    assert template.licensor == "Acme Corp"
    assert template.text == "Copyright (c) YYYY Acme Corp. All rights reserved.\n\nLicensed under the Acme License.\n"

    catalog = load_catalog(correct=path)
    assert catalog.licensor == "Acme Corp"
    assert catalog.alternates == ()


def test_custom_template_with_alternates(tmp_path):
    path = tmp_path / "acme.txt"
    path.write_text("/*\n * Copyright YYYY Acme Corp.\n */\n")
    catalog = load_catalog(correct=path, alternates=["mitsallings-copyright.txt"])
    assert [t.name for t in catalog.alternates] == ["mitsallings-copyright.txt"]


def test_crlf_template(tmp_path):
    path = tmp_path / "acme.txt"
    path.write_bytes(b"/*\r\n * Copyright YYYY Acme Corp.\r\n *\r\n * Be nice.\r\n */\r\n")
    template = load_template(path)
    assert template.text == "Copyright YYYY Acme Corp.\n\nBe nice.\n"


def test_missing_template():
    with pytest.raises(TemplateError):
        load_template("no-such-copyright.txt")
    with pytest.raises(TemplateError):
        load_catalog(correct="no/such/template.txt")


def test_empty_template():
    with pytest.raises(TemplateError):
        compile_template([""])


def test_fill_year():
    text = "Copyright YYYY whoever\n\nBody mentioning YYYY.\n"
    assert fill_year(text, "2024", "Acme") == \
        "Copyright 2024 Acme. All rights reserved.\n\nBody mentioning YYYY.\n"
