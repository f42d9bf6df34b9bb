"""
Pytest configuration and fixtures for docx_fieldmerge tests.

Provides a processor, sample context data, and a factory that writes a
minimal .docx package into a temporary directory.
"""

import zipfile
from types import SimpleNamespace

import pytest

from docx_fieldmerge import Processor

from builders import document_xml, header_xml, paragraph, run


CONTENT_TYPES_XML = """\
<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">
  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>
  <Default Extension="xml" ContentType="application/xml"/>
  <Override PartName="/word/document.xml"
    ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"/>
  <Override PartName="/word/styles.xml"
    ContentType="application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"/>
</Types>"""

RELS_XML = """\
<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1"
    Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/officeDocument"
    Target="word/document.xml"/>
</Relationships>"""

DOCUMENT_RELS_XML = """\
<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">
  <Relationship Id="rId1"
    Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"
    Target="styles.xml"/>
  <Relationship Id="rId2"
    Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/header"
    Target="header1.xml"/>
</Relationships>"""

STYLES_XML = """\
<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
  <w:style w:type="paragraph" w:default="1" w:styleId="Normal"><w:name w:val="Normal"/></w:style>
</w:styles>"""


# ============================================================================
# PROCESSOR FIXTURES
# ============================================================================

@pytest.fixture
def processor():
    """A fresh processor per test."""
    return Processor()


# ============================================================================
# SAMPLE DATA FIXTURES
# ============================================================================

@pytest.fixture
def person():
    """An attribute-style record, like callers pass from their own models."""
    return SimpleNamespace(first_name="Ronald", last_name="Anderson")


@pytest.fixture
def sample_context(person):
    return {
        "title": "Letter of application",
        "person": person,
        "technologies": ["HTML", "CSS", "SASS"],
        "languages": [
            {"name": "German", "skill": "native speaker"},
            {"name": "English", "skill": "fluent"},
        ],
    }


# ============================================================================
# PACKAGE FIXTURES
# ============================================================================

@pytest.fixture
def make_docx(tmp_path):
    """Factory writing a minimal .docx package and returning its path."""

    def _make_docx(
        *body,
        name="template.docx",
        header=None,
        include_document=True,
        extra_entries=None,
    ):
        path = tmp_path / name
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            zf.writestr("[Content_Types].xml", CONTENT_TYPES_XML)
            zf.writestr("_rels/.rels", RELS_XML)
            zf.writestr("word/_rels/document.xml.rels", DOCUMENT_RELS_XML)
            if include_document:
                zf.writestr("word/document.xml", document_xml(*body))
            zf.writestr("word/styles.xml", STYLES_XML)
            zf.writestr(
                "word/header1.xml",
                header_xml(header if header is not None else paragraph(run("Header"))),
            )
            for entry_name, data in (extra_entries or {}).items():
                zf.writestr(entry_name, data)
        return path

    return _make_docx
