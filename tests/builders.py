"""WordprocessingML snippets for building test documents."""

from xml.etree import ElementTree as ET

from docx_fieldmerge.markup import NAMESPACES, qn

W_NS = NAMESPACES["w"]
NS_DECLARATIONS = " ".join(
    f'xmlns:{prefix}="{NAMESPACES[prefix]}"'
    for prefix in ("w", "r", "wp", "a", "pic", "mc", "w14")
)

W_P = qn("w:p")
W_T = qn("w:t")
W_BR = qn("w:br")
W_TR = qn("w:tr")

SECTION_PROPERTIES = (
    "<w:sectPr>"
    '<w:pgSz w:w="12240" w:h="15840"/>'
    '<w:pgMar w:top="1440" w:right="1440" w:bottom="1440" w:left="1440"'
    ' w:header="720" w:footer="720" w:gutter="0"/>'
    '<w:cols w:space="720"/>'
    "</w:sectPr>"
)


def run(text):
    return f'<w:r><w:t xml:space="preserve">{text}</w:t></w:r>'


def page_break():
    return '<w:r><w:br w:type="page"/></w:r>'


def simple_field(expression):
    return (
        f'<w:fldSimple w:instr=" MERGEFIELD {expression} \\* MERGEFORMAT ">'
        f"<w:r><w:t>«{expression}»</w:t></w:r>"
        "</w:fldSimple>"
    )


def complex_field(expression):
    return (
        '<w:r><w:fldChar w:fldCharType="begin"/></w:r>'
        f'<w:r><w:instrText xml:space="preserve"> MERGEFIELD {expression} \\* MERGEFORMAT </w:instrText></w:r>'
        '<w:r><w:fldChar w:fldCharType="separate"/></w:r>'
        f"<w:r><w:rPr><w:b/></w:rPr><w:t>«{expression}»</w:t></w:r>"
        '<w:r><w:fldChar w:fldCharType="end"/></w:r>'
    )


def paragraph(*content):
    return f"<w:p>{''.join(content)}</w:p>"


def cell(*content):
    return f"<w:tc>{''.join(content)}</w:tc>"


def row(*cells):
    return f"<w:tr>{''.join(cells)}</w:tr>"


def table(*rows):
    return f"<w:tbl>{''.join(rows)}</w:tbl>"


def drawing(name="placeholder.png", rid="rId99"):
    return (
        "<w:r><w:drawing><wp:inline>"
        '<wp:docPr id="1" name="Picture 1"/>'
        "<a:graphic>"
        '<a:graphicData uri="http://schemas.openxmlformats.org/drawingml/2006/picture">'
        "<pic:pic>"
        f'<pic:nvPicPr><pic:cNvPr id="0" name="{name}"/><pic:cNvPicPr/></pic:nvPicPr>'
        f'<pic:blipFill><a:blip r:embed="{rid}"/></pic:blipFill>'
        "</pic:pic>"
        "</a:graphicData>"
        "</a:graphic>"
        "</wp:inline></w:drawing></w:r>"
    )


def document_xml(*body, section=SECTION_PROPERTIES):
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:document {NS_DECLARATIONS} mc:Ignorable="w14">'
        f"<w:body>{''.join(body)}{section}</w:body>"
        "</w:document>"
    )


def header_xml(*content):
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f"<w:hdr {NS_DECLARATIONS}>{''.join(content)}</w:hdr>"
    )


def document(*body, section=SECTION_PROPERTIES):
    """Parsed document root."""
    return ET.fromstring(document_xml(*body, section=section).encode("utf-8"))


def paragraph_texts(root):
    """Text of every paragraph under *root*, line breaks as newlines."""
    texts = []
    for p in root.iter(W_P):
        parts = []
        for node in p.iter():
            if node.tag == W_T:
                parts.append(node.text or "")
            elif node.tag == W_BR and node.get(qn("w:type")) != "page":
                parts.append("\n")
        texts.append("".join(parts))
    return texts
