from __future__ import annotations

from pathlib import Path
from typing import Any

from docx import Document
from docx.document import Document as DocxDocument
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.opc.exceptions import PackageNotFoundError
from docx.opc.packuri import PackURI
from docx.opc.part import Part, PartFactory, XmlPart
from docx.oxml.ns import qn
from docx.parts.numbering import NumberingPart
from docx.parts.styles import StylesPart
from lxml import etree

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
A_NS = "http://schemas.openxmlformats.org/drawingml/2006/main"
NS = {"w": W_NS, "r": R_NS, "a": A_NS}

RT_STYLES_WITH_EFFECTS = "http://schemas.microsoft.com/office/2007/relationships/stylesWithEffects"
CT_STYLES = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
CT_STYLES_WITH_EFFECTS = "application/vnd.ms-word.stylesWithEffects+xml"
CT_NUMBERING = "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"

NUMBERING_PARTNAME = "/word/numbering.xml"
STYLES_PARTNAME = "/word/styles.xml"
STYLES_WITH_EFFECTS_PARTNAME = "/word/stylesWithEffects.xml"

EMPTY_NUMBERING_XML = (
    f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n<w:numbering xmlns:w="{W_NS}"/>'
).encode("utf-8")
EMPTY_STYLES_XML = (
    f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n<w:styles xmlns:w="{W_NS}"/>'
).encode("utf-8")

W_P = qn("w:p")
W_T = qn("w:t")
W_R = qn("w:r")
W_TBL = qn("w:tbl")
W_SECTPR = qn("w:sectPr")
W_STYLE_ID = qn("w:styleId")
W_DEFAULT = qn("w:default")
W_VAL = qn("w:val")
W_ABSTRACT_NUM = qn("w:abstractNum")
W_ABSTRACT_NUM_ID = qn("w:abstractNumId")
W_NUM = qn("w:num")
W_NUM_ID = qn("w:numId")
W_NUM_ID_MAC_AT_CLEANUP = qn("w:numIdMacAtCleanup")
R_EMBED = qn("r:embed")
A_BLIP = qn("a:blip")

# stylesWithEffects is not mapped by python-docx; load it as XML so it can be edited.
PartFactory.part_type_for.setdefault(CT_STYLES_WITH_EFFECTS, XmlPart)


def open_package(path: str | Path) -> DocxDocument:
    try:
        return Document(str(path))
    except PackageNotFoundError as exc:
        raise ValueError(f"invalid docx file: {path}") from exc
    except etree.XMLSyntaxError as exc:
        raise ValueError(f"invalid docx file: {path} ({exc})") from exc


def related_part(part: Part, reltype: str) -> Part | None:
    try:
        return part.part_related_by(reltype)
    except KeyError:
        return None


def body_of(document: DocxDocument) -> Any | None:
    return document.element.body


def ensure_numbering_part(document: DocxDocument) -> XmlPart:
    main_part = document.part
    part = related_part(main_part, RT.NUMBERING)
    if part is None:
        part = NumberingPart.load(
            PackURI(NUMBERING_PARTNAME),
            CT_NUMBERING,
            EMPTY_NUMBERING_XML,
            main_part.package,
        )
        main_part.relate_to(part, RT.NUMBERING)
    return part


def ensure_style_parts(document: DocxDocument) -> tuple[XmlPart, XmlPart]:
    main_part = document.part
    styles = related_part(main_part, RT.STYLES)
    if styles is None:
        styles = StylesPart.load(
            PackURI(STYLES_PARTNAME),
            CT_STYLES,
            EMPTY_STYLES_XML,
            main_part.package,
        )
        main_part.relate_to(styles, RT.STYLES)
    effects = related_part(main_part, RT_STYLES_WITH_EFFECTS)
    if effects is None:
        effects = XmlPart.load(
            PackURI(STYLES_WITH_EFFECTS_PARTNAME),
            CT_STYLES_WITH_EFFECTS,
            EMPTY_STYLES_XML,
            main_part.package,
        )
        main_part.relate_to(effects, RT_STYLES_WITH_EFFECTS)
    return styles, effects


def find_style_parts(document: DocxDocument) -> tuple[XmlPart | None, XmlPart | None]:
    found: list[XmlPart | None] = []
    for reltype in (RT.STYLES, RT_STYLES_WITH_EFFECTS):
        part = related_part(document.part, reltype)
        found.append(part if isinstance(part, XmlPart) else None)
    return found[0], found[1]


def extract_paragraph_text(paragraph: etree._Element) -> str:
    texts: list[str] = []
    for node in paragraph.iterfind(".//w:t", namespaces=NS):
        if node.text:
            texts.append(node.text)
    return "".join(texts)


def document_text(document: DocxDocument) -> str:
    body = body_of(document)
    if body is None:
        return ""
    return "".join(node.text or "" for node in body.iter(W_T))


def parse_int(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None
