from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from lxml import etree

from .ooxml import A_BLIP, NS, R_EMBED, W_P, W_R, W_TBL, W_VAL, parse_int


@dataclass
class ReferenceMaps:
    numbering: dict[int, int] = field(default_factory=dict)
    styles: dict[str, str] = field(default_factory=dict)
    images: dict[str, str] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.numbering or self.styles or self.images)


def _rewrite_style_ref(node: etree._Element | None, styles: dict[str, str]) -> None:
    if node is None:
        return
    value = node.get(W_VAL)
    if value and value in styles:
        node.set(W_VAL, styles[value])


def _rewrite_paragraph(element: etree._Element, maps: ReferenceMaps) -> None:
    _rewrite_style_ref(element.find("w:pPr/w:pStyle", namespaces=NS), maps.styles)
    num_id = element.find("w:pPr/w:numPr/w:numId", namespaces=NS)
    if num_id is not None:
        old_id = parse_int(num_id.get(W_VAL))
        if old_id in maps.numbering:
            num_id.set(W_VAL, str(maps.numbering[old_id]))


def _rewrite_run(element: etree._Element, maps: ReferenceMaps) -> None:
    _rewrite_style_ref(element.find("w:rPr/w:rStyle", namespaces=NS), maps.styles)


def _rewrite_table(element: etree._Element, maps: ReferenceMaps) -> None:
    _rewrite_style_ref(element.find("w:tblPr/w:tblStyle", namespaces=NS), maps.styles)


def _rewrite_blip(element: etree._Element, maps: ReferenceMaps) -> None:
    r_id = element.get(R_EMBED)
    if r_id and r_id in maps.images:
        element.set(R_EMBED, maps.images[r_id])


_HANDLERS: dict[str, Callable[[etree._Element, ReferenceMaps], None]] = {
    W_P: _rewrite_paragraph,
    W_R: _rewrite_run,
    W_TBL: _rewrite_table,
    A_BLIP: _rewrite_blip,
}


def rewrite_references(element: etree._Element, maps: ReferenceMaps) -> None:
    if maps.is_empty():
        return
    for node in element.iter():
        handler = _HANDLERS.get(node.tag)
        if handler is not None:
            handler(node, maps)
