from __future__ import annotations

from copy import deepcopy

from docx.document import Document as DocxDocument
from lxml import etree

from . import config
from .ooxml import (
    NS,
    W_DEFAULT,
    W_STYLE_ID,
    W_VAL,
    ensure_style_parts,
    find_style_parts,
    parse_int,
)

_STYLE_LINK_TAGS = ("w:basedOn", "w:next", "w:link")


def style_ids(styles: etree._Element) -> set[str]:
    ids: set[str] = set()
    for style in styles.findall("w:style", namespaces=NS):
        style_id = style.get(W_STYLE_ID)
        if style_id:
            ids.add(style_id)
    return ids


def next_free_style_id(style_id: str, used: set[str], suffix: str = config.STYLE_ID_SUFFIX) -> str:
    candidate = f"{style_id}{suffix}"
    counter = 2
    while candidate in used:
        candidate = f"{style_id}{suffix}{counter}"
        counter += 1
    return candidate


def merge_styles(
    target: DocxDocument,
    source: DocxDocument,
    numbering_map: dict[int, int],
    suffix: str = config.STYLE_ID_SUFFIX,
) -> dict[str, str]:
    target_parts = ensure_style_parts(target)
    source_parts = find_style_parts(source)

    used: set[str] = set()
    for part in target_parts:
        used.update(style_ids(part.element))

    style_map: dict[str, str] = {}
    # A source ID present in both containers is decided once.
    decided: dict[str, str] = {}
    clones: list[etree._Element] = []
    for target_part, source_part in zip(target_parts, source_parts):
        if source_part is None:
            continue
        target_root = target_part.element
        for style in source_part.element.findall("w:style", namespaces=NS):
            clone = deepcopy(style)
            old_id = clone.get(W_STYLE_ID)
            if old_id:
                new_id = decided.get(old_id)
                if new_id is None:
                    new_id = old_id
                    if old_id in used:
                        new_id = next_free_style_id(old_id, used, suffix)
                        style_map[old_id] = new_id
                    decided[old_id] = new_id
                    used.add(new_id)
                clone.set(W_STYLE_ID, new_id)
            if W_DEFAULT in clone.attrib:
                del clone.attrib[W_DEFAULT]
            _rewrite_style_numbering(clone, numbering_map)
            target_root.append(clone)
            clones.append(clone)

    if style_map:
        for clone in clones:
            _rewrite_style_links(clone, style_map)
    return style_map


def _rewrite_style_numbering(style: etree._Element, numbering_map: dict[int, int]) -> None:
    if not numbering_map:
        return
    for num_id in style.iterfind(".//w:numPr/w:numId", namespaces=NS):
        old_id = parse_int(num_id.get(W_VAL))
        if old_id in numbering_map:
            num_id.set(W_VAL, str(numbering_map[old_id]))


def _rewrite_style_links(style: etree._Element, style_map: dict[str, str]) -> None:
    for tag in _STYLE_LINK_TAGS:
        node = style.find(tag, namespaces=NS)
        if node is None:
            continue
        value = node.get(W_VAL)
        if value and value in style_map:
            node.set(W_VAL, style_map[value])
