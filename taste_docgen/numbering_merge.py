from __future__ import annotations

from copy import deepcopy
from typing import Iterable

from docx.document import Document as DocxDocument
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from lxml import etree

from .ooxml import (
    NS,
    W_ABSTRACT_NUM,
    W_ABSTRACT_NUM_ID,
    W_NUM,
    W_NUM_ID,
    W_NUM_ID_MAC_AT_CLEANUP,
    W_VAL,
    ensure_numbering_part,
    parse_int,
    related_part,
)
from .run_log import RunLogState, warn


def used_abstract_ids(numbering: etree._Element) -> set[int]:
    ids: set[int] = set()
    for abstract in numbering.findall("w:abstractNum", namespaces=NS):
        value = parse_int(abstract.get(W_ABSTRACT_NUM_ID))
        if value is not None:
            ids.add(value)
    return ids


def used_numbering_ids(numbering: etree._Element) -> set[int]:
    ids: set[int] = set()
    for num in numbering.findall("w:num", namespaces=NS):
        value = parse_int(num.get(W_NUM_ID))
        if value is not None:
            ids.add(value)
    return ids


def next_free_id(used: Iterable[int], floor: int) -> int:
    used = list(used)
    if not used:
        return floor
    return max(max(used) + 1, floor)


def merge_numbering(
    target: DocxDocument,
    source: DocxDocument,
    log_state: RunLogState | None = None,
) -> dict[int, int]:
    target_root = ensure_numbering_part(target).element
    source_part = related_part(source.part, RT.NUMBERING)
    if source_part is None:
        return {}
    source_root = source_part.element

    next_abstract_id = next_free_id(used_abstract_ids(target_root), floor=0)
    next_num_id = next_free_id(used_numbering_ids(target_root), floor=1)

    abstract_map: dict[int, int] = {}
    for abstract in source_root.findall("w:abstractNum", namespaces=NS):
        clone = deepcopy(abstract)
        clone.set(W_ABSTRACT_NUM_ID, str(next_abstract_id))
        _insert_in_order(target_root, clone, W_ABSTRACT_NUM, (W_NUM, W_NUM_ID_MAC_AT_CLEANUP))
        old_id = parse_int(abstract.get(W_ABSTRACT_NUM_ID))
        if old_id is not None:
            abstract_map[old_id] = next_abstract_id
        next_abstract_id += 1

    numbering_map: dict[int, int] = {}
    for num in source_root.findall("w:num", namespaces=NS):
        clone = deepcopy(num)
        clone.set(W_NUM_ID, str(next_num_id))
        abstract_ref = clone.find("w:abstractNumId", namespaces=NS)
        if abstract_ref is not None:
            old_ref = parse_int(abstract_ref.get(W_VAL))
            if old_ref in abstract_map:
                abstract_ref.set(W_VAL, str(abstract_map[old_ref]))
            else:
                warn(
                    log_state,
                    rule="numbering",
                    reason=(
                        f"numId {num.get(W_NUM_ID)} references undefined "
                        f"abstractNumId {abstract_ref.get(W_VAL)}"
                    ),
                )
        _insert_in_order(target_root, clone, W_NUM, (W_NUM_ID_MAC_AT_CLEANUP,))
        old_id = parse_int(num.get(W_NUM_ID))
        if old_id is not None:
            numbering_map[old_id] = next_num_id
        next_num_id += 1
    return numbering_map


def _insert_in_order(
    root: etree._Element,
    element: etree._Element,
    tag: str,
    following_tags: tuple[str, ...],
) -> None:
    # w:numbering children are ordered: abstractNum*, num*, numIdMacAtCleanup?
    siblings = [child for child in root if child.tag == tag]
    if siblings:
        siblings[-1].addnext(element)
        return
    for child in root:
        if child.tag in following_tags:
            child.addprevious(element)
            return
    root.append(element)
