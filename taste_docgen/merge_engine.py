from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path

from docx.document import Document as DocxDocument
from docx.text.paragraph import Paragraph

from . import config
from .image_merge import merge_images
from .numbering_merge import merge_numbering
from .ooxml import W_SECTPR, body_of, open_package
from .reference_rewriter import ReferenceMaps, rewrite_references
from .run_log import RunLogState, warn
from .style_merge import merge_styles


@dataclass
class MergeReport:
    source_path: Path
    inserted: int = 0
    maps: ReferenceMaps = field(default_factory=ReferenceMaps)

    def summary(self) -> str:
        return (
            f"{self.source_path} inserted={self.inserted} "
            f"numbering={len(self.maps.numbering)} "
            f"styles_renamed={len(self.maps.styles)} "
            f"images={len(self.maps.images)}"
        )


def insert_document(
    target: DocxDocument,
    source_path: str | Path,
    anchor: Paragraph,
    log_state: RunLogState | None = None,
    style_suffix: str = config.STYLE_ID_SUFFIX,
) -> MergeReport:
    source_path = Path(source_path)
    report = MergeReport(source_path=source_path)
    anchor.clear()

    source = open_package(source_path)
    source_body = body_of(source)
    if source_body is None:
        warn(log_state, rule="merge", reason="source document has no body", source=str(source_path))
        return report

    # styles carry numIds, so numbering is remapped first
    numbering_map = merge_numbering(target, source, log_state)
    style_map = merge_styles(target, source, numbering_map, suffix=style_suffix)
    image_map = merge_images(target, source, log_state)
    report.maps = ReferenceMaps(numbering=numbering_map, styles=style_map, images=image_map)

    cursor = anchor._p
    for child in source_body:
        if child.tag == W_SECTPR:
            continue
        clone = deepcopy(child)
        rewrite_references(clone, report.maps)
        cursor.addnext(clone)
        cursor = clone
        report.inserted += 1
    return report
