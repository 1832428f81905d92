from __future__ import annotations

from docx.document import Document as DocxDocument
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.parts.image import ImagePart

from . import config
from .run_log import RunLogState, warn

MEDIA_KINDS = {
    "image/png": ("image/png", "png"),
    "image/jpeg": ("image/jpeg", "jpeg"),
    "image/jpg": ("image/jpeg", "jpeg"),
    "image/gif": ("image/gif", "gif"),
    "image/bmp": ("image/bmp", "bmp"),
    "image/tiff": ("image/tiff", "tiff"),
    "image/x-icon": ("image/x-icon", "ico"),
    "image/x-emf": ("image/x-emf", "emf"),
    "image/x-wmf": ("image/x-wmf", "wmf"),
    "image/svg+xml": ("image/svg+xml", "svg"),
}
DEFAULT_MEDIA_KIND = (config.DEFAULT_IMAGE_CONTENT_TYPE, "png")


def media_kind(content_type: str | None) -> tuple[str, str] | None:
    if not content_type:
        return None
    return MEDIA_KINDS.get(content_type.strip().lower())


def merge_images(
    target: DocxDocument,
    source: DocxDocument,
    log_state: RunLogState | None = None,
) -> dict[str, str]:
    target_part = target.part
    package = target_part.package
    image_map: dict[str, str] = {}
    for r_id, rel in list(source.part.rels.items()):
        if rel.reltype != RT.IMAGE or rel.is_external:
            continue
        source_image = rel.target_part
        kind = media_kind(source_image.content_type)
        if kind is None:
            warn(
                log_state,
                rule="image",
                reason=f"unsupported content type {source_image.content_type!r}, stored as {DEFAULT_MEDIA_KIND[0]}",
                source=str(source_image.partname),
            )
            kind = DEFAULT_MEDIA_KIND
        content_type, ext = kind
        partname = package.next_partname(f"/word/media/image%d.{ext}")
        image_part = ImagePart(partname, content_type, source_image.blob)
        image_map[r_id] = target_part.relate_to(image_part, RT.IMAGE)
    return image_map
