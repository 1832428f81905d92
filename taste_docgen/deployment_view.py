from __future__ import annotations

from pathlib import Path

from lxml import etree


def _local_name(element: etree._Element) -> str:
    if not isinstance(element.tag, str):
        return ""
    return etree.QName(element).localname.lower()


def get_target_name(deployment_view_path: str | Path | None) -> str | None:
    if not deployment_view_path:
        return None
    path = Path(deployment_view_path)
    if not path.is_file():
        return None
    try:
        tree = etree.parse(str(path))
    except (OSError, etree.XMLSyntaxError):
        return None

    best_name: str | None = None
    best_count = -1
    for element in tree.getroot().iter():
        if _local_name(element) != "partition":
            continue
        count = sum(
            1
            for child in element.iterdescendants()
            if _local_name(child) == "function"
        )
        if count > best_count:
            best_count = count
            best_name = element.get("name")
    return best_name
