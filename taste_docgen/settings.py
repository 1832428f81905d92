from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

from . import config

SETTINGS_SCHEMA_VERSION = "1.0"


def _default_system_object_types() -> list[str]:
    return list(config.DEFAULT_SYSTEM_OBJECT_TYPES)


@dataclass
class GeneratorSettings:
    interface_view_path: str = "interfaceview.xml"
    deployment_view_path: str = "deploymentview.dv.xml"
    opus2_model_path: str = "opus2_model.xml"
    template_path: str = "sdd-template.docx"
    output_path: str = "sdd.docx"
    template_directory: str = ""
    target: str = ""
    template_processor_binary: str = config.DEFAULT_TEMPLATE_PROCESSOR_BINARY
    system_object_exporter_binary: str = config.DEFAULT_SYSTEM_OBJECT_EXPORTER_BINARY
    system_object_types: list[str] = field(default_factory=_default_system_object_types)
    tag: str = config.DEFAULT_TAG
    log_retention_days: int = 5

    def validate(self) -> None:
        if not self.tag.strip():
            raise ValueError("settings tag must be non-empty")
        if self.log_retention_days < 0:
            raise ValueError("settings log_retention_days must be >= 0")

    def to_dict(self) -> dict[str, object]:
        data = asdict(self)
        data["schema_version"] = SETTINGS_SCHEMA_VERSION
        return data


def load_settings(path: str | Path | None = None) -> GeneratorSettings:
    settings_path = config.resolve_settings_path(path)
    if not settings_path.is_file():
        return GeneratorSettings()
    try:
        raw = json.loads(settings_path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return GeneratorSettings()
    if not isinstance(raw, dict):
        return GeneratorSettings()
    return _settings_from_dict(raw)


def save_settings(settings: GeneratorSettings, path: str | Path | None = None) -> Path:
    settings.validate()
    settings_path = config.resolve_settings_path(path)
    settings_path.parent.mkdir(parents=True, exist_ok=True)
    settings_path.write_text(
        json.dumps(settings.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8"
    )
    return settings_path


def _settings_from_dict(data: dict[str, object]) -> GeneratorSettings:
    defaults = GeneratorSettings()
    values: dict[str, object] = {}
    for item in fields(GeneratorSettings):
        if item.name not in data:
            continue
        value = data[item.name]
        default = getattr(defaults, item.name)
        if item.name == "system_object_types":
            if isinstance(value, str):
                value = [part.strip() for part in value.split(",") if part.strip()]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                continue
        elif isinstance(value, bool) or not isinstance(value, type(default)):
            continue
        values[item.name] = value
    settings = GeneratorSettings(**values)
    try:
        settings.validate()
    except ValueError:
        return defaults
    return settings
