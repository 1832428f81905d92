from __future__ import annotations

import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol

from . import config
from .assembler import Context, DocumentAssembler
from .errors import ExternalProcessError
from .process_runner import CommandRunner, ProcessRunner

_CSV_FALLBACK_NAME = "system_object"


class TemplateAssembler(Protocol):
    def process_template(self, context: Context, template_path, output_path): ...


@dataclass
class Parameters:
    template_path: str | Path | None = None
    interface_view_path: str | Path | None = None
    deployment_view_path: str | Path | None = None
    opus2_model_path: str | Path | None = None
    output_path: str | Path | None = None
    target: str | None = None
    template_directory: str | Path = ""
    template_processor_binary: str | None = None
    system_object_exporter_binary: str | None = None
    system_object_types: list[str] | None = None
    tag: str = config.DEFAULT_TAG
    process_timeout: float | None = config.DEFAULT_PROCESS_TIMEOUT_SEC


def normalize_system_object_types(requested: Iterable[str | None] | None) -> list[str]:
    normalized: list[str] = []
    seen: set[str] = set()
    for item in requested or ():
        value = (item or "").strip()
        if not value:
            continue
        key = value.casefold()
        if key in seen:
            continue
        seen.add(key)
        normalized.append(value)
    return normalized or list(config.DEFAULT_SYSTEM_OBJECT_TYPES)


def build_csv_file_name(system_object_type: str | None) -> str:
    trimmed = (system_object_type or "").strip()
    name = "".join(ch.lower() if ch.isalnum() else "_" for ch in trimmed)
    return f"{name or _CSV_FALLBACK_NAME}.csv"


class Orchestrator:
    def __init__(
        self,
        document_assembler: TemplateAssembler | None = None,
        process_runner: CommandRunner | None = None,
    ) -> None:
        self.process_runner = process_runner or ProcessRunner()
        self.document_assembler = document_assembler or DocumentAssembler(self.process_runner)

    def generate(self, parameters: Parameters) -> Path:
        template_path = _ensure_existing_file(parameters.template_path, "template_path")
        interface_view_path = _ensure_existing_file(parameters.interface_view_path, "interface_view_path")
        deployment_view_path = _ensure_existing_file(parameters.deployment_view_path, "deployment_view_path")
        output_path = _ensure_writable_path(parameters.output_path, "output_path")
        target = (parameters.target or "").strip() or None
        opus2_model_path = None
        if target:
            opus2_model_path = _ensure_existing_file(parameters.opus2_model_path, "opus2_model_path")
        exporter_binary = (
            parameters.system_object_exporter_binary or ""
        ).strip() or config.DEFAULT_SYSTEM_OBJECT_EXPORTER_BINARY
        system_object_types = normalize_system_object_types(parameters.system_object_types)

        working_dir = Path(tempfile.mkdtemp(prefix=config.WORKING_DIR_PREFIX))
        exports_dir = working_dir / "exports"
        assembler_dir = working_dir / "assembler"
        try:
            exports_dir.mkdir(parents=True, exist_ok=True)
            assembler_dir.mkdir(parents=True, exist_ok=True)
            csv_files: list[str | Path] = []
            if target:
                csv_files = self._export_system_objects(
                    exporter_binary,
                    system_object_types,
                    opus2_model_path,
                    target,
                    exports_dir,
                    parameters.process_timeout,
                )
            context = Context(
                interface_view_path=interface_view_path,
                deployment_view_path=deployment_view_path,
                target=target,
                template_directory=parameters.template_directory or "",
                temporary_directory=assembler_dir,
                template_processor_binary=parameters.template_processor_binary,
                system_object_csv_files=csv_files,
                tag=parameters.tag or config.DEFAULT_TAG,
                process_timeout=parameters.process_timeout,
            )
            self.document_assembler.process_template(context, template_path, output_path)
        finally:
            shutil.rmtree(working_dir, ignore_errors=True)
        return output_path

    def _export_system_objects(
        self,
        exporter_binary: str,
        system_object_types: list[str],
        model_path: Path,
        target: str,
        output_dir: Path,
        timeout: float | None,
    ) -> list[str | Path]:
        csv_files: list[str | Path] = []
        for system_object_type in system_object_types:
            csv_path = output_dir / build_csv_file_name(system_object_type)
            args = [
                "--model",
                str(model_path),
                "--deployment-target",
                target,
                "--system-object-type",
                system_object_type,
                "--output",
                str(csv_path),
            ]
            result = self.process_runner.run(exporter_binary, args, timeout=timeout)
            if result.exit_code != 0:
                raise ExternalProcessError(
                    f"system object exporter exited with code {result.exit_code}",
                    exit_code=result.exit_code,
                    output=result.combined_output,
                )
            if not csv_path.is_file():
                raise ExternalProcessError(
                    f"system object exporter did not create expected file {csv_path}",
                    exit_code=result.exit_code,
                    output=result.combined_output,
                )
            csv_files.append(csv_path)
        return csv_files


def _require(value: str | Path | None, name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"parameter {name} must be provided")
    return text


def _ensure_existing_file(value: str | Path | None, name: str) -> Path:
    path = Path(_require(value, name))
    if not path.is_file():
        raise FileNotFoundError(f"file not found: {path}")
    return path


def _ensure_writable_path(value: str | Path | None, name: str) -> Path:
    path = Path(_require(value, name))
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
