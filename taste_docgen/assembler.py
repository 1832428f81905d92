from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from time import perf_counter

from . import config
from .dispatcher import CommandDispatcher
from .hooks import HookSyntax, find_hooks
from .ooxml import open_package
from .process_runner import CommandRunner, ProcessRunner
from .run_log import RunLogState, write_log


@dataclass
class Context:
    interface_view_path: str | Path
    deployment_view_path: str | Path
    target: str | None = None
    template_directory: str | Path = ""
    temporary_directory: str | Path | None = None
    template_processor_binary: str | None = None
    system_object_csv_files: list[str | Path] = field(default_factory=list)
    tag: str = config.DEFAULT_TAG
    profile: str = config.DEFAULT_TEMPLATE_PROFILE
    process_timeout: float | None = config.DEFAULT_PROCESS_TIMEOUT_SEC
    style_id_suffix: str = config.STYLE_ID_SUFFIX


class DocumentAssembler:
    def __init__(self, process_runner: CommandRunner | None = None) -> None:
        self.process_runner = process_runner or ProcessRunner()
        self._last_log_state: RunLogState | None = None

    @property
    def last_log_state(self) -> RunLogState | None:
        return self._last_log_state

    def process_template(
        self,
        context: Context,
        template_path: str | Path,
        output_path: str | Path,
    ) -> Path:
        template = Path(template_path)
        output = Path(output_path)
        started = perf_counter()
        log_state = RunLogState(
            template_path=template,
            output_path=output,
            start_time=datetime.now(),
        )
        try:
            _ensure_readable_file(template)
            self._assemble(context, template, output, log_state)
        except Exception as exc:
            log_state.error = str(exc)
            log_state.elapsed_sec = perf_counter() - started
            try:
                write_log(log_state)
            except OSError:
                pass
            self._last_log_state = log_state
            raise
        log_state.elapsed_sec = perf_counter() - started
        write_log(log_state)
        self._last_log_state = log_state
        return output

    def _assemble(
        self,
        context: Context,
        template: Path,
        output: Path,
        log_state: RunLogState,
    ) -> None:
        output.parent.mkdir(parents=True, exist_ok=True)
        if context.temporary_directory is not None:
            Path(context.temporary_directory).mkdir(parents=True, exist_ok=True)
        if template.resolve() != output.resolve():
            shutil.copyfile(template, output)

        document = open_package(output)
        syntax = HookSyntax(tag=context.tag)
        dispatcher = CommandDispatcher(context, self.process_runner, log_state)
        for verb in (config.TEMPLATE_VERB, config.DOCUMENT_VERB):
            for hook in find_hooks(document, verb, syntax):
                dispatcher.dispatch(document, hook)
        document.save(str(output))


def _ensure_readable_file(path: Path) -> None:
    if not path.exists():
        raise FileNotFoundError(f"template not found: {path}")
    if not path.is_file():
        raise IsADirectoryError(f"template path is not a file: {path}")
    try:
        with path.open("rb"):
            pass
    except PermissionError as exc:
        raise PermissionError(f"template is not readable: {path}") from exc
