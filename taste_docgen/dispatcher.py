from __future__ import annotations

import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from docx.document import Document as DocxDocument

from . import config
from .errors import ExternalProcessError, InvocationFormatError
from .hooks import Hook
from .merge_engine import MergeReport, insert_document
from .process_runner import CommandRunner
from .run_log import RunLogState

if TYPE_CHECKING:
    from .assembler import Context


def build_template_processor_args(
    context: Context,
    template_path: str | Path,
    output_dir: str | Path,
) -> list[str]:
    args = [
        "--verbosity",
        "info",
        "--iv",
        str(context.interface_view_path),
        "--dv",
        str(context.deployment_view_path),
        "-o",
        str(output_dir),
        "-t",
        str(template_path),
        "-p",
        context.profile,
    ]
    if context.target:
        args.extend(["--value", f"TARGET={context.target}"])
    for csv_path in context.system_object_csv_files:
        args.extend(["-s", str(csv_path)])
    return args


def resolve_document_path(context: Context, argument: str) -> Path:
    path = Path(argument)
    if not path.is_absolute():
        path = Path(context.template_directory) / path
    if not path.is_file():
        raise FileNotFoundError(f"document not found: {path}")
    return path


class CommandDispatcher:
    def __init__(
        self,
        context: Context,
        process_runner: CommandRunner,
        log_state: RunLogState | None = None,
    ) -> None:
        self.context = context
        self.process_runner = process_runner
        self.log_state = log_state

    def dispatch(self, document: DocxDocument, hook: Hook) -> MergeReport | None:
        verb = hook.verb
        if verb == config.TEMPLATE_VERB:
            handler = self._instantiate_template
        elif verb == config.DOCUMENT_VERB:
            handler = self._include_document
        else:
            return None
        if self.log_state is not None:
            self.log_state.hooks.append(hook.command)
        report = handler(document, hook)
        if self.log_state is not None:
            self.log_state.merges.append(report.summary())
        return report

    def _single_argument(self, hook: Hook) -> str:
        args = hook.args
        if len(args) != 1:
            raise InvocationFormatError(" ".join(hook.tokens))
        return args[0]

    def _instantiate_template(self, document: DocxDocument, hook: Hook) -> MergeReport:
        argument = self._single_argument(hook)
        template_path = Path(self.context.template_directory) / argument
        binary = self.context.template_processor_binary or config.DEFAULT_TEMPLATE_PROCESSOR_BINARY
        with tempfile.TemporaryDirectory(
            prefix=config.WORKING_DIR_PREFIX,
            dir=self.context.temporary_directory,
        ) as scratch:
            output_dir = Path(scratch)
            args = build_template_processor_args(self.context, template_path, output_dir)
            result = self.process_runner.run(binary, args, timeout=self.context.process_timeout)
            if result.exit_code != 0:
                raise ExternalProcessError(
                    f"template processor exited with code {result.exit_code} for {template_path}",
                    exit_code=result.exit_code,
                    output=result.combined_output,
                )
            produced = output_dir / f"{Path(argument).stem}.docx"
            if not produced.is_file():
                raise ExternalProcessError(
                    f"template processor did not produce {produced}",
                    exit_code=result.exit_code,
                    output=result.combined_output,
                )
            return insert_document(
                document,
                produced,
                hook.paragraph,
                log_state=self.log_state,
                style_suffix=self.context.style_id_suffix,
            )

    def _include_document(self, document: DocxDocument, hook: Hook) -> MergeReport:
        argument = self._single_argument(hook)
        source_path = resolve_document_path(self.context, argument)
        return insert_document(
            document,
            source_path,
            hook.paragraph,
            log_state=self.log_state,
            style_suffix=self.context.style_id_suffix,
        )
