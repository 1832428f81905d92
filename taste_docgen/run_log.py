from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from . import config


@dataclass
class WarningEntry:
    rule: str
    reason: str
    source: str | None = None
    style_id: str | None = None


@dataclass
class RunLogState:
    template_path: Path
    output_path: Path
    start_time: datetime
    hooks: list[str] = field(default_factory=list)
    merges: list[str] = field(default_factory=list)
    warnings: list[WarningEntry] = field(default_factory=list)
    error: str | None = None
    elapsed_sec: float | None = None


def warn(
    log_state: RunLogState | None,
    rule: str,
    reason: str,
    source: str | None = None,
    style_id: str | None = None,
) -> None:
    if log_state is None:
        return
    log_state.warnings.append(
        WarningEntry(
            rule=rule,
            reason=reason,
            source=source,
            style_id=style_id,
        )
    )


def write_log(log_state: RunLogState) -> Path:
    config.ensure_base_dirs()
    log_path = config.build_log_path(log_state.start_time)
    lines = [
        f"template_path: {log_state.template_path}",
        f"output_path: {log_state.output_path}",
        f"elapsed_sec: {log_state.elapsed_sec:.3f}"
        if log_state.elapsed_sec is not None
        else "elapsed_sec: unknown",
        f"hooks_count: {len(log_state.hooks)}",
    ]
    for hook in log_state.hooks:
        lines.append(f"hook: {hook}")
    for merge in log_state.merges:
        lines.append(f"merge: {merge}")
    if log_state.error:
        lines.append(f"error: {log_state.error}")
    lines.append(f"warnings_count: {len(log_state.warnings)}")
    for warning in log_state.warnings:
        parts = [f"rule={warning.rule}", f"reason={warning.reason}"]
        if warning.source:
            parts.append(f"source={warning.source}")
        if warning.style_id:
            parts.append(f"style_id={warning.style_id}")
        lines.append("warning: " + " ".join(parts))
    log_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return log_path
