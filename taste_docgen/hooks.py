from __future__ import annotations

import re
from dataclasses import dataclass

from docx.document import Document as DocxDocument
from docx.text.paragraph import Paragraph

from . import config
from .ooxml import W_P, body_of, extract_paragraph_text


@dataclass(frozen=True)
class HookSyntax:
    tag: str = config.DEFAULT_TAG
    open: str = config.HOOK_OPEN
    close: str = config.HOOK_CLOSE

    @property
    def begin(self) -> str:
        return f"{self.open}{self.tag}"

    def extract_command(self, text: str) -> str | None:
        text = text.strip()
        begin = self.begin
        if len(text) < len(begin) + len(self.close):
            return None
        if not (text.startswith(begin) and text.endswith(self.close)):
            return None
        return text[len(begin) : len(text) - len(self.close)].strip()


@dataclass
class Hook:
    paragraph: Paragraph
    command: str

    @property
    def tokens(self) -> list[str]:
        return self.command.split()

    @property
    def verb(self) -> str:
        tokens = self.tokens
        return tokens[0] if tokens else ""

    @property
    def args(self) -> list[str]:
        return self.tokens[1:]


def find_hooks(
    document: DocxDocument,
    verb: str,
    syntax: HookSyntax | None = None,
) -> list[Hook]:
    syntax = syntax or HookSyntax()
    body = body_of(document)
    if body is None:
        return []
    verb_pattern = re.compile(rf"{re.escape(verb)}\b")
    hooks: list[Hook] = []
    for p in body.iter(W_P):
        command = syntax.extract_command(extract_paragraph_text(p))
        if command is None or not verb_pattern.match(command):
            continue
        hooks.append(Hook(paragraph=Paragraph(p, document), command=command))
    return hooks
