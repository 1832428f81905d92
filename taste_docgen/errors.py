from __future__ import annotations


class DocGenError(Exception):
    pass


class InvocationFormatError(DocGenError, ValueError):
    def __init__(self, command: str) -> None:
        super().__init__(f'invalid invocation format: "{command}"')
        self.command = command


class ExternalProcessError(DocGenError, RuntimeError):
    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        output: str = "",
    ) -> None:
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)
        self.exit_code = exit_code
        self.output = output
