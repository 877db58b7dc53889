"""Error taxonomy for the image codemod.

Structural failures (host syntax, query syntax, conflicting edits) abort the
transform of a single file and propagate to the caller. Usage ambiguities are
not errors: they are reported as ``Notice`` records and logged.
"""

_ROOT_HINT = (
    "If you are running against a subdirectory of a project with a custom parser setup, "
    "try running from the root of the project."
)


class CodemodError(Exception):
    """Base class for errors raised while transforming one file."""


class HostSyntaxError(SyntaxError, CodemodError):
    """The host source could not be parsed into a syntax tree."""

    def __init__(self, path: str, reason: str, line: int | None = None, column: int | None = None) -> None:
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"Unable to parse {path}{location}: {reason}. {_ROOT_HINT}")
        self.path = path
        self.reason = reason
        self.filename = path
        self.lineno = line
        self.offset = column


class QuerySyntaxError(CodemodError):
    """An embedded GraphQL document failed to parse."""

    def __init__(self, path: str, query: str, message: str) -> None:
        super().__init__(f"GraphQL syntax error in query in {path}:\n\n{query}\n\nmessage:\n\n{message}")
        self.path = path
        self.query = query
        self.message = message


class EditConflictError(CodemodError):
    """A source edit overlaps a region that was already rewritten."""

    def __init__(self, path: str, start: int, end: int) -> None:
        super().__init__(f"Conflicting rewrite of bytes {start}-{end} in {path}")
        self.path = path
        self.start = start
        self.end = end
