"""Host-syntax parsing and edit-based printing.

Trees produced by tree-sitter are immutable, so rewrites are recorded as
byte-range edits against the original source. Printing splices the edits
into the original bytes, which leaves every untouched region byte-for-byte
identical to the input.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import cast

from tree_sitter import Node, Tree
from tree_sitter_language_pack import SupportedLanguage, get_parser

from image_codemod.core.errors import EditConflictError, HostSyntaxError
from image_codemod.core.languages import detect_dialect_from_path, dialect_candidates


@dataclass(frozen=True)
class TextEdit:
    start: int
    end: int
    replacement: bytes


class SourceUnit:
    """One file being transformed: its original text, tree and pending edits."""

    def __init__(self, path: str, original_text: str, dialect: str, tree: Tree, source: bytes) -> None:
        self.path = path
        self.original_text = original_text
        self.dialect = dialect
        self.tree = tree
        self.source = source
        self.changed = False
        self._edits: list[TextEdit] = []

    @property
    def root(self) -> Node:
        return self.tree.root_node

    @property
    def edits(self) -> tuple[TextEdit, ...]:
        return tuple(sorted(self._edits, key=lambda edit: edit.start))

    def original(self, node: Node) -> str:
        """Return the node's text as it appears in the input."""
        return self.source[node.start_byte : node.end_byte].decode("utf-8")

    def text(self, node: Node) -> str:
        """Return the node's text with any edits made inside it applied."""
        return self.text_range(node.start_byte, node.end_byte)

    def text_range(self, start: int, end: int) -> str:
        return self._render(start, end).decode("utf-8")

    def is_replaced(self, node: Node) -> bool:
        """True when the node lies inside a region some rewrite already replaced."""
        return any(edit.start <= node.start_byte and node.end_byte <= edit.end for edit in self._edits)

    def replace(self, node: Node, text: str) -> None:
        self.replace_range(node.start_byte, node.end_byte, text)

    def replace_range(self, start: int, end: int, text: str) -> None:
        kept: list[TextEdit] = []
        for edit in self._edits:
            if start <= edit.start and edit.end <= end:
                # absorbed: the new text was rendered from it
                continue
            if edit.start < end and start < edit.end:
                raise EditConflictError(self.path, start, end)
            kept.append(edit)
        kept.append(TextEdit(start, end, text.encode("utf-8")))
        self._edits = kept
        self.changed = True

    def render(self) -> str:
        if not self.changed:
            return self.original_text
        return self._render(0, len(self.source)).decode("utf-8")

    def _render(self, start: int, end: int) -> bytes:
        parts: list[bytes] = []
        cursor = start
        for edit in self.edits:
            if edit.start < start or edit.end > end:
                continue
            parts.append(self.source[cursor : edit.start])
            parts.append(edit.replacement)
            cursor = edit.end
        parts.append(self.source[cursor:end])
        return b"".join(parts)


def _first_error(node: Node) -> Node | None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def parse_source(text: str, path: str) -> SourceUnit:
    """Parse ``text`` with the grammar selected by the extension of ``path``.

    Raises ``HostSyntaxError`` when the extension is unknown or when every
    candidate grammar reports a syntax error.
    """
    try:
        dialect = detect_dialect_from_path(Path(path))
    except ValueError as exc:
        raise HostSyntaxError(path, f"dialect cannot be determined ({exc})") from None

    source = text.encode("utf-8")
    error_node: Node | None = None
    for candidate in dialect_candidates(dialect):
        tree = get_parser(cast(SupportedLanguage, candidate)).parse(source)
        if not tree.root_node.has_error:
            return SourceUnit(path, text, candidate, tree, source)
        if error_node is None:
            error_node = _first_error(tree.root_node) or tree.root_node

    assert error_node is not None
    line, column = error_node.start_point
    reason = "missing syntax" if error_node.is_missing else "unexpected syntax"
    raise HostSyntaxError(path, reason, line + 1, column + 1)
