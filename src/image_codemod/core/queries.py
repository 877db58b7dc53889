"""Rewrite legacy ``childImageSharp { fixed | fluid }`` selections in GraphQL documents.

The document is parsed with graphql-core independently of the host tree,
mutated during a single visit and printed back to text. Only the printed
text travels back to the host file.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from graphql import GraphQLError, Visitor, parse, print_ast, visit
from graphql.language import (
    ArgumentNode,
    DocumentNode,
    EnumValueNode,
    FieldNode,
    FragmentSpreadNode,
    NameNode,
    SelectionNode,
    SelectionSetNode,
)

from image_codemod.core.config import (
    IMAGE_DATA_FIELD,
    LEGACY_FRAGMENTS,
    LEGACY_FRAGMENTS_NO_PLACEHOLDER,
    LEGACY_FRAGMENTS_TRACED_SVG,
    PRESENTATION_SIZE_FRAGMENT,
    SHARP_FIELD,
    SIZE_PROPS,
)
from image_codemod.core.errors import QuerySyntaxError
from image_codemod.models import NoticeKind

logger = logging.getLogger(__name__)


class LayoutType(str, Enum):
    FIXED = "FIXED"
    FLUID = "FLUID"
    CONSTRAINED = "CONSTRAINED"


class Placeholder(str, Enum):
    NONE = "NONE"
    TRACED_SVG = "TRACED_SVG"
    BLURRED = "BLURRED"


_LAYOUTS = {
    "fixed": LayoutType.FIXED,
    "fluid": LayoutType.FLUID,
    "constrained": LayoutType.CONSTRAINED,
}


@dataclass
class QueryDocument:
    raw_text: str
    tree: DocumentNode
    changed: bool = False
    ambiguities: list[tuple[NoticeKind, str]] = field(default_factory=list)


def placeholder_for(fragment_name: str | None) -> Placeholder | None:
    """Map a legacy fragment name to the placeholder it implied.

    Returns ``None`` for the plain legacy fragments, whose blurred preview is
    already the default of the new field.
    """
    if fragment_name in LEGACY_FRAGMENTS:
        return None
    if fragment_name in LEGACY_FRAGMENTS_NO_PLACEHOLDER:
        return Placeholder.NONE
    if fragment_name in LEGACY_FRAGMENTS_TRACED_SVG:
        return Placeholder.TRACED_SVG
    return Placeholder.BLURRED


def _same_kind(items: Sequence[Any] | None, combined: list[Any]) -> Any:
    return tuple(combined) if isinstance(items, tuple) else combined


def _swapped(selections: Sequence[SelectionNode], old: SelectionNode, new: SelectionNode) -> Any:
    return _same_kind(selections, [new if selection is old else selection for selection in selections])


def _field_node(source: FieldNode, **changes: Any) -> FieldNode:
    """A copy of ``source`` with some of its parts replaced. Parsed nodes are never mutated."""
    parts = {
        "alias": source.alias,
        "name": source.name,
        "arguments": source.arguments,
        "directives": source.directives,
        "selection_set": source.selection_set,
    }
    parts.update(changes)
    return FieldNode(**parts)


def _argument(name: str, value: str) -> ArgumentNode:
    return ArgumentNode(name=NameNode(value=name), value=EnumValueNode(value=value))


def _fields_named(selections: Sequence[SelectionNode], names: Sequence[str]) -> list[FieldNode]:
    return [s for s in selections if isinstance(s, FieldNode) and s.name.value in names]


def _sub_selections(node: FieldNode) -> list[SelectionNode]:
    return list(node.selection_set.selections) if node.selection_set else []


class _ImageFieldVisitor(Visitor):
    def __init__(self, document: QueryDocument) -> None:
        super().__init__()
        self.document = document

    def enter_selection_set(self, node: SelectionSetNode, *_args: Any) -> SelectionSetNode | None:
        sharp_fields = _fields_named(node.selections, (SHARP_FIELD,))
        if not sharp_fields:
            return None
        sharp = sharp_fields[0]
        size_fields = _fields_named(_sub_selections(sharp), SIZE_PROPS)
        if not size_fields:
            return None
        if len(size_fields) > 1:
            self.document.ambiguities.append(
                (
                    NoticeKind.MULTIPLE_SIZE_FIELDS,
                    f"Only the first of {len(size_fields)} fixed/fluid fields under {SHARP_FIELD} was migrated.",
                )
            )

        assert sharp.selection_set is not None
        image_field = self._rewrite(size_fields[0])
        sharp_selections = _swapped(sharp.selection_set.selections, size_fields[0], image_field)
        new_sharp = _field_node(sharp, selection_set=SelectionSetNode(selections=sharp_selections))
        self.document.changed = True
        # the returned node replaces the visited one in the tree ``visit`` builds
        return SelectionSetNode(selections=_swapped(node.selections, sharp, new_sharp))

    def _rewrite(self, size_field: FieldNode) -> FieldNode:
        image_type = size_field.name.value
        selections = _sub_selections(size_field)

        spreads = [s for s in selections if isinstance(s, FragmentSpreadNode)]
        presentation = next((s for s in spreads if s.name.value == PRESENTATION_SIZE_FRAGMENT), None)
        if presentation is not None:
            image_type = "constrained"
            spreads.remove(presentation)

        if len(spreads) > 1:
            names = ", ".join(s.name.value for s in spreads)
            self.document.ambiguities.append(
                (
                    NoticeKind.MULTIPLE_FRAGMENT_SPREADS,
                    f"Placeholder derived from the first of several fragment spreads ({names}); verify it manually.",
                )
            )

        arguments = [_argument("layout", _LAYOUTS[image_type].value)]
        placeholder = placeholder_for(spreads[0].name.value if spreads else None)
        if placeholder is not None:
            arguments.append(_argument("placeholder", placeholder.value))

        return _field_node(
            size_field,
            name=NameNode(value=IMAGE_DATA_FIELD),
            arguments=_same_kind(size_field.arguments, [*(size_field.arguments or ()), *arguments]),
            selection_set=None,
        )


def parse_query(raw_text: str, path: str) -> QueryDocument:
    try:
        tree = parse(raw_text)
    except GraphQLError as exc:
        raise QuerySyntaxError(path, raw_text, exc.message) from exc
    return QueryDocument(raw_text=raw_text, tree=tree)


def rewrite_document(document: QueryDocument) -> bool:
    """Swap ``document.tree`` for the rewritten tree; the parsed nodes stay untouched."""
    rewritten = visit(document.tree, _ImageFieldVisitor(document))
    if document.changed:
        document.tree = rewritten
    return document.changed


def _reindent(printed: str, raw_text: str) -> str:
    body = raw_text.strip()
    leading = raw_text[: len(raw_text) - len(raw_text.lstrip())]
    trailing = raw_text[len(body) + len(leading) :]
    indent = leading.rsplit("\n", 1)[-1] if "\n" in leading else ""
    first, *rest = printed.split("\n")
    lines = [first, *(f"{indent}{line}" if line else line for line in rest)]
    return leading + "\n".join(lines) + trailing


def print_query(document: QueryDocument) -> str:
    """Print the document, keeping the whitespace frame of the original literal."""
    return _reindent(print_ast(document.tree), document.raw_text)


def rewrite_query(raw_text: str, path: str) -> QueryDocument:
    """Parse and rewrite one embedded query; ``QuerySyntaxError`` aborts the file."""
    document = parse_query(raw_text, path)
    if rewrite_document(document):
        logger.debug("Rewrote image fields in query in %s", path)
    return document
