"""Single-pass transform of one source file.

``transform_source`` parses the text, walks the tree once in document order
and dispatches on the few node kinds the migration cares about. Every
rewrite is recorded as an edit on the ``SourceUnit``; the file is printed
only when at least one edit was made, otherwise the input comes back as is.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from tree_sitter import Node

from image_codemod.core.config import QUERY_TAG
from image_codemod.core.context import Directive, TransformContext
from image_codemod.core.imports import rewrite_import
from image_codemod.core.queries import print_query, rewrite_query
from image_codemod.core.source import parse_source
from image_codemod.core.usages import rewrite_member_access
from image_codemod.models import TransformResult

logger = logging.getLogger(__name__)

Visit = Callable[[Node, TransformContext], Directive]


def _query_template(node: Node) -> Node | None:
    arguments = node.child_by_field_name("arguments")
    if arguments is None:
        return None
    if arguments.type == "template_string":
        return arguments
    first = next((child for child in arguments.named_children if child.type != "comment"), None)
    if first is not None and first.type == "template_string":
        return first
    return None


def first_segment(template: Node) -> tuple[int, int]:
    """Byte range of the literal text before the first ``${...}`` of a template string."""
    end = template.end_byte - 1
    for child in template.children:
        if child.type == "template_substitution":
            end = child.start_byte
            break
    return template.start_byte + 1, end


def rewrite_query_call(node: Node, ctx: TransformContext) -> Directive:
    function = node.child_by_field_name("function")
    if function is None or function.type != "identifier" or ctx.unit.original(function) != QUERY_TAG:
        return Directive.CONTINUE
    template = _query_template(node)
    if template is None:
        return Directive.CONTINUE

    start, end = first_segment(template)
    raw_text = ctx.unit.source[start:end].decode("utf-8")
    if not raw_text.strip():
        return Directive.CONTINUE

    document = rewrite_query(raw_text, ctx.path)
    for kind, message in document.ambiguities:
        ctx.notify(kind, template, f"{message} ({ctx.path})")
    if document.changed:
        ctx.unit.replace_range(start, end, print_query(document))
    return Directive.CONTINUE


_VISITORS: dict[str, Visit] = {
    "import_statement": rewrite_import,
    "member_expression": rewrite_member_access,
    "call_expression": rewrite_query_call,
}


def walk(root: Node, ctx: TransformContext) -> None:
    """Pre-order walk that never descends into a region already replaced."""
    stack = [root]
    while stack:
        node = stack.pop()
        if ctx.unit.is_replaced(node):
            continue
        visit = _VISITORS.get(node.type)
        if visit is not None and visit(node, ctx) is Directive.SKIP:
            continue
        stack.extend(reversed(node.children))


def transform_source(text: str, path: str) -> TransformResult:
    """Migrate one file's text. Pure: the same text and path always give the same result."""
    unit = parse_source(text, path)
    ctx = TransformContext(unit)
    walk(unit.root, ctx)
    if unit.changed:
        logger.info("Rewrote %s (%d edit(s))", path, len(unit.edits))
    return TransformResult(path=path, source=unit.render(), changed=unit.changed, notices=ctx.notices)


def transform_file(path: Path) -> TransformResult:
    """Transform a file's contents without writing anything back."""
    text = path.read_bytes().decode("utf-8")
    return transform_source(text, str(path))
