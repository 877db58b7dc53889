import logging
from collections.abc import Sequence

from tree_sitter import Node

from image_codemod.core.config import LEGACY_MODULES, NEW_COMPONENT, NEW_MODULE
from image_codemod.core.context import Directive, TransformContext
from image_codemod.core.source import SourceUnit
from image_codemod.core.usages import rewrite_usage

logger = logging.getLogger(__name__)

_REFERENCE_KINDS = frozenset({"identifier", "shorthand_property_identifier"})


def import_source(node: Node, unit: SourceUnit) -> str | None:
    source = node.child_by_field_name("source")
    if source is None:
        return None
    return unit.original(source)[1:-1]


def local_binding(node: Node, unit: SourceUnit) -> str | None:
    """Local name of the first import specifier, or None for a bare side-effect import."""
    clause = next((child for child in node.named_children if child.type == "import_clause"), None)
    if clause is None:
        return None
    for child in clause.named_children:
        if child.type == "identifier":
            return unit.original(child)
        if child.type == "namespace_import":
            name = next((c for c in child.named_children if c.type == "identifier"), None)
            return unit.original(name) if name is not None else None
        if child.type == "named_imports":
            for specifier in child.named_children:
                if specifier.type != "import_specifier":
                    continue
                local = specifier.child_by_field_name("alias") or specifier.child_by_field_name("name")
                return unit.original(local) if local is not None else None
    return None


def find_references(root: Node, name: str, excluded: Sequence[Node], unit: SourceUnit) -> list[Node]:
    """All identifier occurrences of ``name`` outside the ``excluded`` nodes, in document order."""
    references: list[Node] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if any(node.start_byte >= skip.start_byte and node.end_byte <= skip.end_byte for skip in excluded):
            continue
        if node.type in _REFERENCE_KINDS:
            if unit.original(node) == name:
                references.append(node)
            continue
        stack.extend(reversed(node.children))
    return references


def legacy_imports(root: Node, unit: SourceUnit) -> list[Node]:
    """Every import statement of a legacy image module, in document order."""
    found: list[Node] = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "import_statement":
            if import_source(node, unit) in LEGACY_MODULES:
                found.append(node)
            continue
        stack.extend(reversed(node.children))
    return found


def new_import_statement(node: Node, unit: SourceUnit) -> str:
    original = unit.original(node)
    source = node.child_by_field_name("source")
    quote = unit.original(source)[0] if source is not None else '"'
    semicolon = ";" if original.rstrip().endswith(";") else ""
    return f"import {{ {NEW_COMPONENT} }} from {quote}{NEW_MODULE}{quote}{semicolon}"


def rewrite_import(node: Node, ctx: TransformContext) -> Directive:
    """Migrate every legacy import in the file the first time one is reached.

    The references of all legacy bindings are rewritten in a single pass, so a
    usage of one binding nested inside an element of another is still renamed.
    """
    unit = ctx.unit
    if import_source(node, unit) not in LEGACY_MODULES:
        return Directive.CONTINUE

    statements = legacy_imports(unit.root, unit)
    references: list[Node] = []
    for statement in statements:
        name = local_binding(statement, unit)
        found = find_references(unit.root, name, statements, unit) if name else []
        logger.info("Migrating %d usage(s) of %s in %s", len(found), name or "<no binding>", ctx.path)
        references.extend(found)

    # Inner usages first, so an element rebuilt later absorbs their rewrites.
    seen: set[int] = set()
    for reference in sorted(references, key=lambda ref: ref.start_byte, reverse=True):
        if reference.start_byte in seen:
            continue
        seen.add(reference.start_byte)
        rewrite_usage(reference, ctx)

    for statement in statements:
        unit.replace(statement, new_import_statement(statement, unit))
    return Directive.SKIP
