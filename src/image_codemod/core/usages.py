"""Rewrite usage sites of the legacy image component.

Element invocations get the new tag and a synthesized ``image`` attribute in
place of the first ``fixed``/``fluid`` attribute. Any other reference is only
renamed, and flagged for manual review.
"""

from enum import Enum

from tree_sitter import Node

from image_codemod.core.config import IMAGE_ATTRIBUTE, IMAGE_DATA_FIELD, NEW_COMPONENT, SHARP_FIELD, SIZE_PROPS
from image_codemod.core.context import Directive, TransformContext
from image_codemod.core.source import SourceUnit
from image_codemod.models import NoticeKind

ELEMENT_KINDS = frozenset({"jsx_opening_element", "jsx_self_closing_element"})
_ATTRIBUTE_KINDS = frozenset({"jsx_attribute", "jsx_expression"})


class AttributeShape(str, Enum):
    MEMBER_ACCESS = "member_access"
    OPTIONAL_MEMBER_ACCESS = "optional_member_access"
    OBJECT_LITERAL = "object_literal"
    OPAQUE = "opaque"
    ABSENT = "absent"


def _field(node: Node, name: str) -> Node | None:
    return node.child_by_field_name(name)


def _property_name(node: Node, unit: SourceUnit) -> str | None:
    prop = _field(node, "property")
    return unit.original(prop) if prop is not None else None


def _is_sharp_access(node: Node | None, unit: SourceUnit) -> bool:
    return node is not None and node.type == "member_expression" and _property_name(node, unit) == SHARP_FIELD


def _is_optional(node: Node) -> bool:
    return _field(node, "optional_chain") is not None


def attribute_name(attribute: Node, unit: SourceUnit) -> str | None:
    if attribute.type != "jsx_attribute" or attribute.named_child_count == 0:
        return None
    return unit.original(attribute.named_children[0])


def attribute_value(attribute: Node) -> Node | None:
    named = attribute.named_children
    return named[1] if len(named) > 1 else None


def expression_of(container: Node) -> Node | None:
    """The expression wrapped by a ``{...}`` attribute value, if there is one."""
    if container.type != "jsx_expression":
        return None
    for child in container.named_children:
        if child.type != "comment":
            return child
    return None


def classify_expression(expression: Node | None, unit: SourceUnit) -> AttributeShape:
    if expression is None:
        return AttributeShape.ABSENT
    if expression.type == "member_expression" and _property_name(expression, unit) in SIZE_PROPS:
        obj = _field(expression, "object")
        if _is_optional(expression) or (_is_sharp_access(obj, unit) and _is_optional(obj)):
            return AttributeShape.OPTIONAL_MEMBER_ACCESS
        return AttributeShape.MEMBER_ACCESS
    if expression.type == "object":
        return AttributeShape.OBJECT_LITERAL
    return AttributeShape.OPAQUE


def synthesize_member_access(expression: Node, shape: AttributeShape, unit: SourceUnit) -> str:
    accessor = "?." if shape is AttributeShape.OPTIONAL_MEMBER_ACCESS else "."
    obj = _field(expression, "object")
    assert obj is not None
    if _is_sharp_access(obj, unit):
        base = _field(obj, "object")
        assert base is not None
        return f"{unit.text(base)}{accessor}{SHARP_FIELD}{accessor}{IMAGE_DATA_FIELD}"
    return f"{unit.text(obj)}{accessor}{IMAGE_DATA_FIELD}"


def rename_src_property(literal: Node, unit: SourceUnit) -> bool:
    """Rename the size-variant property inside the literal's ``src`` chain, in place."""
    for pair in literal.named_children:
        if pair.type != "pair":
            continue
        key = _field(pair, "key")
        if key is None or key.type != "property_identifier" or unit.original(key) != "src":
            continue
        node = _field(pair, "value")
        while node is not None and node.type == "member_expression":
            prop = _field(node, "property")
            if prop is not None and unit.original(prop) in SIZE_PROPS:
                unit.replace(prop, IMAGE_DATA_FIELD)
                return True
            node = _field(node, "object")
    return False


def _image_attribute(attribute: Node, ctx: TransformContext) -> str:
    unit = ctx.unit
    value = attribute_value(attribute)
    expression = expression_of(value) if value is not None else None
    shape = classify_expression(expression, unit)

    if shape in (AttributeShape.MEMBER_ACCESS, AttributeShape.OPTIONAL_MEMBER_ACCESS):
        assert expression is not None
        return f"{IMAGE_ATTRIBUTE}={{{synthesize_member_access(expression, shape, unit)}}}"
    if shape is AttributeShape.OBJECT_LITERAL:
        assert expression is not None
        rename_src_property(expression, unit)
        return f"{IMAGE_ATTRIBUTE}={{{unit.text(expression)}}}"

    ctx.notify(
        NoticeKind.OPAQUE_EXPRESSION,
        attribute,
        f"The image data passed to {NEW_COMPONENT} could not be rewritten automatically; "
        f"the original value was kept. Check {ctx.path} manually.",
    )
    if value is None:
        return IMAGE_ATTRIBUTE
    return f"{IMAGE_ATTRIBUTE}={unit.text(value)}"


def rewrite_element(element: Node, ctx: TransformContext) -> None:
    unit = ctx.unit
    name = _field(element, "name")
    assert name is not None
    attributes = [child for child in element.named_children if child.type in _ATTRIBUTE_KINDS]
    sized = [a for a in attributes if attribute_name(a, unit) in SIZE_PROPS]

    if not sized:
        unit.replace(name, NEW_COMPONENT)
        return
    if len(sized) > 1:
        ctx.notify(
            NoticeKind.MULTIPLE_SIZE_ATTRIBUTES,
            sized[1],
            f"Only the first fixed/fluid attribute was migrated; the others were dropped in {ctx.path}.",
        )

    parts = [_image_attribute(sized[0], ctx)]
    parts.extend(unit.text(a) for a in attributes if attribute_name(a, unit) not in SIZE_PROPS)

    between = unit.text_range(name.end_byte, attributes[0].start_byte)
    lead = between.rstrip()
    gap = between[len(lead) :] or " "
    head = unit.text_range(element.start_byte, name.start_byte)
    tail = unit.text_range(attributes[-1].end_byte, element.end_byte)
    unit.replace(element, head + NEW_COMPONENT + lead + "".join(gap + part for part in parts) + tail)


def rewrite_usage(reference: Node, ctx: TransformContext) -> None:
    """Rewrite one reference to the imported legacy component."""
    parent = reference.parent
    if ctx.unit.is_replaced(reference):
        ctx.notify(
            NoticeKind.UNREACHABLE_REFERENCE,
            reference,
            f"A reference to the image component sits inside code that was already rewritten; "
            f"rename it to {NEW_COMPONENT} in {ctx.path} manually.",
        )
        return
    if parent is not None and parent.type in ELEMENT_KINDS:
        name = _field(parent, "name")
        if name is not None and name.start_byte == reference.start_byte:
            rewrite_element(parent, ctx)
            return
    if parent is not None and parent.type == "jsx_closing_element":
        ctx.unit.replace(reference, NEW_COMPONENT)
        return

    ctx.unit.replace(reference, NEW_COMPONENT)
    ctx.notify(
        NoticeKind.NON_ELEMENT_REFERENCE,
        reference,
        f"The image component is referenced outside of an element; the reference was renamed "
        f"to {NEW_COMPONENT}, but {ctx.path} should be verified manually.",
    )


def rewrite_member_access(node: Node, ctx: TransformContext) -> Directive:
    """``x.childImageSharp.fixed`` / ``x?.childImageSharp?.fluid`` -> ``...gatsbyImageData``."""
    unit = ctx.unit
    if _property_name(node, unit) in SIZE_PROPS and _is_sharp_access(_field(node, "object"), unit):
        prop = _field(node, "property")
        assert prop is not None
        unit.replace(prop, IMAGE_DATA_FIELD)
    return Directive.CONTINUE
