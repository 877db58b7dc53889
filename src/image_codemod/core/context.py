import logging
from dataclasses import dataclass, field
from enum import Enum

from tree_sitter import Node

from image_codemod.core.source import SourceUnit
from image_codemod.models import Notice, NoticeKind

logger = logging.getLogger(__name__)


class Directive(Enum):
    """What the traversal does after a visitor handled a node."""

    CONTINUE = "continue"
    SKIP = "skip"


@dataclass
class TransformContext:
    """Per-file state threaded through a single traversal. Never shared between files."""

    unit: SourceUnit
    notices: list[Notice] = field(default_factory=list)

    @property
    def path(self) -> str:
        return self.unit.path

    @property
    def changed(self) -> bool:
        return self.unit.changed

    def notify(self, kind: NoticeKind, node: Node, message: str) -> Notice:
        row, column = node.start_point
        notice = Notice(path=self.path, kind=kind, message=message, line=row + 1, column=column + 1)
        self.notices.append(notice)
        logger.warning("%s:%d:%d %s", notice.path, notice.line, notice.column, message)
        return notice
