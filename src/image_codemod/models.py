from enum import Enum

from pydantic import BaseModel


class NoticeKind(str, Enum):
    OPAQUE_EXPRESSION = "opaque_expression"
    NON_ELEMENT_REFERENCE = "non_element_reference"
    MULTIPLE_SIZE_ATTRIBUTES = "multiple_size_attributes"
    MULTIPLE_SIZE_FIELDS = "multiple_size_fields"
    MULTIPLE_FRAGMENT_SPREADS = "multiple_fragment_spreads"
    UNREACHABLE_REFERENCE = "unreachable_reference"


class Notice(BaseModel):
    """A usage the codemod rewrote conservatively and a human should review."""

    path: str
    kind: NoticeKind
    message: str
    line: int
    column: int


class TransformResult(BaseModel):
    path: str
    source: str
    changed: bool
    notices: list[Notice] = []


class FileStatus(str, Enum):
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    FAILED = "failed"


class FileReport(BaseModel):
    path: str
    status: FileStatus
    notices: list[Notice] = []
    error: str | None = None


class BatchSummary(BaseModel):
    target: str
    dry_run: bool = False
    reports: list[FileReport] = []

    def count(self, status: FileStatus) -> int:
        return sum(1 for report in self.reports if report.status is status)

    @property
    def notices(self) -> list[Notice]:
        return [notice for report in self.reports for notice in report.notices]

    @property
    def failed(self) -> list[FileReport]:
        return [report for report in self.reports if report.status is FileStatus.FAILED]
