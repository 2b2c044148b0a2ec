"""Pydantic models for per-page audit records and the run report.

This module defines the issue tags produced by page checks, the policy that
decides which of them fail a page, and the ordered report returned by the
crawl orchestrator.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, PrivateAttr


class AuditStatus(str, Enum):
    """Overall outcome of a single page audit."""
    PASS = "PASS"
    FAIL = "FAIL"


class IssueTag:
    """Issue tags appended by page checks."""
    MISSING_TITLE = "Missing Title"
    MISSING_H1 = "Missing H1"
    MISSING_META_DESC = "Missing Meta Desc"
    EMPTY_BODY = "Empty Body"
    MISSING_NAVBAR = "Missing Navbar"
    MISSING_FOOTER = "Missing Footer"
    MISSING_BRAND = "Missing Brand"

    @staticmethod
    def status(code: Optional[int]) -> str:
        """Tag for a non-200 navigation response."""
        return f"Status {code if code is not None else 'unknown'}"

    @staticmethod
    def exception(message: str) -> str:
        """Tag for an error caught at the step boundary."""
        return f"Exception: {message}"


# Effect of each fixed issue tag; parametrised tags (Status N, Exception: ...) always fail
ISSUE_POLICY: Dict[str, AuditStatus] = {
    IssueTag.EMPTY_BODY: AuditStatus.FAIL,
    IssueTag.MISSING_NAVBAR: AuditStatus.FAIL,
    IssueTag.MISSING_FOOTER: AuditStatus.FAIL,
    IssueTag.MISSING_BRAND: AuditStatus.FAIL,
    IssueTag.MISSING_TITLE: AuditStatus.FAIL,
    IssueTag.MISSING_H1: AuditStatus.PASS,
    IssueTag.MISSING_META_DESC: AuditStatus.PASS,
}

# Issues that are reported but never flip a page to FAIL
ADVISORY_ISSUES = frozenset(
    tag for tag, effect in ISSUE_POLICY.items() if effect == AuditStatus.PASS
)


def is_advisory(issue: str) -> bool:
    """Check whether an issue tag is warning-only."""
    return issue in ADVISORY_ISSUES


class ReportClosedError(Exception):
    """Raised when a record is added to a report that was already rendered."""
    pass


class AuditRecord(BaseModel):
    """Result of auditing one URL."""

    url: str = Field(description="Audited URL")
    http_status: Optional[int] = Field(
        default=None,
        description="HTTP status of the navigation response"
    )
    issues: List[str] = Field(
        default_factory=list,
        description="Issue tags in the order the checks produced them"
    )

    # Captured signals
    title: Optional[str] = Field(default=None, description="Document title")
    h1: Optional[str] = Field(default=None, description="Text of the first h1")
    meta_description: Optional[str] = Field(
        default=None,
        description="Content of the description meta tag"
    )

    # Timing
    audited_at: datetime = Field(default_factory=datetime.utcnow)
    duration_ms: Optional[float] = Field(default=None, ge=0)

    def add_issue(self, issue: str) -> None:
        """Append an issue tag."""
        self.issues.append(issue)

    @property
    def overall_status(self) -> AuditStatus:
        """FAIL iff any recorded issue is not advisory."""
        for issue in self.issues:
            if not is_advisory(issue):
                return AuditStatus.FAIL
        return AuditStatus.PASS

    @property
    def passed(self) -> bool:
        return self.overall_status == AuditStatus.PASS

    @property
    def failing_issues(self) -> List[str]:
        return [issue for issue in self.issues if not is_advisory(issue)]

    @property
    def advisory_issues(self) -> List[str]:
        return [issue for issue in self.issues if is_advisory(issue)]

    def to_dict(self) -> dict:
        """Serialise for JSON/YAML output."""
        data = self.model_dump(mode="json")
        data["overall_status"] = self.overall_status.value
        return data

    @classmethod
    def from_exception(cls, url: str, error: BaseException) -> "AuditRecord":
        """Build a FAIL record for an error caught at the step boundary."""
        message = " ".join(str(error).split("\n", 1)[0].split())
        if not message:
            message = type(error).__name__
        return cls(url=url, issues=[IssueTag.exception(message)])


class Report(BaseModel):
    """Ordered audit records of one run, in visit order."""

    seed_url: str = Field(description="URL the run started from")
    records: List[AuditRecord] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: Optional[datetime] = Field(default=None)

    _closed: bool = PrivateAttr(default=False)

    def add_record(self, record: AuditRecord) -> None:
        """Append a record.

        Raises:
            ReportClosedError: If the report was already closed
        """
        if self._closed:
            raise ReportClosedError(f"Report for {self.seed_url} is closed")
        self.records.append(record)

    def close(self) -> None:
        """Mark the report as complete; no further records are accepted."""
        if not self._closed:
            self._closed = True
            if self.finished_at is None:
                self.finished_at = datetime.utcnow()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        return len(self.records)

    @property
    def failed_records(self) -> List[AuditRecord]:
        return [r for r in self.records if not r.passed]

    @property
    def pass_count(self) -> int:
        return len(self.records) - len(self.failed_records)

    @property
    def fail_count(self) -> int:
        return len(self.failed_records)

    @property
    def passed(self) -> bool:
        """True when every record passed."""
        return not self.failed_records

    @property
    def duration_seconds(self) -> float:
        if not self.finished_at:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
