"""
Conversion diagnostics.

Per-record and per-attribute problems never abort a batch: they are
logged and accumulated here so that a complete account of every skipped,
ambiguous or conflicting case is available at the end of a run.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class IssueKind(str, Enum):
    """Kinds of non-fatal problems met while converting M0 data."""
    MISSING_VALUE = "missing_value"
    EMPTY_VALUE = "empty_value"
    AMBIGUOUS_VALUE = "ambiguous_value"
    UNPARSEABLE_DATE = "unparseable_date"
    UNKNOWN_DECLARED_RANGE = "unknown_declared_range"
    CONFLICTING_PARENT = "conflicting_parent"
    DUPLICATE_ATTACHMENT = "duplicate_attachment"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    INVALID_VALUE = "invalid_value"

    def __str__(self) -> str:
        return self.value


# Default log level per kind; callers may override (e.g. a duplicate
# attachment is a warning on the target side, an error on the report side).
ISSUE_LEVELS: Dict[IssueKind, int] = {
    IssueKind.MISSING_VALUE: logging.DEBUG,
    IssueKind.EMPTY_VALUE: logging.DEBUG,
    IssueKind.AMBIGUOUS_VALUE: logging.ERROR,
    IssueKind.UNPARSEABLE_DATE: logging.ERROR,
    IssueKind.UNKNOWN_DECLARED_RANGE: logging.ERROR,
    IssueKind.CONFLICTING_PARENT: logging.ERROR,
    IssueKind.DUPLICATE_ATTACHMENT: logging.ERROR,
    IssueKind.UNRESOLVED_REFERENCE: logging.WARNING,
    IssueKind.INVALID_VALUE: logging.ERROR,
}


@dataclass
class Issue:
    """
    A single problem found in the source data.

    Attributes:
        kind: Category of the problem.
        subject: M0 URI (or identifier) the problem relates to.
        message: Human-readable explanation.
        level: Logging level the issue was reported at.

    Example:
        >>> issue = Issue(
        ...     kind=IssueKind.UNPARSEABLE_DATE,
        ...     subject="http://baseUri/documentations/documentation/1580/S.1.1",
        ...     message="Unparseable date value 15/01/2019",
        ... )
    """
    kind: IssueKind
    subject: str
    message: str
    level: int = logging.ERROR


@dataclass
class Diagnostics:
    """
    Accumulator for the issues of one conversion run.

    Every call to ``record`` both logs the message through the caller's
    logger and keeps the issue, so the CLI can print a summary after the
    batch completes.
    """
    issues: List[Issue] = field(default_factory=list)

    def record(
        self,
        kind: IssueKind,
        subject: Any,
        message: str,
        logger: Optional[logging.Logger] = None,
        level: Optional[int] = None,
    ) -> Issue:
        """
        Log and store an issue.

        Args:
            kind: Category of the issue.
            subject: URI or identifier concerned (converted to str).
            message: Explanation, logged as is.
            logger: Logger to report through (defaults to this module's).
            level: Overrides the default level for the kind.

        Returns:
            The stored Issue.
        """
        effective_level = level if level is not None else ISSUE_LEVELS[kind]
        (logger or logging.getLogger(__name__)).log(effective_level, message)
        issue = Issue(kind=kind, subject=str(subject), message=message, level=effective_level)
        self.issues.append(issue)
        return issue

    @property
    def counts_by_kind(self) -> Dict[str, int]:
        """Get a count of issues grouped by kind."""
        counts: Dict[str, int] = {}
        for issue in self.issues:
            counts[issue.kind.value] = counts.get(issue.kind.value, 0) + 1
        return counts

    def of_kind(self, kind: IssueKind) -> List[Issue]:
        return [issue for issue in self.issues if issue.kind == kind]

    def get_summary(self) -> str:
        """
        Get a human-readable summary of the issues met during the run.

        Debug-level issues (absent or blank values) are counted but not
        detailed: they are normal in M0 data.
        """
        notable = [issue for issue in self.issues if issue.level >= logging.WARNING]
        lines = [
            "Conversion Summary:",
            f"  Issues recorded: {len(self.issues)}",
        ]
        for kind, count in sorted(self.counts_by_kind.items()):
            lines.append(f"      - {kind}: {count}")
        if notable:
            lines.append(f"  ⚠ Warnings and errors: {len(notable)}")
            lines.append("    Details (first 5):")
            for issue in notable[:5]:
                lines.append(f"      - {issue.kind.value}: {issue.subject}")
                lines.append(f"        {issue.message}")
            if len(notable) > 5:
                lines.append(f"      ... and {len(notable) - 5} more")
        return "\n".join(lines)

