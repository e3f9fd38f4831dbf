"""
Data models for jest JSON reports and the JUnit document tree.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)


class CaseStatus(Enum):
    """Status of a single test as reported by jest."""
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    PENDING = "pending"
    SKIPPED = "skipped"
    TODO = "todo"
    DISABLED = "disabled"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value) -> "CaseStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_skipped(self) -> bool:
        return self in (CaseStatus.PENDING, CaseStatus.SKIPPED,
                        CaseStatus.TODO, CaseStatus.DISABLED)


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_number(value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _display_name(value) -> Optional[str]:
    # jest >= 24 reports {"name": ..., "color": ...} for multi-project runs
    if isinstance(value, dict):
        value = value.get("name")
    return value if isinstance(value, str) else None


@dataclass
class FailureDetail:
    """Structured failure info (jest >= 26.3). Only the message is used."""
    message: Optional[str] = None
    stack: Optional[str] = None

    @classmethod
    def from_dict(cls, data) -> "FailureDetail":
        if not isinstance(data, dict):
            return cls()
        message = data.get("message")
        stack = data.get("stack")
        return cls(
            message=message if isinstance(message, str) else None,
            stack=stack if isinstance(stack, str) else None,
        )


@dataclass
class ExecError:
    """Error raised outside of any test, e.g. in a beforeAll hook."""
    message: str = ""
    stack: Optional[str] = None

    @classmethod
    def from_value(cls, value) -> Optional["ExecError"]:
        if value is None:
            return None
        if isinstance(value, str):
            return cls(message=value)
        if isinstance(value, dict):
            message = value.get("message")
            stack = value.get("stack")
            return cls(
                message=message if isinstance(message, str) else "",
                stack=stack if isinstance(stack, str) else None,
            )
        return cls(message=str(value))


@dataclass
class ConsoleEntry:
    """One captured console call."""
    message: str
    type: str = "log"

    @classmethod
    def from_dict(cls, data) -> Optional["ConsoleEntry"]:
        if not isinstance(data, dict):
            return None
        message = data.get("message")
        return cls(
            message="" if message is None else str(message),
            type=str(data.get("type") or "log"),
        )


@dataclass
class RawCaseResult:
    """One test result inside a test file."""
    title: str = ""
    ancestor_titles: list[str] = field(default_factory=list)
    status: CaseStatus = CaseStatus.UNKNOWN
    duration: float = 0
    failure_messages: list[str] = field(default_factory=list)
    failure_details: Optional[list[FailureDetail]] = None
    invocations: int = 1
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict) -> "RawCaseResult":
        details = data.get("failureDetails")
        invocations = data.get("invocations")
        return cls(
            title=str(data.get("title") or ""),
            ancestor_titles=[str(t) for t in _as_list(data.get("ancestorTitles"))],
            status=CaseStatus.parse(data.get("status")),
            duration=_as_number(data.get("duration")),
            failure_messages=[str(m) for m in _as_list(data.get("failureMessages")) if m is not None],
            failure_details=[FailureDetail.from_dict(d) for d in details]
            if isinstance(details, list) else None,
            invocations=invocations if isinstance(invocations, int) else 1,
            raw=data,
        )


@dataclass
class RawSuiteResult:
    """Results of one test file."""
    test_file_path: str = ""
    test_results: list[RawCaseResult] = field(default_factory=list)
    failure_message: Optional[str] = None
    test_exec_error: Optional[ExecError] = None
    console: list[ConsoleEntry] = field(default_factory=list)
    display_name: Optional[str] = None
    perf_start: Optional[float] = None
    raw: dict = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: dict, display_name: Optional[str] = None) -> "RawSuiteResult":
        cases = []
        for item in _as_list(data.get("testResults")):
            if not isinstance(item, dict):
                logger.debug(f"Skipping malformed test result: {item!r}")
                continue
            cases.append(RawCaseResult.from_dict(item))

        console = [e for e in map(ConsoleEntry.from_dict, _as_list(data.get("console"))) if e]

        perf = data.get("perfStats") if isinstance(data.get("perfStats"), dict) else {}
        failure_message = data.get("failureMessage")
        return cls(
            test_file_path=str(data.get("testFilePath") or ""),
            test_results=cases,
            failure_message=failure_message if isinstance(failure_message, str) else None,
            test_exec_error=ExecError.from_value(data.get("testExecError")),
            console=console,
            display_name=_display_name(data.get("displayName")) or display_name,
            perf_start=perf.get("start") if isinstance(perf.get("start"), (int, float)) else None,
            raw=data,
        )


@dataclass
class RawReport:
    """Top-level jest JSON report (``jest --json``)."""
    start_time: float = 0
    test_results: list[RawSuiteResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RawReport":
        if not isinstance(data, dict):
            logger.debug("Report is not a JSON object; treating it as empty")
            data = {}
        display_name = _display_name(data.get("displayName"))
        suites = []
        for item in _as_list(data.get("testResults")):
            if not isinstance(item, dict):
                logger.debug(f"Skipping malformed suite result: {item!r}")
                continue
            suites.append(RawSuiteResult.from_dict(item, display_name=display_name))
        return cls(
            start_time=_as_number(data.get("startTime")),
            test_results=suites,
        )


AttrValue = Union[int, float, str]


@dataclass
class Node:
    """An element of the output tree.

    Holds either child nodes or a text payload. ``cdata`` marks the text as a
    character-data block for renderers that support it.
    """
    tag: str
    attrs: dict[str, AttrValue] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    text: Optional[str] = None
    cdata: bool = False

    def find(self, tag: str) -> Optional["Node"]:
        return next((c for c in self.children if c.tag == tag), None)

    def findall(self, tag: str) -> list["Node"]:
        return [c for c in self.children if c.tag == tag]


@dataclass
class AggregateCounts:
    """Counts for a suite or for the whole document."""
    tests: int = 0
    failures: int = 0
    errors: int = 0
    skipped: int = 0
    time: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tests": self.tests,
            "failures": self.failures,
            "errors": self.errors,
            "skipped": self.skipped,
            "time": self.time,
        }
