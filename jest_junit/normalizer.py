"""
First stage of the conversion: turn raw jest suite results into named,
cleaned-up suites and cases.

Suites without any test results become "error suites" holding a single
placeholder case when ``report_test_suite_errors`` is on. A suite that ran
tests but also crashed outside of them (``testExecError``) gets an extra
failing case after its real ones.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .messages import normalize_message, strip_ansi
from .models import CaseStatus, ConsoleEntry, RawCaseResult, RawReport, RawSuiteResult
from .options import ReporterOptions
from .templates import (
    FILEPATH_VAR,
    LiteralTemplate,
    case_variables,
    resolve,
    suite_variables,
    tag,
)

logger = logging.getLogger(__name__)

SUITE_ERROR_CLASSNAME = "Test suite failed to run"
EMPTY_SUITE_MESSAGE = "Your test suite must contain at least one test."
EXEC_FAILURE_CLASSNAME = "Test execution failure"
EXEC_FAILURE_TITLE = "Test execution failure: could be caused by test hooks like 'afterAll'."


@dataclass
class NormalizedCase:
    """A test case with resolved names and cleaned failure text."""
    name: str
    classname: str
    status: CaseStatus
    duration: float = 0
    messages: list[str] = field(default_factory=list)
    file: Optional[str] = None
    counts_as_test: bool = True
    raw: dict = field(default_factory=dict, repr=False)

    @property
    def is_failure(self) -> bool:
        return self.status == CaseStatus.FAILED

    @property
    def is_error(self) -> bool:
        return self.status == CaseStatus.ERROR


@dataclass
class NormalizedSuite:
    name: str
    filepath: str
    cases: list[NormalizedCase] = field(default_factory=list)
    timestamp: Optional[str] = None
    console: list[ConsoleEntry] = field(default_factory=list)
    variables: dict = field(default_factory=dict)
    raw: dict = field(default_factory=dict, repr=False)


def relative_path(path: str, app_directory: Optional[str]) -> str:
    """Path of a test file relative to the app directory, with forward slashes."""
    if not path:
        return ""
    if app_directory:
        try:
            path = os.path.relpath(path, app_directory)
        except ValueError:
            # different drive on Windows
            pass
    return path.replace(os.sep, "/")


def format_timestamp(epoch_ms: Optional[float]) -> Optional[str]:
    if epoch_ms is None:
        return None
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S")


def file_attribute(filepath: str, prefix: str) -> str:
    if not prefix:
        return filepath
    return prefix.rstrip("/") + "/" + filepath


def normalize_report(report: RawReport, options: ReporterOptions,
                     app_directory: Optional[str] = None) -> list[NormalizedSuite]:
    """Normalize every suite of the report, in report order."""
    return [normalize_suite(suite, options, app_directory) for suite in report.test_results]


def normalize_suite(suite: RawSuiteResult, options: ReporterOptions,
                    app_directory: Optional[str] = None) -> NormalizedSuite:
    filepath = relative_path(suite.test_file_path, app_directory)
    filename = os.path.basename(filepath)
    display_name = suite.display_name

    if not suite.test_results:
        return _empty_suite(suite, options, filepath, filename)

    first = suite.test_results[0]
    suite_title = first.ancestor_titles[0] if first.ancestor_titles else None
    variables = suite_variables(filepath, filename, suite_title, display_name)

    result = NormalizedSuite(
        name=resolve(options.effective_suite_name_template, variables),
        filepath=filepath,
        timestamp=format_timestamp(suite.perf_start),
        console=list(suite.console),
        variables=variables,
        raw=suite.raw,
    )

    for case in suite.test_results:
        result.cases.append(_normalize_case(case, options, filepath, filename,
                                            suite_title, display_name))

    if suite.test_exec_error is not None:
        logger.debug(f"Adding execution failure case to {filepath}")
        result.cases.append(_exec_failure_case(suite, options, filepath))

    return result


def _normalize_case(case: RawCaseResult, options: ReporterOptions, filepath: str,
                    filename: str, suite_title: Optional[str],
                    display_name: Optional[str]) -> NormalizedCase:
    classname = options.ancestor_separator.join(case.ancestor_titles)
    variables = case_variables(filepath, filename, suite_title, classname,
                               case.title, display_name)

    messages = []
    if case.status in (CaseStatus.FAILED, CaseStatus.ERROR):
        messages = _failure_messages(case, options.no_stack_trace)

    return NormalizedCase(
        name=resolve(options.title_template, variables),
        classname=resolve(options.class_name_template, variables),
        status=case.status,
        duration=case.duration,
        messages=messages,
        file=file_attribute(filepath, options.file_path_prefix)
        if options.add_file_attribute else None,
        raw=case.raw,
    )


def _failure_messages(case: RawCaseResult, no_stack_trace: bool) -> list[str]:
    texts = case.failure_messages
    has_details = case.failure_details is not None

    if no_stack_trace and case.failure_details:
        detail_texts = [d.message for d in case.failure_details if d.message is not None]
        if detail_texts:
            texts = detail_texts
        else:
            has_details = False

    messages = [normalize_message(t, no_stack_trace, has_details) for t in texts]
    # a failed case always gets a failure element, even without a message
    return messages or [""]


def _exec_failure_case(suite: RawSuiteResult, options: ReporterOptions,
                       filepath: str) -> NormalizedCase:
    error = suite.test_exec_error
    if options.no_stack_trace or not error.stack:
        text = normalize_message(error.message, options.no_stack_trace,
                                 has_stack_metadata=error.stack is not None)
    elif error.message and error.message not in error.stack:
        text = normalize_message(f"{error.message}\n{error.stack}")
    else:
        text = normalize_message(error.stack)

    return NormalizedCase(
        name=EXEC_FAILURE_TITLE,
        classname=EXEC_FAILURE_CLASSNAME,
        status=CaseStatus.FAILED,
        messages=[text],
        file=file_attribute(filepath, options.file_path_prefix)
        if options.add_file_attribute else None,
        raw={
            "ancestorTitles": [],
            "title": EXEC_FAILURE_TITLE,
            "duration": 0,
            "failureMessages": [text],
            "status": CaseStatus.FAILED.value,
            "invocations": 1,
        },
    )


def _empty_suite(suite: RawSuiteResult, options: ReporterOptions, filepath: str,
                 filename: str) -> NormalizedSuite:
    variables = suite_variables(filepath, filename, None, suite.display_name)

    if not options.report_test_suite_errors:
        logger.debug(f"Suite {filepath} has no test results")
        return NormalizedSuite(
            name=resolve(options.effective_suite_name_template, variables),
            filepath=filepath,
            timestamp=format_timestamp(suite.perf_start),
            console=list(suite.console),
            variables=variables,
            raw=suite.raw,
        )

    # error suites are always named after their file
    name = resolve(LiteralTemplate(tag(FILEPATH_VAR)), variables)

    if suite.failure_message:
        message = suite.failure_message
    elif suite.test_exec_error is not None and suite.test_exec_error.message:
        message = suite.test_exec_error.message
    else:
        message = EMPTY_SUITE_MESSAGE

    logger.debug(f"Reporting {filepath} as a failed test suite")
    sentinel = NormalizedCase(
        name=name,
        classname=SUITE_ERROR_CLASSNAME,
        status=CaseStatus.ERROR,
        messages=[strip_ansi(message)],
        file=file_attribute(filepath, options.file_path_prefix)
        if options.add_file_attribute else None,
        counts_as_test=False,
        raw={
            "ancestorTitles": [],
            "title": name,
            "duration": 0,
            "failureMessages": [message],
            "status": CaseStatus.ERROR.value,
            "invocations": 1,
        },
    )
    return NormalizedSuite(
        name=name,
        filepath=filepath,
        cases=[sentinel],
        timestamp=format_timestamp(suite.perf_start),
        console=list(suite.console),
        variables=variables,
        raw=suite.raw,
    )
