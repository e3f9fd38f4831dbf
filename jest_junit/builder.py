"""
Builds the ``<testsuites>`` document tree from a jest report.

The tree is made of plain Node objects; turning it into XML text is left to
:mod:`jest_junit.serializer`.
"""

import copy
import json
import logging
from typing import Optional

from .aggregator import Clock, aggregate_document, aggregate_suite, seconds
from .models import AggregateCounts, ConsoleEntry, Node, RawReport
from .normalizer import NormalizedCase, NormalizedSuite, normalize_report
from .options import ReporterOptions
from .properties import (
    CasePropertiesProvider,
    SuitePropertiesProvider,
    call_case_provider,
    call_suite_provider,
)
from .templates import resolve

logger = logging.getLogger(__name__)


def build_document(report: RawReport, options: Optional[ReporterOptions] = None,
                   app_directory: Optional[str] = None, clock: Optional[Clock] = None,
                   case_properties: Optional[CasePropertiesProvider] = None,
                   suite_properties: Optional[SuitePropertiesProvider] = None) -> Node:
    """
    Convert a jest report into a JUnit document tree.

    Args:
        report: Parsed jest JSON report
        options: Reporter options (defaults if not given)
        app_directory: Directory test file paths are made relative to
        clock: Current time in epoch ms, used for the overall run time
        case_properties: Optional provider of per test case properties
        suite_properties: Optional provider of per suite properties

    Returns:
        The ``testsuites`` root node
    """
    options = options or ReporterOptions()
    suites = normalize_report(report, options, app_directory)
    suite_counts = [aggregate_suite(s) for s in suites]
    totals = aggregate_document(suite_counts, report.start_time, clock)

    root_attrs = {
        "name": options.suite_name,
        "tests": totals.tests,
        "failures": totals.failures,
        "errors": totals.errors,
        "time": totals.time,
    }
    children = [
        build_suite(suite, counts, options, case_properties, suite_properties)
        for suite, counts in zip(suites, suite_counts)
    ]
    logger.debug(f"Built document with {len(children)} suites: {totals.to_dict()}")
    return Node("testsuites", root_attrs, children)


def build_suite(suite: NormalizedSuite, counts: AggregateCounts, options: ReporterOptions,
                case_properties: Optional[CasePropertiesProvider] = None,
                suite_properties: Optional[SuitePropertiesProvider] = None) -> Node:
    attrs = {
        "name": suite.name,
        "errors": counts.errors,
        "failures": counts.failures,
        "skipped": counts.skipped,
    }
    if suite.timestamp:
        attrs["timestamp"] = suite.timestamp
    attrs["time"] = counts.time
    attrs["tests"] = counts.tests

    children = []
    if suite_properties is not None:
        props = call_suite_provider(suite_properties, copy.deepcopy(suite.raw))
        children.append(properties_node(
            (name, _suite_property_value(value, suite.variables))
            for name, value in props.items()
        ))

    children.extend(build_case(case, options, case_properties) for case in suite.cases)

    console = console_node(suite.console, options)
    if console is not None:
        children.append(console)

    return Node("testsuite", attrs, children)


def _suite_property_value(value, variables):
    if isinstance(value, str) or callable(value):
        return resolve(value, variables)
    return value


def build_case(case: NormalizedCase, options: ReporterOptions,
               case_properties: Optional[CasePropertiesProvider] = None) -> Node:
    attrs = {
        "classname": case.classname,
        "name": case.name,
        "time": seconds(case.duration),
    }
    if case.file is not None:
        attrs["file"] = case.file
    if options.owner_name:
        attrs["owner"] = options.owner_name

    children = []
    if case.is_failure or case.is_error:
        tag = "failure" if case.is_failure else "error"
        children.extend(Node(tag, text=message) for message in case.messages)
    elif case.status.is_skipped:
        children.append(Node("skipped"))

    if case_properties is not None:
        pairs = call_case_provider(case_properties, copy.deepcopy(case.raw))
        if pairs:
            children.append(properties_node(pairs))

    return Node("testcase", attrs, children)


def properties_node(pairs) -> Node:
    return Node("properties", children=[
        Node("property", {"name": name, "value": value}) for name, value in pairs
    ])


def console_node(entries: list[ConsoleEntry], options: ReporterOptions) -> Optional[Node]:
    """``system-out`` block for the suite's console output, if enabled."""
    if not entries:
        return None
    if options.include_console_output:
        text = "\n".join(f"{e.type}: {e.message}" for e in entries)
    elif options.include_short_console_output:
        text = json.dumps([e.message for e in entries], indent=2, ensure_ascii=False)
    else:
        return None
    return Node("system-out", text=text, cdata=True)
