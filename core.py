#!/usr/bin/env python3
"""
Core operations behind the CLI.
Reads a jest JSON report, resolves options and properties providers, and
produces the JUnit XML document.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional

from jest_junit.aggregator import Clock
from jest_junit.builder import build_document
from jest_junit.models import Node, RawReport
from jest_junit.options import ReporterOptions, load_options
from jest_junit.properties import (
    load_case_properties_provider,
    load_suite_properties_provider,
)
from jest_junit.serializer import to_xml, write_xml

logger = logging.getLogger(__name__)


def load_report(source) -> RawReport:
    """Load a jest JSON report from a file path, or stdin when source is "-"."""
    if str(source) == "-":
        data = json.load(sys.stdin)
    else:
        with open(source, "r", encoding="utf-8") as f:
            data = json.load(f)
    return RawReport.from_dict(data)


def load_providers(options: ReporterOptions, base_dir: Optional[str] = None) -> tuple:
    """Load the case and suite properties providers configured in options.

    Missing files just mean no properties.
    """
    case_provider = load_case_properties_provider(options.test_case_properties_file, base_dir)
    suite_provider = load_suite_properties_provider(options.test_suite_properties_file, base_dir)
    return case_provider, suite_provider


def build_report(report: RawReport, options: ReporterOptions,
                 app_directory: Optional[str] = None, clock: Optional[Clock] = None,
                 base_dir: Optional[str] = None) -> Node:
    """Load the properties providers, then convert the report."""
    case_provider, suite_provider = load_providers(options, base_dir)
    return build_document(
        report,
        options,
        app_directory=app_directory if app_directory is not None else os.getcwd(),
        clock=clock,
        case_properties=case_provider,
        suite_properties=suite_provider,
    )


def _totals(root: Node) -> dict:
    suites = root.findall("testsuite")
    return {
        "tests": root.attrs["tests"],
        "failures": root.attrs["failures"],
        "errors": root.attrs["errors"],
        "skipped": sum(s.attrs.get("skipped", 0) for s in suites),
        "time": root.attrs["time"],
        "suites": len(suites),
    }


def convert_report(
    source,
    output: Optional[str] = None,
    config_file: Optional[str] = None,
    app_directory: Optional[str] = None,
    overrides: Optional[Mapping] = None,
    environ: Optional[Mapping[str, str]] = None,
    clock: Optional[Clock] = None,
    write: bool = True,
) -> dict:
    """
    Convert a jest JSON report into a JUnit XML file.

    Args:
        source: Path to the jest JSON report, or "-" for stdin
        output: Output file, overrides the configured output location
        config_file: Optional YAML/JSON/.env file with reporter options
        app_directory: Directory test paths are made relative to (default: cwd)
        overrides: Options that take precedence over config file and environment
        environ: Environment to read JEST_JUNIT_* variables from (default: os.environ)
        clock: Current time provider in epoch ms
        write: If False, return the XML instead of writing it

    Returns:
        dict with totals and the output path (or the XML when write is False),
        or an "error" key when the report cannot be read
    """
    options = load_options(config_file, environ=environ, overrides=overrides)

    try:
        report = load_report(source)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read report {source}: {e}")
        return {"error": f"Cannot read report {source}: {e}"}

    base_dir = Path(config_file).parent if config_file else None
    root = build_report(report, options, app_directory=app_directory, clock=clock,
                        base_dir=base_dir)

    result = {"totals": _totals(root)}
    if not write:
        result["xml"] = to_xml(root)
        return result

    path = write_xml(root, Path(output) if output else options.output_path)
    logger.info(f"Wrote {path}")
    result["output"] = str(path)
    return result
