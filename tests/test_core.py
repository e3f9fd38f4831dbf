"""Tests for the convert/summary entry points."""

import json
import sys
import xml.etree.ElementTree as ET

import pytest

import cli
import core
from conftest import START_TIME, case, report, suite


@pytest.fixture
def report_file(tmp_path):
    data = report(
        suite([case(), case(title="fails", status="failed", failure_messages=["Error: nope"])]),
        suite([], path="/path/to/spec/empty.test.js",
              failureMessage="Your test suite must contain at least one test."),
    )
    path = tmp_path / "report.json"
    path.write_text(json.dumps(data))
    return path


def test_convert_writes_file(tmp_path, report_file):
    out = tmp_path / "out" / "junit.xml"
    result = core.convert_report(report_file, output=str(out), app_directory="/",
                                 environ={}, overrides={"reportTestSuiteErrors": "true"},
                                 clock=lambda: START_TIME + 2000)
    assert result["output"] == str(out)
    assert result["totals"] == {"tests": 2, "failures": 1, "errors": 1, "skipped": 0,
                                "time": 2.0, "suites": 2}

    root = ET.parse(out).getroot()
    assert [s.attrib["name"] for s in root.findall("testsuite")] == ["foo", "path/to/spec/empty.test.js"]


def test_convert_uses_configured_output(tmp_path, report_file):
    environ = {"JEST_JUNIT_OUTPUT_DIR": str(tmp_path / "reports"),
               "JEST_JUNIT_OUTPUT_NAME": "jest.xml"}
    result = core.convert_report(report_file, environ=environ)
    assert result["output"] == str(tmp_path / "reports" / "jest.xml")


def test_convert_without_writing(report_file):
    result = core.convert_report(report_file, environ={}, write=False)
    assert "output" not in result
    assert ET.fromstring(result["xml"].encode("utf-8")).tag == "testsuites"


def test_missing_report_returns_error(tmp_path):
    result = core.convert_report(tmp_path / "missing.json", environ={})
    assert "error" in result


def test_invalid_json_returns_error(tmp_path):
    path = tmp_path / "report.json"
    path.write_text("{not json")
    assert "error" in core.convert_report(path, environ={})


def test_properties_files_next_to_config(tmp_path, report_file):
    (tmp_path / "junitTestCaseProperties.py").write_text(
        "def case_properties(test_case):\n"
        "    return [{'name': 'invocations', 'value': test_case['invocations']}]\n"
    )
    config = tmp_path / "jest-junit.yaml"
    config.write_text("suiteName: configured\n")
    result = core.convert_report(report_file, config_file=str(config), environ={}, write=False)

    root = ET.fromstring(result["xml"].encode("utf-8"))
    assert root.attrib["name"] == "configured"
    prop = root.find("./testsuite/testcase/properties/property")
    assert prop.attrib == {"name": "invocations", "value": "1"}


def test_cli_convert_stdout(monkeypatch, capsys, report_file):
    monkeypatch.setattr(sys, "argv", ["jest-junit", "convert", str(report_file), "--stdout",
                                      "--app-dir", "/", "--classname", "{filename}"])
    assert cli.main() == 0
    root = ET.fromstring(capsys.readouterr().out.encode("utf-8"))
    assert root.find("./testsuite/testcase").attrib["classname"] == "foo.test.js"


def test_cli_summary_json(monkeypatch, capsys, report_file):
    monkeypatch.setattr(sys, "argv", ["jest-junit", "summary", str(report_file),
                                      "--format", "json", "--report-test-suite-errors"])
    assert cli.main() == 1
    totals = json.loads(capsys.readouterr().out)
    assert totals["failures"] == 1
    assert totals["errors"] == 1


def test_cli_reports_config_errors(monkeypatch, capsys, report_file):
    monkeypatch.setenv("JEST_JUNIT_NO_STACK_TRACE", "perhaps")
    monkeypatch.setattr(sys, "argv", ["jest-junit", "convert", str(report_file), "--stdout"])
    assert cli.main() == 1
    assert "Error:" in capsys.readouterr().err


def test_cli_without_command(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["jest-junit"])
    assert cli.main() == 1
