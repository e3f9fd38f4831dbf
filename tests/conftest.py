"""Shared jest report fixtures."""

import copy

import pytest

from jest_junit.models import RawReport

START_TIME = 1489712747092  # 2017-03-17T01:05:47.092Z

ANSI_FAILURE = (
    "\x1b[31mError: Should fail\x1b[39m\n"
    "    at _callee$ (path/to/failing.test.js:26:15)\n"
    "    at tryCatch (path/to/failing.test.js:2:554)"
)

STACK_FAILURE = (
    "Error: Should fail\n"
    "    at _callee$ (path/to/failing.test.js:26:15)\n"
    "    at path/to/failing.test.js:2:554"
)


def case(title="should bar", ancestors=("foo", "baz"), status="passed", duration=1,
         failure_messages=(), **extra):
    data = {
        "ancestorTitles": list(ancestors),
        "title": title,
        "fullName": " ".join(list(ancestors) + [title]),
        "status": status,
        "duration": duration,
        "failureMessages": list(failure_messages),
        "invocations": 1,
        "numPassingAsserts": 0,
    }
    data.update(extra)
    return data


def suite(cases, path="/path/to/test/__tests__/foo.test.js", **extra):
    data = {
        "testFilePath": path,
        "testResults": list(cases),
        "numFailingTests": sum(1 for c in cases if c["status"] == "failed"),
        "numPassingTests": sum(1 for c in cases if c["status"] == "passed"),
        "numPendingTests": sum(1 for c in cases if c["status"] == "pending"),
        "perfStats": {"start": START_TIME, "end": START_TIME + 120},
        "console": None,
        "failureMessage": None,
    }
    data.update(extra)
    return data


def report(*suites, **extra):
    data = {
        "startTime": START_TIME,
        "numFailedTests": sum(s["numFailingTests"] for s in suites),
        "numPassedTests": sum(s["numPassingTests"] for s in suites),
        "testResults": list(suites),
    }
    data.update(extra)
    return data


@pytest.fixture
def clock():
    """Fixed clock, 1.234s after the run started."""
    return lambda: START_TIME + 1234


@pytest.fixture
def no_failing_tests():
    return RawReport.from_dict(report(suite([case()])))


@pytest.fixture
def multi_project():
    return RawReport.from_dict(report(
        suite([case()], displayName={"name": "project1", "color": "blue"}),
        suite([case(title="should qux")], path="/path/to/test/__tests__/bar.test.js",
              displayName="project2"),
    ))


@pytest.fixture
def failing_compilation():
    error_suite = suite(
        [],
        path="/path/to/spec/test.spec.ts",
        failureMessage=(
            "\x1b[1m\x1b[31m  \x1b[1m● \x1b[1mTest suite failed to run\n\n"
            "    \x1b[1m\x1b[31m../spec/test.spec.ts:5:12 - error TS2339: "
            "Property 'hello' does not exist on type 'Foo'.\x1b[0m"
        ),
        testExecError={"message": "Property 'hello' does not exist on type 'Foo'."},
    )
    passing = suite([case(title="should foo", ancestors=("foo",))],
                    path="/path/to/test/__tests__/foo.test.js")
    return RawReport.from_dict(report(error_suite, passing))


@pytest.fixture
def failing_import():
    return RawReport.from_dict(report(suite(
        [],
        path="/path/to/spec/test.spec.ts",
        failureMessage="  ● Test suite failed to run\n\n    Cannot find module './mult' from 'test.spec.ts'",
    )))


@pytest.fixture
def empty_suite():
    return RawReport.from_dict(report(suite(
        [],
        path="/path/to/spec/test.spec.ts",
        failureMessage="  ● Test suite failed to run\n\n    Your test suite must contain at least one test.",
    )))


@pytest.fixture
def exec_failure():
    return RawReport.from_dict(report(suite(
        [case()],
        testExecError={
            "message": "beforeAll has crashed",
            "stack": "Error: beforeAll has crashed\n    at Object.<anonymous> (foo.test.js:3:11)",
        },
    )))


@pytest.fixture
def exec_null():
    return RawReport.from_dict(report(suite([case()], testExecError=None)))


@pytest.fixture
def failing_tests():
    """Report from jest < 26.3, no failureDetails."""
    return RawReport.from_dict(report(suite([
        case(),
        case(title="should fail", status="failed", failure_messages=[ANSI_FAILURE]),
    ])))


@pytest.fixture
def failing_tests_with_details():
    return RawReport.from_dict(report(suite([
        case(),
        case(title="should fail", status="failed",
             failure_messages=[STACK_FAILURE],
             failureDetails=[{"message": "Should fail", "stack": STACK_FAILURE}]),
    ])))


@pytest.fixture
def console_output():
    return RawReport.from_dict(report(suite(
        [case()],
        console=[
            {"message": "I am bar", "origin": "foo.test.js:4", "type": "log"},
            {"message": "Some output here from a lib", "origin": "lib.js:9", "type": "warn"},
        ],
    )))


@pytest.fixture
def retried_tests():
    return RawReport.from_dict(report(suite([case(invocations=2)])))


@pytest.fixture
def raw_report():
    """Factory for reports built from plain dicts."""
    def _make(*suites, **extra):
        return RawReport.from_dict(copy.deepcopy(report(*suites, **extra)))
    return _make
