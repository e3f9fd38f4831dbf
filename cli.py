#!/usr/bin/env python3
"""CLI for converting jest JSON reports to JUnit XML."""

import argparse
import json
import logging
import sys

import core
from jest_junit.errors import JestJunitError


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(levelname)s: %(message)s'
    )


def _overrides(args) -> dict:
    """Reporter options given on the command line."""
    return {
        'suiteName': args.suite_name,
        'suiteNameTemplate': args.suite_name_template,
        'classNameTemplate': args.classname,
        'titleTemplate': args.title,
        'ancestorSeparator': args.ancestor_separator,
        'usePathForSuiteName': args.use_path_for_suite_name,
        'addFileAttribute': args.add_file_attribute,
        'filePathPrefix': args.file_path_prefix,
        'includeConsoleOutput': args.include_console_output,
        'includeShortConsoleOutput': args.include_short_console_output,
        'reportTestSuiteErrors': args.report_test_suite_errors,
        'noStackTrace': args.no_stack_trace,
        'ownerName': args.owner_name,
    }


def cmd_convert(args):
    """Convert a report and write the XML file."""
    result = core.convert_report(
        args.report,
        output=args.output,
        config_file=args.config,
        app_directory=args.app_dir,
        overrides=_overrides(args),
        write=not args.stdout,
    )

    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1

    if args.stdout:
        sys.stdout.write(result["xml"])
    else:
        totals = result["totals"]
        print(f"Wrote {result['output']} "
              f"({totals['tests']} tests, {totals['failures']} failures, {totals['errors']} errors)")
    return 0


def cmd_summary(args):
    """Print the totals the converted document would have."""
    result = core.convert_report(
        args.report,
        config_file=args.config,
        app_directory=args.app_dir,
        overrides=_overrides(args),
        write=False,
    )

    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1

    totals = result["totals"]
    if args.format == 'json':
        print(json.dumps(totals, indent=2))
    else:
        _print_summary(totals)
    return 0 if totals['failures'] == 0 and totals['errors'] == 0 else 1


def _print_summary(totals: dict):
    """Print human-readable summary."""
    print(f"\n{'='*60}")
    print(f"Suites:   {totals['suites']}")
    print(f"Tests:    {totals['tests']}")
    print(f"Failures: {totals['failures']}")
    print(f"Errors:   {totals['errors']}")
    print(f"Skipped:  {totals['skipped']}")
    print(f"Time:     {totals['time']:.3f}s")
    print(f"{'='*60}\n")


def _add_report_options(p):
    p.add_argument('report', help='jest JSON report (from `jest --json`), or - for stdin')
    p.add_argument('--config', '-c', help='YAML, JSON or .env file with reporter options')
    p.add_argument('--app-dir', help='Directory test file paths are relative to (default: cwd)')
    p.add_argument('--suite-name', help='Name of the <testsuites> element')
    p.add_argument('--suite-name-template', help='Template for suite names, e.g. "{filename}"')
    p.add_argument('--classname', help='Template for test case classnames')
    p.add_argument('--title', help='Template for test case names')
    p.add_argument('--ancestor-separator', help='Separator between describe block titles')
    p.add_argument('--use-path-for-suite-name', action='store_true', default=None)
    p.add_argument('--add-file-attribute', action='store_true', default=None,
                   help='Add a file attribute to every test case')
    p.add_argument('--file-path-prefix', help='Prefix for the file attribute')
    p.add_argument('--include-console-output', action='store_true', default=None)
    p.add_argument('--include-short-console-output', action='store_true', default=None)
    p.add_argument('--report-test-suite-errors', action='store_true', default=None,
                   help='Report suites that failed to run as errors')
    p.add_argument('--no-stack-trace', action='store_true', default=None,
                   help='Remove stack traces from failure messages')
    p.add_argument('--owner-name', help='Owner attribute for every test case')


def main():
    parser = argparse.ArgumentParser(description='Convert jest JSON reports to JUnit XML')
    parser.add_argument('-v', '--verbose', action='store_true')

    sub = parser.add_subparsers(dest='command')

    p = sub.add_parser('convert', help='Write a JUnit XML file')
    _add_report_options(p)
    p.add_argument('--output', '-o', help='Output file (default: outputDirectory/outputName)')
    p.add_argument('--stdout', action='store_true', help='Print the XML instead of writing a file')

    p = sub.add_parser('summary', help='Show totals for a report')
    _add_report_options(p)
    p.add_argument('--format', '-f', choices=['text', 'json'], default='text')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)

    cmds = {
        'convert': cmd_convert,
        'summary': cmd_summary,
    }
    try:
        return cmds[args.command](args)
    except JestJunitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
