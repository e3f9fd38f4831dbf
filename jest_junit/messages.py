"""Cleanup of failure and error text before it goes into the report."""

import re

# CSI sequences (colors, cursor moves), OSC sequences (hyperlinks) and
# two-byte escapes
_ANSI_RE = re.compile(
    r"(?:\x1b\[|\x9b)[0-?]*[ -/]*[@-~]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b[@-Z\\-_]"
)

# "at fn (file:1:2)", "at file:1:2", "at <anonymous>"
_STACK_FRAME_RE = re.compile(r"^\s*at (?:.+ \(.+\)|.+:\d+(?::\d+)?|<anonymous>|native)\s*$")


def strip_ansi(text: str) -> str:
    # removing one sequence can join its neighbours into a new one
    count = 1
    while count:
        text, count = _ANSI_RE.subn("", text)
    return text


def is_stack_frame(line: str) -> bool:
    return bool(_STACK_FRAME_RE.match(line))


def strip_stack_trace(text: str) -> str:
    """Drop everything from the first ``at <location>`` line onwards."""
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if is_stack_frame(line):
            return "\n".join(lines[:i]).rstrip()
    return text


def normalize_message(message: str, no_stack_trace: bool = False,
                      has_stack_metadata: bool = True) -> str:
    """
    Clean a failure message for the report.

    ANSI escapes are always removed. With ``no_stack_trace`` the stack frames
    are cut off, but only when the report carries structured failure data;
    messages from older reports are kept whole.

    Args:
        message: Raw failure or error text
        no_stack_trace: Whether stack frames should be removed
        has_stack_metadata: Whether the report provided failure details for
            this message

    Returns:
        The cleaned message
    """
    text = strip_ansi(message)
    if no_stack_trace and has_stack_metadata:
        text = strip_stack_trace(text)
    return text
