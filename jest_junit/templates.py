"""
Name templates for suites and test cases.

A template is either a literal string with ``{token}`` placeholders or a
function that receives the variable mapping and returns the name.
"""

import re
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, Union

from .errors import TemplateError

FILEPATH_VAR = "filepath"
FILENAME_VAR = "filename"
SUITENAME_VAR = "suitename"
CLASSNAME_VAR = "classname"
TITLE_VAR = "title"
DISPLAY_NAME_VAR = "displayName"

_TOKEN_RE = re.compile(r"\{(\w+)\}")

Variables = Mapping[str, Optional[str]]


@dataclass(frozen=True)
class LiteralTemplate:
    text: str


@dataclass(frozen=True)
class ComputedTemplate:
    func: Callable[[dict], str]


Template = Union[LiteralTemplate, ComputedTemplate]


def tag(var_name: str) -> str:
    return "{" + var_name + "}"


def as_template(value) -> Template:
    """Wrap a string or callable into a Template."""
    if isinstance(value, (LiteralTemplate, ComputedTemplate)):
        return value
    if callable(value):
        return ComputedTemplate(value)
    if value is None:
        return LiteralTemplate("")
    return LiteralTemplate(str(value))


def resolve(template, variables: Variables) -> str:
    """Resolve a template against ``variables``.

    Known tokens with a missing value become an empty string; tokens that are
    not in ``variables`` are left as they are.
    """
    template = as_template(template)

    if isinstance(template, ComputedTemplate):
        result = template.func(dict(variables))
        if not isinstance(result, str):
            raise TemplateError(
                f"Template function should return a string, got {type(result).__name__}"
            )
        return result

    def _sub(match):
        name = match.group(1)
        if name not in variables:
            return match.group(0)
        value = variables[name]
        return "" if value is None else str(value)

    return _TOKEN_RE.sub(_sub, template.text)


def suite_variables(filepath: str, filename: str, title: Optional[str],
                    display_name: Optional[str]) -> dict:
    return {
        FILEPATH_VAR: filepath,
        FILENAME_VAR: filename,
        TITLE_VAR: title,
        DISPLAY_NAME_VAR: display_name,
    }


def case_variables(filepath: str, filename: str, suitename: Optional[str],
                   classname: str, title: str, display_name: Optional[str]) -> dict:
    return {
        FILEPATH_VAR: filepath,
        FILENAME_VAR: filename,
        SUITENAME_VAR: suitename,
        CLASSNAME_VAR: classname,
        TITLE_VAR: title,
        DISPLAY_NAME_VAR: display_name,
    }
