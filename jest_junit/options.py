"""
Reporter configuration.

Options come from (lowest to highest priority) a config file, ``JEST_JUNIT_*``
environment variables and explicit overrides. Everything is normalized here
so the converter only ever sees real booleans and Template objects.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

from .errors import ConfigError
from .templates import (
    FILEPATH_VAR,
    TITLE_VAR,
    LiteralTemplate,
    Template,
    as_template,
    tag,
)

logger = logging.getLogger(__name__)

DEFAULT_SUITE_NAME = "jest tests"
DEFAULT_CASE_TEMPLATE = "{classname} {title}"

# camelCase config key -> environment variable
ENV_VARS = {
    "suiteName": "JEST_SUITE_NAME",
    "outputDirectory": "JEST_JUNIT_OUTPUT_DIR",
    "outputName": "JEST_JUNIT_OUTPUT_NAME",
    "outputFile": "JEST_JUNIT_OUTPUT_FILE",
    "classNameTemplate": "JEST_JUNIT_CLASSNAME",
    "suiteNameTemplate": "JEST_JUNIT_SUITE_NAME",
    "titleTemplate": "JEST_JUNIT_TITLE",
    "ancestorSeparator": "JEST_JUNIT_ANCESTOR_SEPARATOR",
    "addFileAttribute": "JEST_JUNIT_ADD_FILE_ATTRIBUTE",
    "filePathPrefix": "JEST_JUNIT_FILE_PATH_PREFIX",
    "includeConsoleOutput": "JEST_JUNIT_INCLUDE_CONSOLE_OUTPUT",
    "includeShortConsoleOutput": "JEST_JUNIT_INCLUDE_SHORT_CONSOLE_OUTPUT",
    "reportTestSuiteErrors": "JEST_JUNIT_REPORT_TEST_SUITE_ERRORS",
    "noStackTrace": "JEST_JUNIT_NO_STACK_TRACE",
    "usePathForSuiteName": "JEST_USE_PATH_FOR_SUITE_NAME",
    "ownerName": "JEST_JUNIT_OWNER_NAME",
    "testSuitePropertiesFile": "JEST_JUNIT_TEST_SUITE_PROPERTIES_FILE",
    "testCasePropertiesFile": "JEST_JUNIT_TEST_CASE_PROPERTIES_FILE",
}

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off", ""}


def _to_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"Option {key} expects true/false, got {value!r}")


def _snake(name: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in name)


@dataclass(frozen=True)
class ReporterOptions:
    """Typed reporter options. Field defaults match the reporter defaults."""
    suite_name: str = DEFAULT_SUITE_NAME
    suite_name_template: Template = LiteralTemplate(tag(TITLE_VAR))
    class_name_template: Template = LiteralTemplate(DEFAULT_CASE_TEMPLATE)
    title_template: Template = LiteralTemplate(DEFAULT_CASE_TEMPLATE)
    ancestor_separator: str = " "
    use_path_for_suite_name: bool = False
    add_file_attribute: bool = False
    file_path_prefix: str = ""
    include_console_output: bool = False
    include_short_console_output: bool = False
    report_test_suite_errors: bool = False
    no_stack_trace: bool = False
    owner_name: Optional[str] = None
    output_directory: str = "."
    output_name: str = "junit.xml"
    output_file: Optional[str] = None
    test_suite_properties_file: str = "junitProperties.py"
    test_case_properties_file: str = "junitTestCaseProperties.py"
    extra: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def effective_suite_name_template(self) -> Template:
        # usePathForSuiteName only replaces the default template
        if self.use_path_for_suite_name and \
                self.suite_name_template == LiteralTemplate(tag(TITLE_VAR)):
            return LiteralTemplate(tag(FILEPATH_VAR))
        return self.suite_name_template

    @property
    def output_path(self) -> Path:
        if self.output_file:
            return Path(self.output_file)
        return Path(self.output_directory) / self.output_name

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping] = None) -> "ReporterOptions":
        """
        Build options from a camelCase or snake_case mapping.

        String booleans such as ``"true"`` are converted; unknown keys are
        ignored with a warning.
        """
        known = {f.name: f for f in fields(cls) if f.name != "extra"}
        values = {}
        extra = {}
        for key, value in (mapping or {}).items():
            name = _snake(key)
            if name not in known:
                logger.warning(f"Ignoring unknown reporter option: {key}")
                extra[key] = value
                continue
            values[name] = value

        for name, value in list(values.items()):
            default = known[name].default
            if name.endswith("_template"):
                values[name] = as_template(value)
            elif isinstance(default, bool):
                values[name] = _to_bool(name, value)
            elif name == "owner_name":
                values[name] = str(value) if value not in (None, "") else None
            elif name == "output_file":
                values[name] = str(value) if value else None
            elif value is None:
                values[name] = default
            else:
                values[name] = str(value)

        if values.get("ancestor_separator") == "":
            values["ancestor_separator"] = " "

        if values.get("include_console_output") and values.get("include_short_console_output"):
            logger.warning("Both includeConsoleOutput and includeShortConsoleOutput are set; "
                           "using includeConsoleOutput")
            values["include_short_console_output"] = False

        return cls(extra=extra, **values)


def read_config_file(path) -> dict:
    """Read options from a YAML, JSON or .env style file.

    YAML and JSON files may nest the options under a ``jest-junit`` key, the
    same way they are nested in package.json. ``.env`` files use the
    environment variable names.
    """
    path = Path(path)
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()

    if suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text)
    else:
        env = {}
        for line in text.splitlines():
            line = line.strip()
            if line and not line.startswith('#') and '=' in line:
                key, value = line.split('=', 1)
                env[key.strip()] = value.strip().strip('"\'')
        return options_from_env(env)

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    if isinstance(data.get("jest-junit"), dict):
        data = data["jest-junit"]
    return data


def options_from_env(environ: Optional[Mapping[str, str]] = None) -> dict:
    environ = os.environ if environ is None else environ
    config = {}
    for key, env_name in ENV_VARS.items():
        value = environ.get(env_name)
        if value is not None:
            config[key] = value
    return config


def load_options(config_file=None, environ: Optional[Mapping[str, str]] = None,
                 overrides: Optional[Mapping] = None) -> ReporterOptions:
    """Merge config file, environment and overrides into ReporterOptions."""
    config = {}
    if config_file:
        config.update(read_config_file(config_file))
        logger.debug(f"Loaded reporter options from {config_file}")
    config.update(options_from_env(environ))
    if overrides:
        config.update({k: v for k, v in overrides.items() if v is not None})
    return ReporterOptions.from_mapping(config)
