"""
User supplied ``<properties>`` for suites and test cases.

A properties file is a plain Python file. For test cases it defines
``case_properties(test_case)`` returning a list of ``{"name", "value"}``
dicts; for suites it defines ``suite_properties(test_suite)`` returning a
mapping of property name to value (a template string or a value). Both get
the raw JSON objects from the jest report.

Providers are loaded by the caller before the conversion and passed in.
"""

import importlib.util
import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from .errors import PropertiesProviderError

logger = logging.getLogger(__name__)

CASE_PROPERTIES_FUNC = "case_properties"
SUITE_PROPERTIES_FUNC = "suite_properties"

CasePropertiesProvider = Callable[[dict], list]
SuitePropertiesProvider = Callable[[dict], Mapping[str, Any]]


def _load_function(path: Path, func_name: str) -> Callable:
    module_name = f"jest_junit_props_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PropertiesProviderError(f"Cannot load properties file: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    func = getattr(module, func_name, None)
    if not callable(func):
        raise PropertiesProviderError(f"{path} does not define a {func_name}() function")
    return func


def load_case_properties_provider(path, base_dir=None) -> Optional[CasePropertiesProvider]:
    """Load ``case_properties`` from ``path``; None if the file does not exist."""
    resolved = _resolve(path, base_dir)
    if resolved is None:
        return None
    logger.debug(f"Using test case properties from {resolved}")
    return _load_function(resolved, CASE_PROPERTIES_FUNC)


def load_suite_properties_provider(path, base_dir=None) -> Optional[SuitePropertiesProvider]:
    """Load ``suite_properties`` from ``path``; None if the file does not exist."""
    resolved = _resolve(path, base_dir)
    if resolved is None:
        return None
    logger.debug(f"Using test suite properties from {resolved}")
    return _load_function(resolved, SUITE_PROPERTIES_FUNC)


def _resolve(path, base_dir) -> Optional[Path]:
    if not path:
        return None
    p = Path(path)
    if not p.is_absolute():
        p = Path(base_dir or Path.cwd()) / p
    return p if p.is_file() else None


def call_case_provider(provider: CasePropertiesProvider, raw_case: dict) -> list[tuple[str, Any]]:
    """Run the provider for one case and check what it returned."""
    result = provider(raw_case)
    if result is None:
        return []
    if not isinstance(result, (list, tuple)):
        raise PropertiesProviderError(
            f"case_properties() must return a list, got {type(result).__name__}"
        )
    pairs = []
    for item in result:
        if not isinstance(item, Mapping) or "name" not in item or "value" not in item:
            raise PropertiesProviderError(
                f"case_properties() items must be {{'name': ..., 'value': ...}}, got {item!r}"
            )
        pairs.append((str(item["name"]), item["value"]))
    return pairs


def call_suite_provider(provider: SuitePropertiesProvider, raw_suite: dict) -> dict[str, Any]:
    result = provider(raw_suite)
    if result is None:
        return {}
    if not isinstance(result, Mapping):
        raise PropertiesProviderError(
            f"suite_properties() must return a mapping, got {type(result).__name__}"
        )
    return {str(k): v for k, v in result.items()}
