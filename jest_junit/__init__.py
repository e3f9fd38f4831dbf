"""Convert jest JSON test reports into JUnit XML."""

from .builder import build_document
from .errors import ConfigError, JestJunitError, PropertiesProviderError, TemplateError
from .models import AggregateCounts, Node, RawReport
from .options import ReporterOptions, load_options
from .serializer import to_xml, write_xml

__version__ = "0.1.0"

__all__ = [
    "AggregateCounts",
    "ConfigError",
    "JestJunitError",
    "Node",
    "PropertiesProviderError",
    "RawReport",
    "ReporterOptions",
    "TemplateError",
    "build_document",
    "load_options",
    "to_xml",
    "write_xml",
]
