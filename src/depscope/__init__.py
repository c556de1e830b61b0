"""depscope - dependency and quality analysis for TypeScript/JavaScript projects."""

__version__ = "0.1.0"

from .api import analyze, clear_caches
from .config import AnalyzerOptions, load_config
from .report.aggregator import ProjectReport

__all__ = [
    "__version__",
    "analyze",
    "clear_caches",
    "AnalyzerOptions",
    "load_config",
    "ProjectReport",
]
