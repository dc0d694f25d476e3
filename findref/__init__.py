"""Static reference analysis for single-file UI components."""

from .engine import analyze
from .models import AnalysisOptions, AnalysisResult

__version__ = "0.1.0"

__all__ = ["AnalysisOptions", "AnalysisResult", "__version__", "analyze"]
