"""TCX HIIT Analyzer.

Parses heart-rate samples from TCX activity files and scores HIIT sessions:
heart-rate zones, per-interval recovery, calories and a text report.
"""

from .tcx_parser import ParseError, Sample, parse
from .analyzer import (
    AnalysisResult, HeartRateZone, IntervalResult, WorkoutParameters, analyze
)
from .report import build_report

__all__ = [
    'ParseError', 'Sample', 'parse',
    'AnalysisResult', 'HeartRateZone', 'IntervalResult', 'WorkoutParameters', 'analyze',
    'build_report',
]
