"""Filters deciding which calls and groups reach the graph."""

from .duration_filter import DurationFilter
from .function_type_filter import FunctionTypeFilter
from .threshold_filter import ThresholdFilter, FilterResult

__all__ = ["DurationFilter", "FunctionTypeFilter", "ThresholdFilter", "FilterResult"]
