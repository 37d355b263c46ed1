"""Formatting utilities for graph output."""

from .metric_formatter import (
    format_duration,
    format_bytes,
    format_metric_value,
    metric_label,
    function_type_label,
)
from .label_formatter import LabelFormatter

__all__ = [
    "format_duration",
    "format_bytes",
    "format_metric_value",
    "metric_label",
    "function_type_label",
    "LabelFormatter",
]
