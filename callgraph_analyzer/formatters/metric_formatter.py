"""
Metric formatting utilities for human-readable output.
"""

from ..core.types import FUNCTION_TYPE_USER, FUNCTION_TYPE_INTERNAL, FUNCTION_TYPE_METHOD


KB = 1024
MB = 1024 * 1024
GB = 1024 * 1024 * 1024

METRIC_LABELS = {
    'wall_time': 'Wall Time',
    'io_wait': 'I/O Wait',
    'cpu': 'CPU',
    'memory': 'Memory',
    'network': 'Network',
}

FUNCTION_TYPE_LABELS = {
    FUNCTION_TYPE_USER: 'User Function',
    FUNCTION_TYPE_INTERNAL: 'Internal Function',
    FUNCTION_TYPE_METHOD: 'Method',
}


def format_duration(ms: float) -> str:
    """
    Format a duration in milliseconds.
    
    Args:
        ms: Duration in milliseconds
        
    Returns:
        Formatted string (e.g., "250µs", "42ms", "1.50s")
    """
    if ms < 1:
        return f"{round(ms * 1000)}µs"
    if ms < 1000:
        return f"{round(ms)}ms"
    return f"{ms / 1000:.2f}s"


def format_bytes(num_bytes: float) -> str:
    """
    Format a byte count, keeping the sign for negative memory deltas.
    
    Args:
        num_bytes: Number of bytes
        
    Returns:
        Formatted string (e.g., "512B", "1.50KB", "2.00MB")
    """
    if num_bytes == 0:
        return '0B'
    size = abs(num_bytes)
    if size < KB:
        return f"{num_bytes:g}B"
    if size < MB:
        return f"{num_bytes / KB:.2f}KB"
    if size < GB:
        return f"{num_bytes / MB:.2f}MB"
    return f"{num_bytes / GB:.2f}GB"


def format_metric_value(value: float, metric: str) -> str:
    """
    Format a metric value; time metrics are stored in seconds.
    
    Args:
        value: Metric value
        metric: Metric dimension
    """
    if metric in ('memory', 'network'):
        return format_bytes(value)
    return format_duration(value * 1000)


def metric_label(metric: str) -> str:
    return METRIC_LABELS.get(metric, 'Duration')


def function_type_label(function_type: int) -> str:
    return FUNCTION_TYPE_LABELS.get(function_type, 'Unknown')
