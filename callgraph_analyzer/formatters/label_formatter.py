"""
Label and tooltip text for graph nodes.
"""

from collections import Counter
from typing import List, Optional

from ..core.types import ClassGroup, DominantMethod
from .metric_formatter import (
    format_bytes,
    format_duration,
    format_metric_value,
    function_type_label,
    metric_label,
)


MAX_DISPLAY_NAME = 35
MAX_METHOD_NAME = 28
MAX_SIGNATURE = 30
LIST_LIMIT = 15
DOMINANT_PREFIX = '▶ '


def truncate(text: str, max_length: int) -> str:
    """Shorten text to max_length, ending with '...' when cut."""
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + '...'


class LabelFormatter:
    """Builds the text shown on and around graph nodes."""

    def __init__(self, metric: str):
        """
        Args:
            metric: Selected metric dimension
        """
        self.metric = metric

    @staticmethod
    def display_name(group: ClassGroup) -> str:
        return group.class_name or group.file_name or group.key

    @staticmethod
    def format_methods_list(group: ClassGroup, dominant: Optional[DominantMethod],
                            limit: int = LIST_LIMIT) -> str:
        """
        List the group's methods, dominant first, then by self duration.
        """
        if not group.methods:
            return ''

        dominant_name = dominant.method_name if dominant else None
        entries = list(group.methods.items())
        entries.sort(key=lambda item: (item[0] != dominant_name, -item[1].total_duration))

        lines = []
        for method_name, stats in entries[:limit]:
            prefix = DOMINANT_PREFIX if method_name == dominant_name else '  '
            display = f"{group.class_name}::{method_name}" if group.class_name else method_name
            lines.append(f"{prefix}{truncate(display, MAX_METHOD_NAME)} ({stats.call_count}x)")
        return '\n'.join(lines)

    @staticmethod
    def format_internal_calls(group: ClassGroup, limit: int = LIST_LIMIT) -> str:
        """
        Summarize what the group's representative nodes call, most frequent first.
        """
        counts = Counter()
        for stats in group.methods.values():
            for child in stats.node.children:
                counts[child.signature] += 1

        if not counts:
            return ''

        lines = [
            f"{truncate(signature, MAX_SIGNATURE)} ({count}x)"
            for signature, count in counts.most_common(limit)
        ]
        return '\n'.join(lines)

    def build_label(self, group: ClassGroup, value: float, percentage: float,
                    dominant: Optional[DominantMethod], is_root: bool, root_count: int) -> str:
        name = self.display_name(group)
        if is_root:
            label = f"{name}\n{root_count} root{'s' if root_count > 1 else ''}"
        else:
            label = (
                f"{truncate(name, MAX_DISPLAY_NAME)}\n"
                f"{format_metric_value(value, self.metric)} ({percentage:.1f}%)"
            )

        for section in (self.format_methods_list(group, dominant), self.format_internal_calls(group)):
            if section:
                label += '\n' + section
        return label

    def build_tooltip(self, group: ClassGroup, value: float, percentage: float,
                      dominant: Optional[DominantMethod], is_root: bool, root_count: int) -> str:
        parts: List[str] = [self.display_name(group)]
        if is_root:
            parts.append(f"Synthetic root node grouping {root_count} root node(s)")
        if group.class_name:
            parts.append(f"Class: {group.class_name}")
        if group.file_name:
            parts.append(f"File: {group.file_name}")

        parts.extend([
            f"Functions/Methods: {len(group.methods)}",
            f"Total Calls: {group.total_calls}",
            f"Type: {function_type_label(group.function_type)}",
            f"{metric_label(self.metric)}: {format_metric_value(value, self.metric)} ({percentage:.2f}%)",
            f"Total Duration: {format_duration(group.total_duration * 1000)}",
            f"Total Memory: {format_bytes(group.total_memory_delta)}",
            f"Total CPU: {format_duration(group.total_cpu_time * 1000)}",
            f"Total IO Wait: {format_duration(group.total_io_wait_time * 1000)}",
            f"Total Wall Time: {format_duration(group.total_wall_time * 1000)}",
        ])
        if group.total_network_bytes > 0:
            parts.append(f"Total Network: {format_bytes(group.total_network_bytes)}")

        if dominant:
            parts.append(
                f"Dominant Method: {dominant.method_name} "
                f"({dominant.call_count}x, {format_duration(dominant.duration * 1000)})"
            )
        return '\n'.join(parts)
