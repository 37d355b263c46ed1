"""
Inclusive and self (exclusive) metric extraction for call nodes.
"""

from typing import Dict, Iterable

from ..core.types import CallNode, METRIC_TYPES


class MetricExtractor:
    """Computes per-node metric values for a metric dimension."""

    @staticmethod
    def inclusive_value(node: CallNode, metric: str) -> float:
        """
        Metric value of a node including everything its children did.

        Args:
            node: Normalized call node
            metric: One of METRIC_TYPES

        Returns:
            Inclusive value (seconds for time metrics, bytes otherwise)
        """
        if metric == 'wall_time':
            return node.wall_time if node.wall_time is not None else node.duration
        if metric == 'io_wait':
            return node.io_wait_time or 0.0
        if metric == 'cpu':
            return node.cpu_time if node.cpu_time is not None else node.duration
        if metric == 'memory':
            return abs(node.memory_delta)
        if metric == 'network':
            return (node.bytes_sent_delta or 0.0) + (node.bytes_received_delta or 0.0)
        return node.duration

    @classmethod
    def self_value(cls, node: CallNode, metric: str) -> float:
        """
        Metric value of a node with its direct children's inclusive values
        subtracted.

        Memory is handled on the signed delta and only then made absolute, since
        frees can legitimately outweigh allocations. Every other metric is
        floored at zero.

        Args:
            node: Normalized call node
            metric: One of METRIC_TYPES

        Returns:
            Self/exclusive value, never negative
        """
        if metric == 'memory':
            return abs(cls.signed_self_memory(node))

        children_value = sum(cls.inclusive_value(child, metric) for child in node.children)
        return max(0.0, cls.inclusive_value(node, metric) - children_value)

    @staticmethod
    def signed_self_memory(node: CallNode) -> float:
        """Signed memory delta of a node minus the signed deltas of its children."""
        children_memory = sum(child.memory_delta or 0.0 for child in node.children)
        return (node.memory_delta or 0.0) - children_memory

    @classmethod
    def self_values(cls, node: CallNode) -> Dict[str, float]:
        """Self values for every metric dimension."""
        return {metric: cls.self_value(node, metric) for metric in METRIC_TYPES}

    @classmethod
    def total_metric(cls, roots: Iterable[CallNode], metric: str) -> float:
        """
        Sum of self values over a whole tree.

        Args:
            roots: Root nodes of the tree
            metric: One of METRIC_TYPES

        Returns:
            Total of self/exclusive values across every node
        """
        total = 0.0
        stack = list(roots)
        while stack:
            node = stack.pop()
            total += cls.self_value(node, metric)
            stack.extend(node.children)
        return total
