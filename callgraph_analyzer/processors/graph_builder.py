"""
Graph builder for surviving class groups.
"""

from typing import Dict, List, Optional, Tuple

from ..core.types import (
    CallNode,
    ClassGroup,
    GraphEdge,
    GraphNode,
    DURATION_FALLBACK_METRICS,
    FUNCTION_TYPE_INTERNAL,
    FUNCTION_TYPE_METHOD,
    FUNCTION_TYPE_USER,
    ROOT_GROUP_KEY,
)
from ..formatters.label_formatter import LabelFormatter


ROOT_COLOR = '#808080'
ROOT_NODE_SIZE = 60
FUNCTION_TYPE_COLORS = {
    FUNCTION_TYPE_USER: ('user', '#4caf50'),
    FUNCTION_TYPE_INTERNAL: ('internal', '#ff9800'),
    FUNCTION_TYPE_METHOD: ('method', '#2196f3'),
}
UNKNOWN_COLOR = ('unknown', '#757575')


def clamp(low: float, high: float, value: float) -> float:
    return max(low, min(high, value))


class GraphBuilder:
    """Converts filtered class groups into graph nodes and weighted edges."""

    def __init__(self, class_grouper):
        """
        Initialize with class grouper.

        Args:
            class_grouper: ClassGrouper instance, used for group keys and dominant methods
        """
        self.class_grouper = class_grouper

    def build_nodes(self, filter_result, metric: str, root_count: int) -> List[GraphNode]:
        """
        Create one graph node per surviving group.

        Non-root groups with a value of exactly zero are dropped, except for
        wall_time and cpu which fall back to duration.

        Args:
            filter_result: FilterResult from ThresholdFilter
            metric: Selected metric dimension
            root_count: Number of real top-level calls

        Returns:
            Nodes ordered root first, then by percentage descending
        """
        formatter = LabelFormatter(metric)
        nodes = []

        for key, group in filter_result.groups.items():
            value = group.metric_value(metric)
            percentage = filter_result.percentages.get(key, 0.0)
            is_root = key == ROOT_GROUP_KEY

            if not is_root and value == 0 and metric not in DURATION_FALLBACK_METRICS:
                continue

            dominant = self.class_grouper.find_dominant_method(group)
            if is_root:
                color_class, color = 'root', ROOT_COLOR
                size = ROOT_NODE_SIZE
            else:
                color_class, color = FUNCTION_TYPE_COLORS.get(group.function_type, UNKNOWN_COLOR)
                size = clamp(35, 100, 40 + percentage)

            nodes.append(GraphNode(
                id=key,
                label=formatter.build_label(group, value, percentage, dominant, is_root, root_count),
                title=formatter.build_tooltip(group, value, percentage, dominant, is_root, root_count),
                metric_value=value,
                percentage=percentage,
                size=size,
                color=color,
                color_class=color_class,
                function_type=group.function_type,
                depth=group.depth,
                class_name=group.class_name,
                file_name=group.file_name,
                metrics=self._group_metrics(group),
                dominant_method=dominant,
            ))

        # sort() is stable, equal percentages keep group order
        nodes.sort(key=lambda n: (not n.is_root, -n.percentage))
        return nodes

    def build_edges(self, traversal_roots: List[CallNode], groups: Dict[str, ClassGroup],
                    percentages: Dict[str, float], node_ids) -> List[GraphEdge]:
        """
        Walk the unfiltered tree and connect surviving groups.

        The parent key carried down only moves to a node's own group when that
        group survived, so calls passing through hidden groups connect to the
        nearest visible ancestor.

        Args:
            traversal_roots: Tree roots, including the synthetic root if any
            groups: Surviving groups keyed by group key
            percentages: Display percentages of the surviving groups
            node_ids: Ids of the nodes actually built

        Returns:
            Deduplicated edges weighted by call count
        """
        call_counts = self.count_group_calls(traversal_roots, groups)

        edges = []
        for (parent_key, child_key), count in call_counts.items():
            if parent_key not in node_ids or child_key not in node_ids:
                continue

            width = clamp(1, 3, 1 + percentages.get(child_key, 0.0) / 10)
            edges.append(GraphEdge(
                source=parent_key,
                target=child_key,
                weight=count,
                label=f"{count}x" if count > 1 else '',
                width=width,
            ))
        return edges

    def count_group_calls(self, traversal_roots: List[CallNode],
                          groups: Dict[str, ClassGroup]) -> Dict[Tuple[str, str], int]:
        """
        Count calls between surviving groups.

        Returns:
            Ordered mapping of (parent_key, child_key) -> number of calls
        """
        counts: Dict[Tuple[str, str], int] = {}

        # Items are (node, last visible parent key), visited in pre-order
        stack: List[Tuple[CallNode, Optional[str]]] = [
            (root, None) for root in reversed(traversal_roots)
        ]
        while stack:
            node, last_valid_parent = stack.pop()
            current_key = self.class_grouper.group_key(node)
            is_current_visible = current_key in groups

            if is_current_visible and last_valid_parent is not None:
                if self.is_valid_edge(last_valid_parent, current_key, groups):
                    pair = (last_valid_parent, current_key)
                    counts[pair] = counts.get(pair, 0) + 1

            next_parent = current_key if is_current_visible else last_valid_parent
            stack.extend((child, next_parent) for child in reversed(node.children))

        return counts

    @staticmethod
    def is_valid_edge(parent_key: str, child_key: str, groups: Dict[str, ClassGroup]) -> bool:
        """
        Edges leave the root freely; otherwise both ends must be a class or a
        file, and self-loops are not allowed.
        """
        if parent_key == ROOT_GROUP_KEY:
            return True
        if parent_key == child_key:
            return False
        parent = groups.get(parent_key)
        child = groups.get(child_key)
        return bool(parent and child and parent.has_location and child.has_location)

    @staticmethod
    def _group_metrics(group: ClassGroup) -> Dict[str, float]:
        return {
            'duration': group.total_duration,
            'wall_time': group.total_wall_time,
            'cpu_time': group.total_cpu_time,
            'io_wait_time': group.total_io_wait_time,
            'memory_delta': group.total_memory_delta,
            'network_bytes': group.total_network_bytes,
        }
