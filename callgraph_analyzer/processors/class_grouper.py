"""
Class grouper for call nodes.
"""

from typing import Dict, Optional, Tuple

from ..core.types import CallNode, ClassGroup, DominantMethod, MethodStats, NodeEntry


# Weights of the dominant method score
DURATION_WEIGHT = 0.7
CALL_COUNT_WEIGHT = 0.3


def extract_file_name(file_path: Optional[str]) -> Optional[str]:
    """
    Extract the last path segment of a file path.

    Args:
        file_path: POSIX or Windows style path

    Returns:
        File name, or None when the path is empty or ends with a separator
    """
    if not file_path:
        return None
    normalized = file_path.replace('\\', '/')
    return normalized.split('/')[-1] or None


class ClassGrouper:
    """Aggregates call nodes into class, file or function groups."""

    def __init__(self, metric_extractor):
        """
        Initialize with metric extractor.

        Args:
            metric_extractor: MetricExtractor instance
        """
        self.metric_extractor = metric_extractor

    @staticmethod
    def resolve_group(node: CallNode) -> Tuple[str, Optional[str], Optional[str]]:
        """
        Resolve the group a node belongs to.

        Precedence: class name, then file name, then bare function name.

        Returns:
            Tuple of (group_key, class_name, file_name)
        """
        if node.class_name:
            return node.class_name, node.class_name, None

        file_name = extract_file_name(node.file)
        if file_name:
            return file_name, None, file_name

        return node.function, None, None

    @classmethod
    def group_key(cls, node: CallNode) -> str:
        return cls.resolve_group(node)[0]

    def group_nodes(self, index: Dict[str, NodeEntry]) -> Dict[str, ClassGroup]:
        """
        Group every included node of the index.

        Totals are sums of self/exclusive values so that a group holding both a
        function and its own descendants never counts the descendants twice.

        Args:
            index: Node index from HierarchyBuilder.build_node_index

        Returns:
            Ordered mapping of group key -> ClassGroup
        """
        groups: Dict[str, ClassGroup] = {}

        for entry in index.values():
            if not entry.should_include:
                continue

            node = entry.node
            key, class_name, file_name = self.resolve_group(node)

            group = groups.get(key)
            if group is None:
                group = ClassGroup(
                    key=key,
                    class_name=class_name,
                    file_name=file_name,
                    function_type=node.function_type,
                    depth=entry.depth,
                )
                groups[key] = group
            else:
                group.depth = min(group.depth, entry.depth)

            method = group.methods.get(node.function)
            if method is None:
                method = MethodStats(node=node)
                group.methods[node.function] = method
            method.call_count += 1

            self_values = self.metric_extractor.self_values(node)
            self_duration = self_values['wall_time']

            method.total_duration += self_duration
            group.total_duration += self_duration
            group.total_wall_time += self_values['wall_time']
            group.total_memory_delta += self_values['memory']
            group.total_cpu_time += self_values['cpu']
            group.total_io_wait_time += self_values['io_wait']
            group.total_network_bytes += self_values['network']

        return groups

    @staticmethod
    def find_dominant_method(group: ClassGroup) -> Optional[DominantMethod]:
        """
        Pick the method that best represents the group.

        score = 0.7 * self duration + 0.3 * call count * average duration per method.
        Ties keep the first method encountered.

        Args:
            group: ClassGroup to inspect

        Returns:
            DominantMethod or None when no method scores above zero
        """
        if not group.methods:
            return None

        average_per_method = group.total_duration / len(group.methods)
        dominant = None
        max_score = 0.0

        for method_name, stats in group.methods.items():
            score = (
                DURATION_WEIGHT * stats.total_duration
                + CALL_COUNT_WEIGHT * stats.call_count * average_per_method
            )
            if score > max_score:
                max_score = score
                dominant = DominantMethod(
                    method_name=method_name,
                    call_count=stats.call_count,
                    duration=stats.total_duration,
                )

        return dominant
