"""
Hierarchy builder for normalized call trees.
"""

from typing import Dict, List, Optional

from ..core.types import (
    CallNode,
    NodeEntry,
    DURATION_FALLBACK_METRICS,
    ROOT_GROUP_KEY,
    SYNTHETIC_ROOT_ID,
)


class HierarchyBuilder:
    """Builds the traversal root and the flat node index for a call tree."""

    def __init__(self, metric_extractor, function_type_filter):
        """
        Initialize with the metric extractor and visibility filter.

        Args:
            metric_extractor: MetricExtractor instance
            function_type_filter: FunctionTypeFilter instance
        """
        self.metric_extractor = metric_extractor
        self.function_type_filter = function_type_filter

    @staticmethod
    def build_traversal_roots(roots: List[CallNode]) -> List[CallNode]:
        """
        Unify several top-level calls under one synthetic root.

        Args:
            roots: Normalized root nodes

        Returns:
            The single root unchanged, or a one-element list with the synthetic root
        """
        if len(roots) <= 1:
            return list(roots)

        total_cpu = sum(r.cpu_time or 0.0 for r in roots)
        total_io_wait = sum(r.io_wait_time or 0.0 for r in roots)
        total_wall = sum(
            (r.wall_time if r.wall_time is not None else r.duration) or 0.0
            for r in roots
        )

        synthetic_root = CallNode(
            id=SYNTHETIC_ROOT_ID,
            function=ROOT_GROUP_KEY,
            duration=sum(r.duration or 0.0 for r in roots),
            memory_delta=sum(r.memory_delta or 0.0 for r in roots),
            cpu_time=total_cpu if total_cpu > 0 else None,
            io_wait_time=total_io_wait,
            wall_time=total_wall if total_wall > 0 else None,
            children=list(roots),
        )
        return [synthetic_root]

    def build_node_index(self, traversal_roots: List[CallNode], metric: str) -> Dict[str, NodeEntry]:
        """
        Pre-pass over the tree recording parent, depth and visibility per node.

        For metrics without a duration fallback, nodes below the top with a zero
        self value are left out; their children are still indexed and point at
        the skipped node's parent.

        Args:
            traversal_roots: Output of build_traversal_roots
            metric: Selected metric dimension

        Returns:
            Ordered mapping of node id -> NodeEntry
        """
        index: Dict[str, NodeEntry] = {}

        # Children are pushed in reverse so nodes are indexed in pre-order
        stack = [(root, None, 0) for root in reversed(traversal_roots)]
        while stack:
            node, parent_id, depth = stack.pop()
            skip = (
                depth > 0
                and metric not in DURATION_FALLBACK_METRICS
                and self.metric_extractor.self_value(node, metric) == 0
            )

            if skip:
                stack.extend((child, parent_id, depth + 1) for child in reversed(node.children))
                continue

            # A repeated id means the subtree was already walked
            if node.id in index:
                continue

            should_include = (
                node.id == SYNTHETIC_ROOT_ID
                or self.function_type_filter.should_include_node(node)
            )
            index[node.id] = NodeEntry(
                node=node,
                parent_id=parent_id,
                depth=depth,
                should_include=should_include,
            )

            stack.extend((child, node.id, depth + 1) for child in reversed(node.children))

        return index

    @staticmethod
    def find_node_id(
        index: Dict[str, NodeEntry],
        function: str,
        class_name: Optional[str] = None,
        file: Optional[str] = None,
        line: Optional[int] = None
    ) -> Optional[str]:
        """
        Find the node matching a selected signature. The last match wins.

        Args:
            index: Node index from build_node_index
            function: Function name
            class_name: Optional class name
            file: Optional file path, ignored when not given
            line: Optional line number, ignored when not given

        Returns:
            Matching node id or None
        """
        signature = f"{class_name}::{function}" if class_name else function

        match = None
        for node_id, entry in index.items():
            node = entry.node
            if node.signature != signature:
                continue
            if file and node.file != file:
                continue
            if line and node.line != line:
                continue
            match = node_id
        return match

    @staticmethod
    def get_call_stack_path(index: Dict[str, NodeEntry], node_id: Optional[str]) -> List[CallNode]:
        """
        Walk parent links from a node up to its root.

        Args:
            index: Node index from build_node_index
            node_id: Id of the selected node

        Returns:
            Nodes ordered from the root down to the selected node
        """
        path = []
        visited = set()
        current = node_id

        while current and current not in visited:
            visited.add(current)
            entry = index.get(current)
            if entry is None:
                break
            path.append(entry.node)
            current = entry.parent_id

        path.reverse()
        return path
