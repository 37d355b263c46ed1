"""
Hierarchical level assignment for layered graph layout.
"""

from collections import defaultdict, deque
from typing import Dict, List

from ..core.types import GraphEdge, GraphNode


class LevelAssigner:
    """Assigns breadth-first levels to graph nodes."""

    @staticmethod
    def assign_levels(nodes: List[GraphNode], edges: List[GraphEdge]) -> Dict[str, int]:
        """
        Compute a level for every node and store it on the node.

        Roots (the root marker, or nodes without incoming edges) start at 0. A
        node's level is the shortest distance from any root; levels are only
        ever lowered while relaxing. Nodes BFS cannot reach sit one level below
        their deepest assigned parent, or at 0 without parents.

        Args:
            nodes: Graph nodes (modified in-place)
            edges: Graph edges

        Returns:
            Mapping of node id -> level
        """
        if not nodes:
            return {}

        node_ids = {node.id for node in nodes}
        children = defaultdict(list)
        parents = defaultdict(list)
        for edge in edges:
            if edge.source in node_ids and edge.target in node_ids:
                children[edge.source].append(edge.target)
                parents[edge.target].append(edge.source)

        roots = [node for node in nodes if node.is_root or not parents.get(node.id)]
        if not roots:
            # Every node sits on a cycle; start from the shallowest one
            roots = [min(nodes, key=lambda n: n.depth)]

        levels: Dict[str, int] = {}
        queue = deque()
        for root in roots:
            levels[root.id] = 0
            queue.append(root.id)

        while queue:
            node_id = queue.popleft()
            child_level = levels[node_id] + 1
            for child_id in children.get(node_id, []):
                existing = levels.get(child_id)
                if existing is None or child_level < existing:
                    levels[child_id] = child_level
                    queue.append(child_id)

        for node in nodes:
            if node.id in levels:
                continue
            incoming = parents.get(node.id)
            if incoming:
                levels[node.id] = max(levels.get(parent, 0) for parent in incoming) + 1
            else:
                levels[node.id] = 0

        for node in nodes:
            node.level = levels[node.id]
        return levels
