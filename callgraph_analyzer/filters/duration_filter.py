"""
Minimum duration pruning for call trees.
"""

from dataclasses import replace
from typing import List, Optional, Tuple

from ..core.types import CallNode


class DurationFilter:
    """Prunes calls shorter than a threshold while keeping their slow descendants."""
    
    def __init__(self, min_duration_ms: Optional[float] = None):
        """
        Args:
            min_duration_ms: Threshold in milliseconds, None disables the filter
        """
        self.min_duration_ms = min_duration_ms
    
    @property
    def enabled(self) -> bool:
        return self.min_duration_ms is not None
    
    def filter_tree(self, roots: List[CallNode]) -> List[CallNode]:
        """
        Return a pruned copy of the tree. The input is left untouched.
        
        A fast node survives only as the parent of slow descendants; a fast
        leaf is dropped.
        
        Args:
            roots: Normalized root nodes
            
        Returns:
            Pruned root nodes
        """
        if not self.enabled:
            return roots
        
        # Node durations are stored in seconds
        threshold = self.min_duration_ms / 1000.0

        # Pre-order list of (node, position of its parent), -1 for roots
        order: List[Tuple[CallNode, int]] = []
        stack = [(root, -1) for root in reversed(roots)]
        while stack:
            node, parent_position = stack.pop()
            position = len(order)
            order.append((node, parent_position))
            stack.extend((child, position) for child in reversed(node.children))

        # Walking the list backwards settles every child before its parent;
        # kept children are collected last-first and reversed on use
        kept_children: List[List[CallNode]] = [[] for _ in order]
        result = []
        for position in range(len(order) - 1, -1, -1):
            node, parent_position = order[position]
            children = kept_children[position]
            children.reverse()

            if (node.duration or 0.0) < threshold and not children:
                continue

            filtered = replace(node, children=children)
            if parent_position < 0:
                result.append(filtered)
            else:
                kept_children[parent_position].append(filtered)

        result.reverse()
        return result
