"""
Call Graph Analyzer - Call Tree Aggregation and Dependency Graph Tool
"""

__version__ = "1.0.0"

from .core.analyzer import CallGraphAnalyzer
from .core.types import CallGraph, CallNode, ClassGroup, GraphConfig, GraphEdge, GraphNode

__all__ = [
    "CallGraphAnalyzer",
    "CallGraph",
    "CallNode",
    "ClassGroup",
    "GraphConfig",
    "GraphEdge",
    "GraphNode",
]
