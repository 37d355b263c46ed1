"""Core components for call graph analysis."""

from .analyzer import CallGraphAnalyzer
from .types import CallGraph, CallNode, ClassGroup, GraphConfig, GraphEdge, GraphNode

__all__ = ["CallGraphAnalyzer", "CallGraph", "CallNode", "ClassGroup", "GraphConfig", "GraphEdge", "GraphNode"]
