"""Processors for call tree transformation and graph construction."""

from .file_processor import CallTreeFileProcessor
from .normalizer import CallNodeNormalizer
from .metric_extractor import MetricExtractor
from .hierarchy_builder import HierarchyBuilder
from .class_grouper import ClassGrouper
from .graph_builder import GraphBuilder
from .level_assigner import LevelAssigner
from .parallel_processor import ParallelGraphProcessor

__all__ = [
    "CallTreeFileProcessor",
    "CallNodeNormalizer",
    "MetricExtractor",
    "HierarchyBuilder",
    "ClassGrouper",
    "GraphBuilder",
    "LevelAssigner",
    "ParallelGraphProcessor",
]
