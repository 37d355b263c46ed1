"""
Main call graph analyzer orchestrator.
"""

from typing import Any, List, Optional

from ..core.types import CallGraph, CallNode, GraphConfig
from ..filters import DurationFilter, FunctionTypeFilter, ThresholdFilter
from ..processors import (
    CallNodeNormalizer,
    CallTreeFileProcessor,
    ClassGrouper,
    GraphBuilder,
    HierarchyBuilder,
    LevelAssigner,
    MetricExtractor,
)


class CallGraphAnalyzer:
    """Main orchestrator for call graph construction."""

    def __init__(self, config: Optional[GraphConfig] = None, **options):
        """
        Initialize the CallGraphAnalyzer.

        Args:
            config: GraphConfig instance; when omitted one is built from options
            **options: Keyword arguments accepted by GraphConfig
        """
        self.config = config or GraphConfig(**options)

        # Initialize components
        self.normalizer = CallNodeNormalizer(self.config.ms_threshold)
        self.duration_filter = DurationFilter(self.config.min_duration_ms)
        self.function_type_filter = FunctionTypeFilter(self.config)
        self.metric_extractor = MetricExtractor()
        self.hierarchy_builder = HierarchyBuilder(self.metric_extractor, self.function_type_filter)
        self.class_grouper = ClassGrouper(self.metric_extractor)
        self.threshold_filter = ThresholdFilter(self.config)
        self.graph_builder = GraphBuilder(self.class_grouper)
        self.level_assigner = LevelAssigner()
        self.file_processor = CallTreeFileProcessor()

    def normalize(self, call_stack: Any) -> List[CallNode]:
        """
        Normalize raw records and apply the duration filter.

        Args:
            call_stack: List of raw root call records

        Returns:
            Normalized root nodes
        """
        roots = self.normalizer.normalize_tree(call_stack)
        return self.duration_filter.filter_tree(roots)

    def build_graph(self, call_stack: Any) -> CallGraph:
        """
        Turn a call tree into a percentage-ranked dependency graph.

        Args:
            call_stack: List of raw root call records

        Returns:
            CallGraph; empty when the tree is empty or every value is zero
        """
        roots = self.normalize(call_stack)
        return self.build_graph_from_nodes(roots)

    def build_graph_from_nodes(self, roots: List[CallNode]) -> CallGraph:
        """
        Run the grouping, filtering and layout passes on a normalized tree.

        Args:
            roots: Normalized root nodes

        Returns:
            CallGraph
        """
        metric = self.config.metric
        graph = CallGraph(metric=metric, root_count=len(roots))
        if not roots:
            return graph

        graph.total_metric_value = self.metric_extractor.total_metric(roots, metric)
        if graph.total_metric_value == 0:
            return graph

        # Pass 1: Collect every node with parent, depth and visibility
        traversal_roots = self.hierarchy_builder.build_traversal_roots(roots)
        node_index = self.hierarchy_builder.build_node_index(traversal_roots, metric)

        # Pass 2: Group nodes by class, file or function
        groups = self.class_grouper.group_nodes(node_index)
        root_keys = {self.class_grouper.group_key(root) for root in roots}

        # Pass 3: Keep significant groups
        filter_result = self.threshold_filter.filter_groups(groups, root_keys)
        graph.shown_metric_value = filter_result.included_total_value
        graph.fallback_applied = filter_result.fallback_applied

        # Pass 4: Build nodes, edges and levels
        graph.nodes = self.graph_builder.build_nodes(filter_result, metric, len(roots))
        node_ids = {node.id for node in graph.nodes}
        graph.edges = self.graph_builder.build_edges(
            traversal_roots,
            filter_result.groups,
            filter_result.percentages,
            node_ids,
        )
        self.level_assigner.assign_levels(graph.nodes, graph.edges)

        return graph

    def call_stack_path(
        self,
        call_stack: Any,
        function: str,
        class_name: Optional[str] = None,
        file: Optional[str] = None,
        line: Optional[int] = None
    ) -> List[CallNode]:
        """
        Path from the top of the tree down to the last call matching a signature.

        Args:
            call_stack: List of raw root call records
            function: Function name of the selected call
            class_name: Optional class name
            file: Optional file path
            line: Optional line number

        Returns:
            List of nodes from root to the selected call, empty when not found
        """
        roots = self.normalize(call_stack)
        traversal_roots = self.hierarchy_builder.build_traversal_roots(roots)
        node_index = self.hierarchy_builder.build_node_index(traversal_roots, self.config.metric)

        node_id = self.hierarchy_builder.find_node_id(node_index, function, class_name, file, line)
        return self.hierarchy_builder.get_call_stack_path(node_index, node_id)

    def process_call_tree_file(self, file_path: str) -> CallGraph:
        """
        Read a call tree JSON file and build its graph.

        Args:
            file_path: Path to the JSON file

        Returns:
            CallGraph
        """
        call_stack = self.file_processor.process_file(file_path)
        graph = self.build_graph(call_stack)

        print(f"\nBuilt {self.config.metric} graph with {len(graph.nodes)} nodes and {len(graph.edges)} edges")
        if graph.is_empty:
            print("No data: the call tree is empty or has no value for this metric")

        return graph
