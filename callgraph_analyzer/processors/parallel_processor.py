"""
Parallel graph processor for files holding many call trees.
"""

from multiprocessing import Pool
from typing import Any, Dict, List, Optional, Tuple
import os

from ..core.types import CallGraph, GraphConfig


def _build_single_graph(args: Tuple[str, List[Dict], dict]) -> Tuple[str, CallGraph]:
    """
    Build the graph of one call tree. Designed to run in a worker process.

    Args:
        args: Tuple of (trace_id, raw root records, config_dict)

    Returns:
        Tuple of (trace_id, graph)
    """
    # Imported here so worker processes only pay for it when used
    from ..core.analyzer import CallGraphAnalyzer

    trace_id, call_stack, config_dict = args
    analyzer = CallGraphAnalyzer(GraphConfig(**config_dict))
    return trace_id, analyzer.build_graph(call_stack)


class ParallelGraphProcessor:
    """Build graphs for many call trees in parallel using multiprocessing."""

    def __init__(self, config: GraphConfig, num_workers: Optional[int] = None):
        """
        Initialize parallel processor.

        Args:
            config: GraphConfig instance shared by every tree
            num_workers: Number of worker processes (default: CPU count)
        """
        self.config = config
        self.num_workers = num_workers or os.cpu_count() or 4
        self.config_dict = config.to_dict()

    def process_trees(self, trees: Dict[str, Any], progress_callback=None) -> Dict[str, CallGraph]:
        """
        Build one graph per call tree.

        Args:
            trees: Dictionary mapping trace_id -> list of raw root records
            progress_callback: Optional callback(completed, total) for progress updates

        Returns:
            Dictionary mapping trace_id -> CallGraph, in input order
        """
        tree_count = len(trees)

        if tree_count <= 1 or self.num_workers <= 1:
            return self._process_sequential(trees, progress_callback)

        work_items = [
            (trace_id, call_stack, self.config_dict)
            for trace_id, call_stack in trees.items()
        ]

        results = {}
        completed = 0
        effective_workers = min(self.num_workers, tree_count)

        with Pool(processes=effective_workers) as pool:
            for trace_id, graph in pool.imap_unordered(_build_single_graph, work_items, chunksize=1):
                results[trace_id] = graph
                completed += 1
                if progress_callback:
                    progress_callback(completed, tree_count)

        return {trace_id: results[trace_id] for trace_id in trees}

    def _process_sequential(self, trees: Dict[str, Any], progress_callback=None) -> Dict[str, CallGraph]:
        """Fallback sequential processing for a single tree or a single worker."""
        from ..core.analyzer import CallGraphAnalyzer

        analyzer = CallGraphAnalyzer(self.config)
        results = {}
        total = len(trees)

        for completed, (trace_id, call_stack) in enumerate(trees.items(), start=1):
            results[trace_id] = analyzer.build_graph(call_stack)
            if progress_callback:
                progress_callback(completed, total)

        return results
