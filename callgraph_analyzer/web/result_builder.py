"""
Result builder for web interface output.
"""

from typing import Dict, Optional

from ..core.types import CallGraph, GraphConfig
from ..formatters import format_metric_value, metric_label


def prepare_results(graph: CallGraph, config: Optional[GraphConfig] = None) -> Dict:
    """
    Convert a built graph to a structured format for JSON output.
    
    Args:
        graph: CallGraph returned by CallGraphAnalyzer.build_graph
        config: GraphConfig the graph was built with
        
    Returns:
        Dictionary with summary, nodes, edges and the effective configuration
    """
    output = graph.to_dict()
    
    non_root_nodes = [node for node in graph.nodes if not node.is_root]
    top_node = max(non_root_nodes, key=lambda n: n.percentage, default=None)
    
    summary = {
        'metric': graph.metric,
        'metric_label': metric_label(graph.metric),
        'total_metric_value': graph.total_metric_value,
        'total_metric_formatted': format_metric_value(graph.total_metric_value, graph.metric),
        'shown_metric_value': graph.shown_metric_value,
        'root_count': graph.root_count,
        'node_count': len(graph.nodes),
        'edge_count': len(graph.edges),
        'edge_call_count': sum(edge.weight for edge in graph.edges),
        'max_level': max((node.level for node in graph.nodes), default=0),
        'top_node': top_node.id if top_node else None,
        'top_node_percentage': top_node.percentage if top_node else 0.0,
        'fallback_applied': graph.fallback_applied,
        'no_data': graph.is_empty,
    }
    
    return {
        'summary': summary,
        'nodes': output['nodes'],
        'edges': output['edges'],
        'config': config.to_dict() if config else None,
    }


def prepare_batch_results(graphs: Dict[str, CallGraph], config: Optional[GraphConfig] = None) -> Dict:
    """
    Convert graphs of several call trees, keyed by trace id.
    """
    return {
        'trace_count': len(graphs),
        'traces': {trace_id: prepare_results(graph, config) for trace_id, graph in graphs.items()},
    }
