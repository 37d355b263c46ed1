#!/usr/bin/env python3
"""
Call Graph Analyzer - Command Line Interface
"""

import json
import sys
from callgraph_analyzer import CallGraphAnalyzer, GraphConfig
from callgraph_analyzer.core.types import METRIC_TYPES
from callgraph_analyzer.formatters import format_metric_value
from callgraph_analyzer.processors import ParallelGraphProcessor
from callgraph_analyzer.web import prepare_batch_results


def print_graph(trace_id, graph):
    """Print the nodes of a graph as a table."""
    print(f"\n{trace_id}: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
    if graph.is_empty:
        print("  (no data)")
        return
    for node in graph.nodes:
        name = node.label.split('\n')[0]
        value = format_metric_value(node.metric_value, graph.metric)
        print(f"  L{node.level:<3} {name:<40} {value:>10} {node.percentage:6.1f}%")
    if graph.fallback_applied:
        print("  (threshold relaxed: too few groups passed, showing the largest ones)")


def main():
    import argparse
    parser = argparse.ArgumentParser(
        description='Turn call tree JSON files into percentage-ranked dependency graphs.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python analyze_callgraph.py calls.json
  python analyze_callgraph.py calls.json --metric memory --min-percentage 2
  python analyze_callgraph.py calls.json --hide-internal --min-duration-ms 5
  python analyze_callgraph.py traces.json --workers 4 -o graphs.json
        """
    )
    parser.add_argument('input_file', help='Path to the call tree JSON file')
    parser.add_argument('-o', '--output', dest='output_file', default='call_graph.json', help='Output JSON file')
    parser.add_argument('--metric', choices=METRIC_TYPES, default='wall_time', help='Metric dimension')
    parser.add_argument('--min-percentage', type=float, default=0.5,
                       help='Hide groups below this share of the total')
    parser.add_argument('--hide-user', action='store_true', help='Hide user functions')
    parser.add_argument('--hide-internal', action='store_true', help='Hide internal functions')
    parser.add_argument('--hide-methods', action='store_true', help='Hide methods')
    parser.add_argument('--min-duration-ms', type=float, default=None,
                       help='Prune calls shorter than this unless a slower call is nested inside')
    parser.add_argument('--workers', type=int, default=None,
                       help='Worker processes for files holding several call trees')
    args = parser.parse_args()

    config = GraphConfig(
        metric=args.metric,
        min_percentage=args.min_percentage,
        show_user_functions=not args.hide_user,
        show_internal_functions=not args.hide_internal,
        show_methods=not args.hide_methods,
        min_duration_ms=args.min_duration_ms
    )
    analyzer = CallGraphAnalyzer(config)

    try:
        print(f"\nConfiguration:")
        print(f"  Input file: {args.input_file}")
        print(f"  Metric: {config.metric}")
        print(f"  Min percentage: {config.min_percentage}")
        print(f"  Min duration: {config.min_duration_ms if config.min_duration_ms is not None else 'disabled'}\n")

        trees = analyzer.file_processor.process_traces_file(args.input_file)

        def report_progress(completed, total):
            print(f"  Built {completed}/{total} graphs...")

        processor = ParallelGraphProcessor(config, num_workers=args.workers)
        graphs = processor.process_trees(trees, progress_callback=report_progress)

        for trace_id, graph in graphs.items():
            print_graph(trace_id, graph)

        with open(args.output_file, 'w') as f:
            json.dump(prepare_batch_results(graphs, config), f, indent=2)

        print(f"\n✓ Analysis complete! Results written to {args.output_file}")
    except FileNotFoundError:
        print(f"Error: File '{args.input_file}' not found.")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
