"""
Integration tests for the call graph analyzer.
"""
import json

import pytest
from callgraph_analyzer import CallGraphAnalyzer, GraphConfig
from callgraph_analyzer.processors import CallTreeFileProcessor, ParallelGraphProcessor


def node_map(graph):
    return {node.id: node for node in graph.nodes}


def edge_pairs(graph):
    return [(edge.source, edge.target) for edge in graph.edges]


class TestSampleTree:
    """End-to-end behavior on the sample request profile."""

    def test_nodes_and_order(self, sample_call_stack):
        """Test the surviving groups and their ordering."""
        graph = CallGraphAnalyzer().build_graph(sample_call_stack)

        assert [node.id for node in graph.nodes] == [
            "PDO", "Kernel", "View", "Router", "UserRepository", "helpers.php"
        ]
        assert graph.nodes[0].percentage == pytest.approx(35 / 0.999)
        assert graph.total_metric_value == pytest.approx(1.0)
        assert graph.root_count == 1

    def test_small_group_hidden(self, sample_call_stack):
        """Test strlen at 0.1% falls below the default threshold."""
        graph = CallGraphAnalyzer().build_graph(sample_call_stack)
        assert "strlen" not in node_map(graph)

    def test_edges(self, sample_call_stack):
        graph = CallGraphAnalyzer().build_graph(sample_call_stack)
        assert edge_pairs(graph) == [
            ("Kernel", "Router"),
            ("Router", "UserRepository"),
            ("UserRepository", "PDO"),
            ("Router", "View"),
            ("Kernel", "helpers.php"),
        ]

    def test_levels(self, sample_call_stack):
        graph = CallGraphAnalyzer().build_graph(sample_call_stack)
        levels = {node.id: node.level for node in graph.nodes}
        assert levels == {
            "Kernel": 0,
            "Router": 1,
            "helpers.php": 1,
            "UserRepository": 2,
            "View": 2,
            "PDO": 3,
        }

    def test_percentages_add_up(self, sample_call_stack):
        """Test displayed percentages total 100 for every metric with data."""
        for metric in ('wall_time', 'cpu', 'memory', 'network'):
            graph = CallGraphAnalyzer(metric=metric).build_graph(sample_call_stack)
            assert sum(node.percentage for node in graph.nodes) == pytest.approx(100.0), metric

    def test_edges_are_valid(self, sample_call_stack):
        """Test edges never loop and only join rendered nodes."""
        for metric in ('wall_time', 'cpu', 'memory', 'network'):
            graph = CallGraphAnalyzer(metric=metric).build_graph(sample_call_stack)
            ids = set(node_map(graph))
            for source, target in edge_pairs(graph):
                assert source != target
                assert source in ids and target in ids

    def test_hide_internal_functions(self, sample_call_stack):
        """Test internal calls disappear and their callers lose the edge."""
        graph = CallGraphAnalyzer(show_internal_functions=False).build_graph(sample_call_stack)

        assert set(node_map(graph)) == {"Kernel", "Router", "UserRepository", "View", "helpers.php"}
        assert ("UserRepository", "PDO") not in edge_pairs(graph)
        assert len(graph.edges) == 4

    def test_duration_filter(self, sample_call_stack):
        """Test calls under the minimum duration are pruned before grouping."""
        graph = CallGraphAnalyzer(min_duration_ms=100).build_graph(sample_call_stack)

        assert "helpers.php" not in node_map(graph)
        assert node_map(graph)["Kernel"].metric_value == pytest.approx(0.3)

    def test_fallback_keeps_graph_informative(self, sample_call_stack):
        """Test a harsh threshold still shows the biggest groups."""
        graph = CallGraphAnalyzer(min_percentage=50).build_graph(sample_call_stack)
        assert len(graph.nodes) == 7
        assert "strlen" in node_map(graph)

    def test_memory_metric(self, sample_call_stack):
        """Test memory values are exclusive byte counts."""
        graph = CallGraphAnalyzer(metric='memory').build_graph(sample_call_stack)
        nodes = node_map(graph)

        assert nodes["Kernel"].metric_value == 2048
        assert nodes["Router"].metric_value == 512
        assert "helpers.php" not in nodes

    def test_idempotent(self, sample_call_stack):
        """Test building twice gives identical output."""
        analyzer = CallGraphAnalyzer()
        first = analyzer.build_graph(sample_call_stack).to_dict()
        second = analyzer.build_graph(sample_call_stack).to_dict()
        assert first == second

    def test_shown_value_and_fallback_flag(self, sample_call_stack):
        """Test the graph records what it shows and whether the threshold was relaxed."""
        graph = CallGraphAnalyzer().build_graph(sample_call_stack)
        assert graph.shown_metric_value == pytest.approx(0.999)
        assert graph.fallback_applied is False

        relaxed = CallGraphAnalyzer(min_percentage=50).build_graph(sample_call_stack)
        assert relaxed.shown_metric_value == pytest.approx(1.0)
        assert relaxed.fallback_applied is True

    def test_call_stack_path(self, sample_call_stack):
        """Test the path from the top of the tree to a selected call."""
        path = CallGraphAnalyzer().call_stack_path(sample_call_stack, "query", class_name="PDO")
        assert [node.function for node in path] == ["handle", "dispatch", "findUser", "query"]

    def test_call_stack_path_not_found(self, sample_call_stack):
        assert CallGraphAnalyzer().call_stack_path(sample_call_stack, "missing") == []


class TestScenarios:
    """Small trees covering single roots, synthetic roots and collapsing groups."""

    def test_single_node(self):
        """Test one call yields one node at 100%."""
        graph = CallGraphAnalyzer().build_graph([{"function": "main", "duration_ms": 50}])

        assert len(graph.nodes) == 1
        node = graph.nodes[0]
        assert node.id == "main"
        assert node.percentage == pytest.approx(100.0)
        assert node.level == 0
        assert graph.edges == []

    def test_two_roots_get_synthetic_root(self):
        """Test several top-level calls hang under one Root node."""
        graph = CallGraphAnalyzer().build_graph([
            {"function": "A", "duration_ms": 80},
            {"function": "B", "duration_ms": 20},
        ])
        nodes = node_map(graph)

        assert [node.id for node in graph.nodes] == ["Root", "A", "B"]
        assert nodes["A"].percentage == pytest.approx(80.0)
        assert nodes["B"].percentage == pytest.approx(20.0)
        assert edge_pairs(graph) == [("Root", "A"), ("Root", "B")]
        assert {n.id: n.level for n in graph.nodes} == {"Root": 0, "A": 1, "B": 1}
        assert nodes["Root"].label.startswith("Root\n2 roots\n")

    def test_same_class_collapses(self):
        """Test a chain within one class becomes a single node without edges."""
        call_stack = [{
            "function": "a", "class": "Foo", "duration": 200,
            "children": [{
                "function": "b", "class": "Foo", "duration": 100,
                "children": [{"function": "c", "class": "Foo", "duration": 10}]
            }]
        }]
        graph = CallGraphAnalyzer(min_percentage=50).build_graph(call_stack)

        assert [node.id for node in graph.nodes] == ["Foo"]
        assert graph.edges == []
        assert graph.nodes[0].metric_value == pytest.approx(200)

    def test_memory_self_value_with_freeing_child(self):
        """Test +100 with a -40 child gives 140 self bytes for the parent."""
        call_stack = [{
            "function": "grow", "class": "Buf", "memory_delta": 100,
            "children": [{"function": "release", "class": "Pool", "memory_delta": -40}]
        }]
        graph = CallGraphAnalyzer(metric='memory').build_graph(call_stack)
        nodes = node_map(graph)

        assert nodes["Buf"].metric_value == 140
        assert nodes["Pool"].metric_value == 40
        assert edge_pairs(graph) == [("Buf", "Pool")]

    def test_multi_root_pascal_case(self, multi_root_call_stack):
        """Test PascalCase producers with millisecond durations."""
        graph = CallGraphAnalyzer().build_graph(multi_root_call_stack)
        nodes = node_map(graph)

        assert graph.root_count == 2
        assert graph.total_metric_value == pytest.approx(10.0)
        assert nodes["App"].percentage == pytest.approx(50.0)
        assert nodes["Config"].percentage == pytest.approx(30.0)
        assert nodes["Cleanup"].percentage == pytest.approx(20.0)
        assert edge_pairs(graph) == [("Root", "App"), ("App", "Config"), ("Root", "Cleanup")]
        assert nodes["Config"].level == 2

    def test_empty_input(self):
        """Test empty or malformed input produces an empty graph."""
        for call_stack in ([], None, "not a tree"):
            graph = CallGraphAnalyzer().build_graph(call_stack)
            assert graph.is_empty
            assert graph.edges == []

    def test_all_zero_metric(self, sample_call_stack):
        """Test a metric nobody recorded yields an empty graph."""
        graph = CallGraphAnalyzer(metric='io_wait').build_graph(sample_call_stack)
        assert graph.is_empty
        assert graph.total_metric_value == 0

    def test_non_finite_fields(self):
        """Test Infinity and NaN in numeric fields build a graph instead of raising."""
        call_stack = json.loads(
            '[{"function": "main", "class": "App", "line": Infinity, "function_type": NaN, '
            '"duration_ms": 40, "children": [{"function": "load", "class": "Db", '
            '"duration_ms": NaN, "duration": 10, "line": -Infinity}]}]'
        )
        graph = CallGraphAnalyzer().build_graph(call_stack)
        nodes = node_map(graph)

        assert nodes["App"].percentage == pytest.approx(75.0)
        assert nodes["Db"].percentage == pytest.approx(25.0)
        assert edge_pairs(graph) == [("App", "Db")]


class TestDeepChains:
    """Trees nested deeper than the interpreter recursion limit."""

    DEPTH = 2000

    @pytest.fixture
    def deep_call_stack(self):
        """A single chain of calls alternating between two classes."""
        records = [
            {
                "function": f"f{i}",
                "class": "Even" if i % 2 == 0 else "Odd",
                "duration": (self.DEPTH - i) / 1000.0,
            }
            for i in range(self.DEPTH)
        ]
        for parent, child in zip(records, records[1:]):
            parent["children"] = [child]
        return [records[0]]

    def test_build_graph(self, deep_call_stack):
        """Test the chain collapses into two groups calling each other."""
        graph = CallGraphAnalyzer().build_graph(deep_call_stack)
        weights = {(edge.source, edge.target): edge.weight for edge in graph.edges}

        assert set(node_map(graph)) == {"Even", "Odd"}
        assert weights == {("Even", "Odd"): 1000, ("Odd", "Even"): 999}

    def test_duration_filter(self, deep_call_stack):
        """Test pruning the bottom of the chain keeps the slow top."""
        graph = CallGraphAnalyzer(min_duration_ms=1500).build_graph(deep_call_stack)
        weights = {(edge.source, edge.target): edge.weight for edge in graph.edges}
        assert weights == {("Even", "Odd"): 250, ("Odd", "Even"): 250}

    def test_call_stack_path(self, deep_call_stack):
        """Test the path to the deepest call covers the whole chain."""
        last = self.DEPTH - 1
        path = CallGraphAnalyzer().call_stack_path(deep_call_stack, f"f{last}", class_name="Odd")

        assert len(path) == self.DEPTH
        assert path[0].function == "f0"
        assert path[-1].function == f"f{last}"


class TestFileProcessing:
    """Tests for reading call trees from files."""

    def test_process_call_tree_file(self, call_tree_file):
        graph = CallGraphAnalyzer().process_call_tree_file(call_tree_file)
        assert len(graph.nodes) == 6

    def test_wrapped_call_stack(self, temp_json_file, sample_call_stack):
        """Test an object holding the roots under callStack."""
        path = temp_json_file({"meta": {"host": "web-1"}, "callStack": sample_call_stack})
        analyzer = CallGraphAnalyzer()
        roots = analyzer.file_processor.process_file(path)
        assert [record["function"] for record in roots] == ["handle"]

    def test_traces_file(self, temp_json_file, sample_call_stack, multi_root_call_stack):
        """Test a file holding several named call trees."""
        path = temp_json_file({"traces": {
            "req-1": sample_call_stack,
            "req-2": multi_root_call_stack,
            "req-3": {"function": "main", "duration": 1},
        }})
        trees = CallGraphAnalyzer().file_processor.process_traces_file(path)

        assert list(trees) == ["req-1", "req-2", "req-3"]
        assert len(trees["req-2"]) == 2
        assert trees["req-3"][0]["function"] == "main"

    def test_plain_file_named_after_stem(self, call_tree_file):
        """Test a single tree file is keyed by its file name."""
        trees = CallGraphAnalyzer().file_processor.process_traces_file(call_tree_file)
        assert list(trees) == ["calls"]

    def test_count_records(self, sample_call_stack):
        assert CallTreeFileProcessor.count_records(sample_call_stack) == 7

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            CallGraphAnalyzer().file_processor.process_file("/nonexistent/calls.json")


class TestParallelProcessing:
    """Tests for ParallelGraphProcessor."""

    @pytest.fixture
    def trees(self, sample_call_stack, multi_root_call_stack):
        return {"req-1": sample_call_stack, "req-2": multi_root_call_stack, "req-3": []}

    def test_sequential_matches_direct_build(self, trees):
        """Test a single worker gives the same graphs as the analyzer."""
        config = GraphConfig()
        graphs = ParallelGraphProcessor(config, num_workers=1).process_trees(trees)
        analyzer = CallGraphAnalyzer(config)

        assert list(graphs) == ["req-1", "req-2", "req-3"]
        for trace_id, call_stack in trees.items():
            assert graphs[trace_id].to_dict() == analyzer.build_graph(call_stack).to_dict()

    def test_parallel_matches_sequential(self, trees):
        """Test worker processes produce the same graphs in input order."""
        config = GraphConfig(metric='cpu')
        progress = []
        parallel = ParallelGraphProcessor(config, num_workers=2).process_trees(
            trees, progress_callback=lambda done, total: progress.append((done, total))
        )
        sequential = ParallelGraphProcessor(config, num_workers=1).process_trees(trees)

        assert list(parallel) == list(trees)
        for trace_id in trees:
            assert parallel[trace_id].to_dict() == sequential[trace_id].to_dict()
        assert progress[-1] == (3, 3)
