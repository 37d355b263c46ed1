"""Integration tests for the analyze_callgraph command line interface."""

import json
import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

import analyze_callgraph


def run_cli(*args):
    with patch.object(sys, 'argv', ['analyze_callgraph.py', *args]):
        analyze_callgraph.main()


class TestCli:
    """Tests for analyze_callgraph.main."""

    def test_writes_results(self, call_tree_file, tmp_path, capsys):
        """Test the CLI prints a node table and writes the JSON result."""
        output_file = tmp_path / "graph.json"
        run_cli(call_tree_file, '-o', str(output_file), '--workers', '1')

        with open(output_file) as f:
            results = json.load(f)
        assert results['trace_count'] == 1
        assert results['traces']['calls']['summary']['node_count'] == 6

        out = capsys.readouterr().out
        assert "calls: 6 nodes, 5 edges" in out
        assert "Analysis complete" in out

    def test_options_reach_config(self, call_tree_file, tmp_path):
        output_file = tmp_path / "graph.json"
        run_cli(call_tree_file, '-o', str(output_file), '--metric', 'memory',
                '--hide-internal', '--min-duration-ms', '5', '--workers', '1')

        with open(output_file) as f:
            config = json.load(f)['traces']['calls']['config']
        assert config['metric'] == 'memory'
        assert config['show_internal_functions'] is False
        assert config['min_duration_ms'] == 5.0

    def test_missing_file_exits(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            run_cli(str(tmp_path / "missing.json"), '-o', str(tmp_path / "out.json"))
        assert exc_info.value.code == 1
        assert "not found" in capsys.readouterr().out

    def test_fallback_noted(self, call_tree_file, tmp_path, capsys):
        """Test the table mentions a relaxed threshold."""
        output_file = tmp_path / "graph.json"
        run_cli(call_tree_file, '-o', str(output_file), '--min-percentage', '50', '--workers', '1')

        assert "threshold relaxed" in capsys.readouterr().out
        with open(output_file) as f:
            summary = json.load(f)['traces']['calls']['summary']
        assert summary['fallback_applied'] is True
