"""
Pytest configuration and shared fixtures for call graph analyzer tests.
"""
import json
import pytest

from callgraph_analyzer.core.types import CallNode, ClassGroup, GraphNode


@pytest.fixture
def sample_call_stack():
    """
    Sample request profile with one root.

    Self wall times: Kernel 0.25, Router 0.099, UserRepository 0.05,
    PDO 0.35, View 0.2, strlen 0.001, helpers.php 0.05 (total 1.0).
    """
    return [
        {
            "id": "1",
            "function": "handle",
            "class": "Kernel",
            "file": "/app/src/Kernel.php",
            "line": 42,
            "duration": 1.0,
            "cpu_time": 0.6,
            "memory_delta": 4096,
            "function_type": 2,
            "children": [
                {
                    "id": "2",
                    "function": "dispatch",
                    "class": "Router",
                    "file": "/app/src/Router.php",
                    "duration": 0.7,
                    "cpu_time": 0.4,
                    "memory_delta": 2048,
                    "function_type": 2,
                    "children": [
                        {
                            "id": "3",
                            "function": "findUser",
                            "class": "UserRepository",
                            "file": "/app/src/Repository/UserRepository.php",
                            "duration": 0.4,
                            "cpu_time": 0.1,
                            "memory_delta": 1024,
                            "network_bytes_sent": 200,
                            "network_bytes_received": 1800,
                            "function_type": 2,
                            "children": [
                                {
                                    "id": "4",
                                    "function": "query",
                                    "class": "PDO",
                                    "duration": 0.35,
                                    "cpu_time": 0.02,
                                    "memory_delta": 256,
                                    "network_bytes_sent": 150,
                                    "network_bytes_received": 1700,
                                    "function_type": 1,
                                }
                            ]
                        },
                        {
                            "id": "5",
                            "function": "render",
                            "class": "View",
                            "file": "/app/src/View.php",
                            "duration": 0.2,
                            "cpu_time": 0.2,
                            "memory_delta": 512,
                            "function_type": 2,
                        },
                        {
                            "id": "6",
                            "function": "strlen",
                            "duration": 0.001,
                            "function_type": 1,
                        }
                    ]
                },
                {
                    "id": "7",
                    "function": "log",
                    "file": "/app/src/helpers.php",
                    "duration": 0.05,
                    "cpu_time": 0.01,
                    "function_type": 0,
                }
            ]
        }
    ]


@pytest.fixture
def multi_root_call_stack():
    """Two top-level calls in PascalCase with millisecond durations."""
    return [
        {
            "CallID": "a",
            "Function": "bootstrap",
            "Class": "App",
            "DurationMs": 8000,
            "children": [
                {"CallID": "a1", "Function": "load", "Class": "Config", "DurationMs": 3000}
            ]
        },
        {
            "CallID": "b",
            "Function": "shutdown",
            "Class": "Cleanup",
            "DurationMs": 2000,
        }
    ]


@pytest.fixture
def call_tree_file(tmp_path, sample_call_stack):
    """Write the sample call stack to a JSON file."""
    file_path = tmp_path / "calls.json"
    with open(file_path, "w") as f:
        json.dump(sample_call_stack, f)
    return str(file_path)


@pytest.fixture
def temp_json_file(tmp_path):
    """Create a temporary JSON file and return a helper function."""
    def _create_file(data, name="data.json"):
        file_path = tmp_path / name
        with open(file_path, "w") as f:
            json.dump(data, f)
        return str(file_path)

    return _create_file


@pytest.fixture
def make_node():
    """Helper to build CallNode trees tersely."""
    def _make(node_id, function=None, class_name=None, file=None, children=None, **metrics):
        return CallNode(
            id=node_id,
            function=function or node_id,
            class_name=class_name,
            file=file,
            children=children or [],
            **metrics
        )

    return _make


@pytest.fixture
def make_group():
    """Helper to build a ClassGroup with the same value for every time metric."""
    def _make(key, value, class_name=None, file_name=None, function_type=0, depth=0):
        return ClassGroup(
            key=key,
            class_name=class_name,
            file_name=file_name,
            total_duration=value,
            total_wall_time=value,
            total_cpu_time=value,
            function_type=function_type,
            depth=depth,
        )

    return _make


@pytest.fixture
def make_graph_node():
    """Helper to build a minimal GraphNode."""
    def _make(node_id, depth=0, percentage=0.0):
        return GraphNode(
            id=node_id,
            label=node_id,
            title=node_id,
            metric_value=0.0,
            percentage=percentage,
            size=40,
            color='#4caf50',
            color_class='user',
            function_type=0,
            depth=depth,
        )

    return _make
