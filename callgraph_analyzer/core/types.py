"""
Type definitions for call graph analysis.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# Metric dimensions the graph can be built for
METRIC_TYPES = ['wall_time', 'io_wait', 'cpu', 'memory', 'network']
DEFAULT_METRIC = 'wall_time'

# Metrics that tolerate a zero value because they fall back to duration
DURATION_FALLBACK_METRICS = ('wall_time', 'cpu')

# Function type classification
FUNCTION_TYPE_USER = 0
FUNCTION_TYPE_INTERNAL = 1
FUNCTION_TYPE_METHOD = 2
FUNCTION_TYPE_UNKNOWN = -1

# Reserved keys for the synthetic root
ROOT_GROUP_KEY = 'Root'
SYNTHETIC_ROOT_ID = 'synthetic_root'

# Fallback heuristics for the threshold filter
FALLBACK_GROUP_LIMIT = 10
FALLBACK_TRIGGER_SIZE = 2

# Raw durations above this value are treated as milliseconds
MS_THRESHOLD = 1000


@dataclass
class CallNode:
    """One instrumented function invocation in canonical form."""
    id: str
    function: str = 'unknown'
    class_name: Optional[str] = None
    file: Optional[str] = None
    line: Optional[int] = None
    duration: float = 0.0
    cpu_time: Optional[float] = None
    io_wait_time: float = 0.0
    wall_time: Optional[float] = None
    memory_delta: float = 0.0
    bytes_sent_delta: float = 0.0
    bytes_received_delta: float = 0.0
    function_type: int = FUNCTION_TYPE_UNKNOWN
    children: List['CallNode'] = field(default_factory=list)

    @property
    def signature(self) -> str:
        """Class-qualified function name."""
        return f"{self.class_name}::{self.function}" if self.class_name else self.function

    def to_dict(self, include_children: bool = True) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'function': self.function,
            'class': self.class_name,
            'file': self.file,
            'line': self.line,
            'duration': self.duration,
            'cpu_time': self.cpu_time,
            'io_wait_time': self.io_wait_time,
            'wall_time': self.wall_time,
            'memory_delta': self.memory_delta,
            'bytes_sent_delta': self.bytes_sent_delta,
            'bytes_received_delta': self.bytes_received_delta,
            'function_type': self.function_type,
        }
        if include_children:
            data['children'] = [child.to_dict() for child in self.children]
        return data


@dataclass
class NodeEntry:
    """Pre-pass record for one node of the call tree."""
    node: CallNode
    parent_id: Optional[str]
    depth: int
    should_include: bool = True


@dataclass
class MethodStats:
    """Per-method aggregation within a class group."""
    node: CallNode
    call_count: int = 0
    total_duration: float = 0.0


@dataclass
class DominantMethod:
    """The most significant method of a group."""
    method_name: str
    call_count: int
    duration: float


@dataclass
class ClassGroup:
    """Aggregation of call nodes sharing a class, file or function identity."""
    key: str
    class_name: Optional[str] = None
    file_name: Optional[str] = None
    methods: Dict[str, MethodStats] = field(default_factory=dict)
    total_duration: float = 0.0
    total_memory_delta: float = 0.0
    total_cpu_time: float = 0.0
    total_io_wait_time: float = 0.0
    total_wall_time: float = 0.0
    total_network_bytes: float = 0.0
    function_type: int = FUNCTION_TYPE_UNKNOWN
    depth: int = 0

    @property
    def total_calls(self) -> int:
        return sum(m.call_count for m in self.methods.values())

    @property
    def has_location(self) -> bool:
        """True when the group represents a class or a file."""
        return bool(self.class_name or self.file_name)

    def metric_value(self, metric: str) -> float:
        """
        Value of the group for the selected metric dimension.

        Args:
            metric: One of METRIC_TYPES

        Returns:
            Accumulated self/exclusive value
        """
        if metric == 'wall_time':
            return self.total_wall_time
        if metric == 'io_wait':
            return self.total_io_wait_time
        if metric == 'cpu':
            return self.total_cpu_time
        if metric == 'memory':
            return abs(self.total_memory_delta)
        if metric == 'network':
            return self.total_network_bytes
        return self.total_duration


@dataclass
class GraphNode:
    """A surviving class group rendered as a graph node."""
    id: str
    label: str
    title: str
    metric_value: float
    percentage: float
    size: float
    color: str
    color_class: str
    function_type: int
    depth: int
    class_name: Optional[str] = None
    file_name: Optional[str] = None
    metrics: Dict[str, float] = field(default_factory=dict)
    dominant_method: Optional[DominantMethod] = None
    level: int = 0

    @property
    def is_root(self) -> bool:
        return self.id == ROOT_GROUP_KEY

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'label': self.label,
            'title': self.title,
            'metric_value': self.metric_value,
            'metrics': dict(self.metrics),
            'percentage': self.percentage,
            'level': self.level,
            'color_class': self.color_class,
            'color': self.color,
            'size': self.size,
            'function_type': self.function_type,
            'depth': self.depth,
            'class': self.class_name,
            'file': self.file_name,
            'dominant_method': (
                {
                    'method_name': self.dominant_method.method_name,
                    'call_count': self.dominant_method.call_count,
                    'duration': self.dominant_method.duration,
                }
                if self.dominant_method else None
            ),
        }


@dataclass
class GraphEdge:
    """Weighted call edge between two graph nodes."""
    source: str
    target: str
    weight: int
    label: str
    width: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            'from': self.source,
            'to': self.target,
            'weight': self.weight,
            'label': self.label,
            'width': self.width,
        }


@dataclass
class CallGraph:
    """Result of one aggregation run."""
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    metric: str = DEFAULT_METRIC
    total_metric_value: float = 0.0
    shown_metric_value: float = 0.0
    root_count: int = 0
    fallback_applied: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [node.to_dict() for node in self.nodes],
            'edges': [edge.to_dict() for edge in self.edges],
        }


def _coerce_bool(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ('true', '1', 'yes', 'on')
    if isinstance(value, (int, float)):
        return bool(value)
    return default


def _coerce_float(value, default: Optional[float]) -> Optional[float]:
    if value is None or isinstance(value, bool) or value == '':
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _coerce_int(value, default: int) -> int:
    number = _coerce_float(value, None)
    return int(number) if number is not None else default


class GraphConfig:
    """Configuration for call graph construction."""

    # camelCase keys accepted from UI payloads
    _ALIASES = {
        'minPercentage': 'min_percentage',
        'showUserFunctions': 'show_user_functions',
        'showInternalFunctions': 'show_internal_functions',
        'showMethods': 'show_methods',
        'minDurationMs': 'min_duration_ms',
        'fallbackGroupLimit': 'fallback_group_limit',
        'fallbackTriggerSize': 'fallback_trigger_size',
        'msThreshold': 'ms_threshold',
    }

    def __init__(
        self,
        metric: str = DEFAULT_METRIC,
        min_percentage: float = 0.5,
        show_user_functions: bool = True,
        show_internal_functions: bool = True,
        show_methods: bool = True,
        min_duration_ms: Optional[float] = None,
        fallback_group_limit: int = FALLBACK_GROUP_LIMIT,
        fallback_trigger_size: int = FALLBACK_TRIGGER_SIZE,
        ms_threshold: float = MS_THRESHOLD
    ):
        """
        Initialize call graph configuration.

        Args:
            metric: Metric dimension used for percentages and filtering, one of
                    wall_time, io_wait, cpu, memory, network.
                    Default: wall_time (unknown values also map to wall_time)

            min_percentage: Groups contributing less than this share of the total
                            are hidden unless they are roots or needed by the
                            fallback rule. Default: 0.5

            show_user_functions: Include user functions (and unclassified ones).
            show_internal_functions: Include internal/library functions.
            show_methods: Include object methods.

            min_duration_ms: If set, prune calls shorter than this duration unless
                             a descendant survives. Default: None (disabled)

            fallback_group_limit: Number of top groups force-included when the
                                  threshold leaves a degenerate graph. Default: 10

            fallback_trigger_size: The fallback runs when this many groups or
                                   fewer survive the threshold. Default: 2

            ms_threshold: Raw durations above this value are read as milliseconds.
                          Default: 1000
        """
        self.metric = metric if metric in METRIC_TYPES else DEFAULT_METRIC
        self.min_percentage = max(0.0, _coerce_float(min_percentage, 0.5))
        self.show_user_functions = show_user_functions
        self.show_internal_functions = show_internal_functions
        self.show_methods = show_methods
        self.min_duration_ms = min_duration_ms
        self.fallback_group_limit = max(0, fallback_group_limit)
        self.fallback_trigger_size = max(0, fallback_trigger_size)
        self.ms_threshold = ms_threshold

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'GraphConfig':
        """
        Build a configuration from a request payload.

        Accepts both snake_case and camelCase keys. Values that cannot be
        interpreted fall back to their defaults.
        """
        if not isinstance(data, dict):
            return cls()

        values = {}
        for key, value in data.items():
            values[cls._ALIASES.get(key, key)] = value

        return cls(
            metric=str(values.get('metric', DEFAULT_METRIC)),
            min_percentage=_coerce_float(values.get('min_percentage'), 0.5),
            show_user_functions=_coerce_bool(values.get('show_user_functions'), True),
            show_internal_functions=_coerce_bool(values.get('show_internal_functions'), True),
            show_methods=_coerce_bool(values.get('show_methods'), True),
            min_duration_ms=_coerce_float(values.get('min_duration_ms'), None),
            fallback_group_limit=_coerce_int(values.get('fallback_group_limit'), FALLBACK_GROUP_LIMIT),
            fallback_trigger_size=_coerce_int(values.get('fallback_trigger_size'), FALLBACK_TRIGGER_SIZE),
            ms_threshold=_coerce_float(values.get('ms_threshold'), MS_THRESHOLD),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'metric': self.metric,
            'min_percentage': self.min_percentage,
            'show_user_functions': self.show_user_functions,
            'show_internal_functions': self.show_internal_functions,
            'show_methods': self.show_methods,
            'min_duration_ms': self.min_duration_ms,
            'fallback_group_limit': self.fallback_group_limit,
            'fallback_trigger_size': self.fallback_trigger_size,
            'ms_threshold': self.ms_threshold,
        }
