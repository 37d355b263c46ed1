"""
Call record normalizer for heterogeneous trace producers.
"""

import math
from typing import Any, Dict, List, Optional, Set

from ..core.types import CallNode, FUNCTION_TYPE_UNKNOWN, MS_THRESHOLD


# Accepted field names, in priority order: snake_case, PascalCase, generic alias
ID_FIELDS = ('id', 'call_id', 'CallID')
FUNCTION_FIELDS = ('function', 'Function', 'name')
CLASS_FIELDS = ('class', 'Class')
FILE_FIELDS = ('file', 'File')
LINE_FIELDS = ('line', 'Line')
DURATION_FIELDS = ('duration_ms', 'DurationMs', 'duration')
CPU_MS_FIELDS = ('cpu_ms', 'CPUMs')
CPU_SECONDS_FIELDS = ('cpu_time', 'cpu')
IO_WAIT_FIELDS = ('io_wait_time', 'IoWaitTime', 'io_wait')
WALL_TIME_FIELDS = ('wall_time', 'WallTime')
WALL_TIME_MS_FIELDS = ('wall_time_ms', 'WallTimeMs')
MEMORY_FIELDS = ('memory_delta', 'MemoryDelta')
BYTES_SENT_FIELDS = ('network_bytes_sent', 'NetworkBytesSent', 'bytes_sent_delta')
BYTES_RECEIVED_FIELDS = ('network_bytes_received', 'NetworkBytesReceived', 'bytes_received_delta')
FUNCTION_TYPE_FIELDS = ('function_type', 'FunctionType')


def _first(record: Dict, fields, skip_zero: bool = False) -> Any:
    """
    Return the first non-empty value among the given field names.

    With skip_zero, a zero value also falls through to the next alias, so a
    producer writing 0 under one name and the real figure under another is
    still read correctly.
    """
    for name in fields:
        value = record.get(name)
        if value is None or value == '':
            continue
        if skip_zero and not _number(value):
            continue
        return value
    return None


def _number(value) -> Optional[float]:
    """Coerce a raw value to a finite float, or None when it is not numeric."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


class IdAllocator:
    """Hands out unique node ids within one tree."""

    def __init__(self):
        self.counter = 0
        self.seen: Set[str] = set()

    def assign(self, raw_id) -> str:
        node_id = str(raw_id) if raw_id is not None else None
        if node_id is None or node_id in self.seen:
            node_id = self._synthesize()
        self.seen.add(node_id)
        return node_id

    def _synthesize(self) -> str:
        while True:
            node_id = f"node_{self.counter}"
            self.counter += 1
            if node_id not in self.seen:
                return node_id


class CallNodeNormalizer:
    """Converts raw call records into canonical CallNode trees."""

    def __init__(self, ms_threshold: float = MS_THRESHOLD):
        """
        Initialize the normalizer.

        Args:
            ms_threshold: Durations above this value are assumed to be milliseconds
        """
        self.ms_threshold = ms_threshold

    def normalize_tree(self, call_stack: Any) -> List[CallNode]:
        """
        Normalize a list of root call records.

        Ids missing from the source, or already used elsewhere in the tree, are
        replaced with node_<n> in traversal order, so identical input always
        yields identical ids.

        Args:
            call_stack: List of raw root records (a single dict is accepted too)

        Returns:
            List of normalized root nodes
        """
        if isinstance(call_stack, dict):
            call_stack = [call_stack]
        if not isinstance(call_stack, list):
            return []

        ids = IdAllocator()
        roots: List[CallNode] = []
        # Records currently open on the walk, keyed by object identity
        on_path: Set[int] = set()

        # Items are (leaving, record, parent node); leaving marks the end of a subtree
        stack = [(False, record, None) for record in reversed(call_stack)]
        while stack:
            leaving, record, parent = stack.pop()
            if leaving:
                on_path.discard(id(record))
                continue
            if not isinstance(record, dict):
                continue
            # A record repeated inside its own subtree would never end
            if id(record) in on_path:
                continue

            node = self.normalize_record(record, ids)
            if parent is None:
                roots.append(node)
            else:
                parent.children.append(node)

            raw_children = record.get('children')
            if isinstance(raw_children, list) and raw_children:
                on_path.add(id(record))
                stack.append((True, record, None))
                for raw_child in reversed(raw_children):
                    stack.append((False, raw_child, node))

        return roots

    def normalize_record(self, record: Dict, ids: Optional[IdAllocator] = None) -> CallNode:
        """
        Normalize a single record without its children.

        Args:
            record: Raw call record
            ids: Id allocator of the tree being normalized

        Returns:
            CallNode with an empty children list
        """
        ids = ids or IdAllocator()
        return CallNode(
            id=ids.assign(_first(record, ID_FIELDS)),
            function=str(_first(record, FUNCTION_FIELDS) or 'unknown'),
            class_name=self._optional_str(_first(record, CLASS_FIELDS)),
            file=self._optional_str(_first(record, FILE_FIELDS)),
            line=self._optional_int(_first(record, LINE_FIELDS)),
            duration=self.to_seconds(_number(_first(record, DURATION_FIELDS, skip_zero=True))),
            cpu_time=self._cpu_time(record),
            io_wait_time=_number(_first(record, IO_WAIT_FIELDS)) or 0.0,
            wall_time=self._wall_time(record),
            memory_delta=_number(_first(record, MEMORY_FIELDS)) or 0.0,
            bytes_sent_delta=_number(_first(record, BYTES_SENT_FIELDS)) or 0.0,
            bytes_received_delta=_number(_first(record, BYTES_RECEIVED_FIELDS)) or 0.0,
            function_type=self._function_type(_first(record, FUNCTION_TYPE_FIELDS)),
        )

    def to_seconds(self, duration: Optional[float]) -> float:
        """
        Convert a raw duration to seconds.

        Producers disagree on units; anything above the threshold is assumed
        to be milliseconds, anything else is taken as seconds already.
        """
        if not duration:
            return 0.0
        return duration / 1000.0 if duration > self.ms_threshold else duration

    @staticmethod
    def _cpu_time(record: Dict) -> Optional[float]:
        cpu_ms = _number(_first(record, CPU_MS_FIELDS, skip_zero=True))
        if cpu_ms:
            return cpu_ms / 1000.0
        return _number(_first(record, CPU_SECONDS_FIELDS, skip_zero=True))

    @staticmethod
    def _wall_time(record: Dict) -> Optional[float]:
        wall_time = _number(_first(record, WALL_TIME_FIELDS, skip_zero=True))
        if wall_time:
            return wall_time
        wall_time_ms = _number(_first(record, WALL_TIME_MS_FIELDS, skip_zero=True))
        if wall_time_ms:
            return wall_time_ms / 1000.0
        return None

    @staticmethod
    def _function_type(value) -> int:
        number = _number(value)
        return int(number) if number is not None else FUNCTION_TYPE_UNKNOWN

    @staticmethod
    def _optional_str(value) -> Optional[str]:
        return str(value) if value is not None else None

    @staticmethod
    def _optional_int(value) -> Optional[int]:
        number = _number(value)
        return int(number) if number is not None else None
