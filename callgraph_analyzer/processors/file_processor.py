"""
JSON call tree file processing using streaming parser.
"""

import ijson
from pathlib import Path
from typing import Dict, List


# Keys under which producers nest the list of root calls
ROOT_LIST_KEYS = ('call_stack', 'callStack', 'calls', 'children')
TRACES_KEY = 'traces'


def _peek_first_char(f) -> bytes:
    """Return the first non-whitespace byte and rewind the file."""
    while True:
        char = f.read(1)
        if not char or not char.isspace():
            break
    f.seek(0)
    return char


class CallTreeFileProcessor:
    """Reads call tree JSON files using streaming parser."""

    @staticmethod
    def process_file(file_path: str) -> List[Dict]:
        """
        Read the root call records of a single call tree file.

        Accepts a top-level array of root records, or an object holding that
        array under one of ROOT_LIST_KEYS.

        Args:
            file_path: Path to the JSON file

        Returns:
            List of raw root call records
        """
        print(f"Processing {file_path}...")

        roots = []
        with open(file_path, 'rb') as f:
            if _peek_first_char(f) == b'[':
                for record in ijson.items(f, 'item', use_float=True):
                    if isinstance(record, dict):
                        roots.append(record)
            else:
                for key, value in ijson.kvitems(f, '', use_float=True):
                    if key in ROOT_LIST_KEYS and isinstance(value, list):
                        roots = [r for r in value if isinstance(r, dict)]
                        break

        print(f"Completed reading file: {len(roots)} root calls, {CallTreeFileProcessor.count_records(roots)} calls found.")
        return roots

    @staticmethod
    def process_traces_file(file_path: str) -> Dict[str, List[Dict]]:
        """
        Read a file holding several call trees.

        An object with a "traces" mapping (trace_id -> list of root records) yields
        one entry per trace; any other layout is read as a single tree named after
        the file.

        Args:
            file_path: Path to the JSON file

        Returns:
            Dictionary mapping trace_id -> list of raw root records
        """
        traces = {}

        with open(file_path, 'rb') as f:
            if _peek_first_char(f) == b'{':
                for trace_id, roots in ijson.kvitems(f, TRACES_KEY, use_float=True):
                    if isinstance(roots, dict):
                        roots = [roots]
                    if isinstance(roots, list):
                        traces[str(trace_id)] = [r for r in roots if isinstance(r, dict)]

        if not traces:
            traces[Path(file_path).stem] = CallTreeFileProcessor.process_file(file_path)
        else:
            print(f"Found {len(traces)} call trees in {file_path}.")

        return traces

    @staticmethod
    def count_records(roots: List[Dict]) -> int:
        """Count every record in a raw call tree."""
        count = 0
        stack = list(roots)
        while stack:
            record = stack.pop()
            if not isinstance(record, dict):
                continue
            count += 1
            children = record.get('children')
            if isinstance(children, list):
                stack.extend(children)
        return count
