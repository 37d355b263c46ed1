"""
Percentage threshold filtering for class groups.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, Set

from ..core.types import ClassGroup, ROOT_GROUP_KEY


@dataclass
class FilterResult:
    """Groups surviving the threshold, with display percentages."""
    groups: Dict[str, ClassGroup] = field(default_factory=dict)
    percentages: Dict[str, float] = field(default_factory=dict)
    included_total_value: float = 0.0
    fallback_applied: bool = False


class ThresholdFilter:
    """Selects the class groups visible in the graph."""

    def __init__(self, config):
        """
        Initialize with graph configuration.

        Args:
            config: GraphConfig instance (metric, min_percentage and fallback limits)
        """
        self.config = config

    @staticmethod
    def is_root_key(key: str, root_keys: Set[str]) -> bool:
        return key == ROOT_GROUP_KEY or key in root_keys

    def filter_groups(self, groups: Dict[str, ClassGroup], root_keys: Iterable[str]) -> FilterResult:
        """
        Apply the percentage threshold with the degenerate-case fallback.

        A group survives if it is a root or its share of the total is at least
        min_percentage. If that leaves only roots, or fallback_trigger_size groups
        or fewer, the top fallback_group_limit non-root groups by raw value are
        added regardless of the threshold.

        Display percentages are relative to the surviving groups only, so they
        add up to 100 over what is shown.

        Args:
            groups: Ordered mapping of group key -> ClassGroup
            root_keys: Group keys of the tree's top-level calls

        Returns:
            FilterResult
        """
        metric = self.config.metric
        root_keys = set(root_keys)

        values = {key: group.metric_value(metric) for key, group in groups.items()}
        total_value = sum(values.values())

        def percentage_of_total(key):
            return (values[key] / total_value) * 100 if total_value > 0 else 0.0

        included: Dict[str, ClassGroup] = {}
        for key, group in groups.items():
            if self.is_root_key(key, root_keys) or percentage_of_total(key) >= self.config.min_percentage:
                included[key] = group

        surviving_roots = [key for key in included if self.is_root_key(key, root_keys)]
        has_only_roots = bool(surviving_roots) and len(included) == len(surviving_roots)
        has_too_few = len(included) <= self.config.fallback_trigger_size

        fallback_applied = False
        if has_only_roots or has_too_few:
            candidates = [
                key for key in groups
                if not self.is_root_key(key, root_keys) and percentage_of_total(key) > 0
            ]
            # Stable sort keeps first-seen order for equal values
            candidates.sort(key=lambda k: -values[k])

            for key in candidates[:self.config.fallback_group_limit]:
                if key not in included:
                    included[key] = groups[key]
                    fallback_applied = True

            # Re-establish the original group order
            included = {key: group for key, group in groups.items() if key in included}

        included_total = sum(values[key] for key in included)
        percentages = {
            key: (values[key] / included_total) * 100 if included_total > 0 else 0.0
            for key in included
        }

        return FilterResult(
            groups=included,
            percentages=percentages,
            included_total_value=included_total,
            fallback_applied=fallback_applied,
        )
