"""Structural analysis: how tabular is a value tree?

A single depth-first walk collects three numbers:

- ``percent_tabular``: share of arrays that are candidate tables, i.e.
  non-empty arrays whose elements are all mappings.
- ``uniformity_score``: mean field-presence ratio over those candidates.
  The reference field set is the first element's keys, so keys that only
  appear in later elements are neither penalized nor counted.
- ``nested_depth``: depth of the deepest container (array or mapping),
  root at 0. Scalar leaves do not add a level.

The walk assumes a finite, acyclic tree.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from toonify.contracts.analysis import StructuralStats


def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _is_tabular_candidate(items: list | tuple) -> bool:
    """Check if every item is a mapping (and there is at least one)."""
    if not items:
        return False
    return all(isinstance(item, Mapping) for item in items)


def calculate_uniformity(items: list | tuple) -> float:
    """Fraction of (item, reference field) pairs where the field is present."""
    reference_fields = list(items[0].keys())
    total_fields = len(reference_fields) * len(items)
    if total_fields == 0:
        return 1.0
    present = sum(1 for item in items for field in reference_fields if field in item)
    return present / total_fields


class _Walk:
    """Accumulators for one traversal."""

    def __init__(self) -> None:
        self.total_arrays = 0
        self.tabular_arrays = 0
        self.max_depth = 0
        self.uniformity_sum = 0.0
        self.uniformity_count = 0

    def visit(self, root: Any) -> None:
        # Iterative: input depth is not bounded by the interpreter stack.
        # Reverse push keeps pre-order.
        stack: list[tuple[Any, int]] = [(root, 0)]
        while stack:
            value, depth = stack.pop()
            if _is_array(value):
                self.max_depth = max(self.max_depth, depth)
                self.total_arrays += 1
                if _is_tabular_candidate(value):
                    self.tabular_arrays += 1
                    self.uniformity_sum += calculate_uniformity(value)
                    self.uniformity_count += 1
                stack.extend((item, depth + 1) for item in reversed(value))
            elif isinstance(value, Mapping):
                self.max_depth = max(self.max_depth, depth)
                stack.extend((child, depth + 1) for child in reversed(list(value.values())))

    def stats(self) -> StructuralStats:
        percent = (
            100 * self.tabular_arrays / self.total_arrays if self.total_arrays else 0.0
        )
        # Nothing to judge means no penalty.
        uniformity = (
            self.uniformity_sum / self.uniformity_count if self.uniformity_count else 1.0
        )
        return StructuralStats(
            percent_tabular=percent,
            nested_depth=self.max_depth,
            uniformity_score=uniformity,
        )


def analyze_structure(value: Any) -> StructuralStats:
    """Compute tabularity statistics for a JSON-like value."""
    walk = _Walk()
    walk.visit(value)
    return walk.stats()
