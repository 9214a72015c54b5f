"""Tests for structural analysis."""

from __future__ import annotations

from collections import OrderedDict

import pytest

from toonify.engine.analyzer import analyze_structure, calculate_uniformity


@pytest.mark.parametrize("value", [None, 0, 3.5, "text", True, {}, {"a": 1, "b": {"c": "d"}}])
def test_no_arrays_means_zero_tabular_full_uniformity(value):
    stats = analyze_structure(value)
    assert stats.percent_tabular == 0
    assert stats.uniformity_score == 1


def test_scalar_root_depth_zero():
    assert analyze_structure("hello").nested_depth == 0
    assert analyze_structure(None).nested_depth == 0


def test_uniform_table(users_data):
    stats = analyze_structure(users_data)
    assert stats.percent_tabular == 100
    assert stats.uniformity_score == 1.0
    assert stats.nested_depth == 2


def test_deep_nesting_without_arrays(deep_data):
    stats = analyze_structure(deep_data)
    assert stats.percent_tabular == 0
    assert stats.nested_depth == 4


def test_top_level_array_of_objects():
    stats = analyze_structure([{"id": 1}, {"id": 2}, {"id": 3}])
    assert stats.percent_tabular == 100
    assert stats.nested_depth == 1


def test_empty_array_is_not_tabular():
    stats = analyze_structure({"items": []})
    assert stats.percent_tabular == 0
    assert stats.uniformity_score == 1


def test_empty_array_does_not_boost_uniformity():
    data = {
        "partial": [{"a": 1, "b": 2}, {"a": 3}],
        "empty": [],
    }
    stats = analyze_structure(data)
    assert stats.percent_tabular == 50
    assert stats.uniformity_score == pytest.approx(0.75)


def test_array_of_arrays_is_not_tabular():
    stats = analyze_structure({"matrix": [[1, 2], [3, 4]]})
    # outer array plus two inner arrays, none tabular
    assert stats.percent_tabular == 0
    assert stats.nested_depth == 2


def test_mixed_objects_and_scalars_not_tabular():
    stats = analyze_structure({"items": [{"a": 1}, 2, "three"]})
    assert stats.percent_tabular == 0
    assert stats.uniformity_score == 1


def test_null_element_disqualifies_array():
    stats = analyze_structure([None, {"a": 1}])
    assert stats.percent_tabular == 0


def test_scalar_array_counts_in_denominator():
    data = {"table": [{"a": 1}], "empty": [], "tags": ["x", "y"]}
    stats = analyze_structure(data)
    assert stats.percent_tabular == pytest.approx(100 / 3)


def test_key_mismatch_still_tabular_with_fractional_uniformity():
    stats = analyze_structure([{"a": 1, "b": 2}, {"a": 1}])
    assert stats.percent_tabular == 100
    assert stats.uniformity_score == pytest.approx(0.75)


def test_uniformity_denominator_fixed_by_first_element():
    # Extra keys in later elements are neither penalized nor counted,
    # so scoring depends on element order.
    assert calculate_uniformity([{"a": 1}, {"a": 1, "b": 2}]) == 1.0
    assert calculate_uniformity([{"a": 1, "b": 2}, {"a": 1}]) == pytest.approx(0.75)


def test_uniformity_with_empty_first_element():
    assert calculate_uniformity([{}, {"a": 1}]) == 1.0


def test_uniformity_averaged_over_tables():
    data = {
        "full": [{"a": 1, "b": 2}, {"a": 3, "b": 4}],
        "half": [{"a": 1, "b": 2}, {"c": 3, "d": 4}],
    }
    stats = analyze_structure(data)
    assert stats.percent_tabular == 100
    assert stats.uniformity_score == pytest.approx(0.75)


def test_nested_tables_are_counted():
    data = {
        "teams": [
            {"name": "core", "members": [{"id": 1}, {"id": 2}]},
            {"name": "infra", "members": [{"id": 3}]},
        ]
    }
    stats = analyze_structure(data)
    assert stats.percent_tabular == 100
    # root -> teams -> team -> members -> member
    assert stats.nested_depth == 4


def test_tuples_and_mapping_types_are_recognized():
    data = OrderedDict(rows=({"x": 1}, {"x": 2}))
    stats = analyze_structure(data)
    assert stats.percent_tabular == 100
    assert stats.nested_depth == 2


def test_strings_are_not_arrays():
    stats = analyze_structure({"word": "abc"})
    assert stats.percent_tabular == 0
    assert stats.nested_depth == 0


def test_input_is_not_mutated(users_data):
    snapshot = repr(users_data)
    analyze_structure(users_data)
    assert repr(users_data) == snapshot


def test_very_deep_mapping_runs_to_completion():
    value = "leaf"
    for _ in range(3000):
        value = {"k": value}
    stats = analyze_structure(value)
    assert stats.nested_depth == 2999
    assert stats.percent_tabular == 0


def test_very_deep_array_chain():
    value: list = []
    for _ in range(3000):
        value = [value]
    stats = analyze_structure(value)
    assert stats.nested_depth == 2999
    assert stats.percent_tabular == 0
