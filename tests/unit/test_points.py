"""
Unit tests for the category point table
"""

import pytest
from core.points import CategoryPointTable, DEFAULT_CATEGORY_POINTS


class TestCategoryPointTable:
    """Weight lookups and point computation"""

    def test_default_weights(self):
        table = CategoryPointTable()

        assert len(table) == 13
        assert table["S1"] == 3
        assert table["S2B"] == 2.5
        assert table["S8"] == 48
        assert table.codes() == list(DEFAULT_CATEGORY_POINTS)

    def test_points_for_mapped_category(self):
        table = CategoryPointTable()

        assert table.points_for("S1", 2) == 6.0
        assert table.points_for("S4", 2) == 10.0

    def test_unmapped_category_scores_zero(self):
        table = CategoryPointTable()

        assert table.points_for("ZZZ", 4) == 0
        assert table.points_for(None, 1) == 0
        assert table.weight_for("ZZZ") is None

    def test_lookup_ignores_case_and_whitespace(self):
        table = CategoryPointTable()

        assert " s2a " in table
        assert table.weight_for("s9c") == 7

    def test_custom_weights_replace_defaults(self):
        table = CategoryPointTable({"X1": 4})

        assert table.points_for("X1", 3) == 12.0
        assert "S1" not in table

    @pytest.mark.parametrize("weight", [0, -2])
    def test_non_positive_weight_rejected(self, weight):
        with pytest.raises(ValueError):
            CategoryPointTable({"S1": weight})

    def test_table_is_read_only(self):
        table = CategoryPointTable()

        with pytest.raises(TypeError):
            table["S1"] = 100

    def test_canonical_spelling(self):
        table = CategoryPointTable()

        assert table.canonical(" s2a ") == "S2A"
        assert table.canonical("ZZZ") is None
        assert table.canonical(None) is None
