"""Tests for stock projection over the ledger."""

import random

from conftest import make_record
from parts_inventory.services.stock_projection_service import category_totals, project, stock_summary


class TestProject:

    def test_empty_ledger_is_zero(self):
        assert project([], "完成", "UG3A-L") == 0

    def test_sums_matching_records_only(self):
        records = [
            make_record("完成", "UG3A-L", 5, record_id="a"),
            make_record("完成", "UG3A-L", -2, record_id="b"),
            make_record("完成", "UG3A-R", 7, record_id="c"),
            make_record("框_噴完", "UG3A-L", 9, record_id="d"),
            make_record("完成", "UG3A-L", 100, category="抽屜", record_id="e"),
        ]
        assert project(records, "完成", "UG3A-L") == 3
        assert project(records, "完成", "UG3A-R") == 7
        assert project(records, "框_噴完", "UG3A-L") == 9

    def test_side_less_stage_merges_models(self):
        records = [
            make_record("玻璃", "UG3A-L", 5, record_id="a"),
            make_record("玻璃", "AK3B-R", 3, record_id="b"),
            make_record("玻璃", "UG3A/AK3B", 1, record_id="c"),
            make_record("玻璃", "UG2A-L", 4, record_id="d"),
        ]
        assert project(records, "玻璃", "UG3A/AK3B") == 9
        assert project(records, "玻璃", "UG3A-R") == 9
        assert project(records, "玻璃", "UG2A/AK2B") == 4

    def test_glass_strip_strips_side(self):
        records = [
            make_record("玻璃條", "樹德4尺-L", 2, record_id="a"),
            make_record("玻璃條", "樹德4尺-R", 3, record_id="b"),
        ]
        assert project(records, "玻璃條", "樹德4尺") == 5

    def test_framed_stage_keeps_sides(self):
        records = [make_record("框_待辦", "UG3A-L", 2), make_record("框_待辦", "AK3B-L", 3)]
        assert project(records, "框_待辦", "UG3A-L") == 2

    def test_record_order_does_not_matter(self):
        records = [make_record("完成", "AK2U-L", q, record_id=str(i)) for i, q in enumerate([3, -1, 8, -4, 2])]
        shuffled = list(records)
        random.Random(7).shuffle(shuffled)
        assert project(records, "完成", "AK2U-L") == project(shuffled, "完成", "AK2U-L") == 8


class TestStockSummary:

    def test_every_cell_present_with_zero_default(self):
        summary = stock_summary([])
        assert list(summary) == ["完成", "框_噴完", "框_製作完成", "框_待辦", "玻璃條", "玻璃"]
        assert summary["完成"]["UG3A-L"] == 0
        assert len(summary["完成"]) == 24
        assert "UG3A/AK3B" in summary["玻璃"]
        assert "UG3A-L" not in summary["玻璃"]
        assert "AK3B" not in summary["玻璃條"]

    def test_matches_point_projection(self):
        records = [
            make_record("完成", "UG3A-L", 4, record_id="a"),
            make_record("玻璃", "AK3B-L", 6, record_id="b"),
            make_record("玻璃條", "4尺88-R", 2, record_id="c"),
        ]
        summary = stock_summary(records)
        assert summary["完成"]["UG3A-L"] == project(records, "完成", "UG3A-L") == 4
        assert summary["玻璃"]["UG3A/AK3B"] == 6
        assert summary["玻璃條"]["4尺88"] == 2

    def test_ignores_other_categories(self):
        records = [make_record("完成", "UG3A-L", 4, category="鐵拉門")]
        assert stock_summary(records)["完成"]["UG3A-L"] == 0


def test_category_totals_in_catalog_order():
    records = [
        make_record("一般", "螺絲", 10, category="抽屜", record_id="a"),
        make_record("完成", "UG3A-L", 3, record_id="b"),
        make_record("一般", "螺絲", -4, category="抽屜", record_id="c"),
    ]
    totals = category_totals(records)
    assert totals[0] == ("玻璃拉門", 3)
    assert ("抽屜", 6) in totals
    assert ("噴漆", 0) in totals
