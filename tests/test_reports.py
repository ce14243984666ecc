"""Tests for the report aggregation functions on plain order-line mappings."""

import pytest
from datetime import date

from stockroom.reports import (
    top_by_frequency, top_by_quantity, top_by_value, latest_unit_costs,
    estimated_inventory_value, parse_month_query, month_bounds, ReportParameterError,
)


def line(product_id, name, quantity, price=1.0, delivered_date=None):
    return {
        'product_id': product_id,
        'product_name': name,
        'requested_quantity': quantity,
        'unit_price': price,
        'delivered_date': delivered_date,
    }


class TestRankings:

    def test_frequency_counts_line_occurrences(self):
        lines = [line(1, 'A', 3), line(2, 'B', 1), line(1, 'A', 2)]
        assert top_by_frequency(lines, 5) == [
            {'id': 1, 'name': 'A', 'count': 2},
            {'id': 2, 'name': 'B', 'count': 1},
        ]

    def test_quantity_sums_requested_quantity(self):
        lines = [line(1, 'A', 3), line(2, 'B', 10), line(1, 'A', 2)]
        assert top_by_quantity(lines) == [
            {'id': 2, 'name': 'B', 'total_quantity': 10},
            {'id': 1, 'name': 'A', 'total_quantity': 5},
        ]

    def test_value_multiplies_quantity_by_price(self):
        lines = [line(1, 'A', 3, 2.0), line(2, 'B', 1, 10.0)]
        result = top_by_value(lines)
        assert result[0] == {'id': 2, 'name': 'B', 'total_value': 10.0}
        assert result[1] == {'id': 1, 'name': 'A', 'total_value': 6.0}

    def test_limit_truncates(self):
        lines = [line(i, f'P{i}', i) for i in range(1, 9)]
        result = top_by_quantity(lines, 3)
        assert [r['id'] for r in result] == [8, 7, 6]

    def test_ties_keep_first_seen_order(self):
        lines = [line(2, 'B', 1), line(1, 'A', 1)]
        assert [r['id'] for r in top_by_frequency(lines)] == [2, 1]

    def test_lines_without_product_are_skipped(self):
        lines = [line(None, 'Ghost', 5), line(3, None, 5), line(1, 'A', 1)]
        assert top_by_frequency(lines) == [{'id': 1, 'name': 'A', 'count': 1}]

    def test_empty_input(self):
        assert top_by_frequency([]) == []
        assert top_by_value([]) == []


class TestInventoryValue:

    def test_latest_delivery_price_wins(self):
        price_lines = [
            line(1, 'A', 1, 2.0, date(2025, 1, 5)),
            line(1, 'A', 1, 3.0, date(2025, 2, 5)),
            line(2, 'B', 1, 7.0, None),
        ]
        assert latest_unit_costs(price_lines) == {1: 3.0, 2: 7.0}

    def test_estimated_value(self):
        products = [{'id': 1, 'current_stock': 10}, {'id': 2, 'current_stock': 4}, {'id': 3, 'current_stock': 9}]
        price_lines = [
            line(1, 'A', 1, 2.0, date(2025, 1, 5)),
            line(2, 'B', 1, 5.0, date(2025, 3, 1)),
        ]
        # Product 3 has never been delivered and contributes nothing
        assert estimated_inventory_value(products, price_lines) == 10 * 2.0 + 4 * 5.0

    def test_no_products(self):
        assert estimated_inventory_value([], []) == 0


class TestMonthQuery:

    TODAY = date(2025, 6, 1)

    def test_valid_parameters(self):
        assert parse_month_query('2025', '3', '10', today=self.TODAY) == (2025, 3, 10)

    def test_limit_defaults_to_five(self):
        assert parse_month_query('2025', '3', None, today=self.TODAY) == (2025, 3, 5)
        assert parse_month_query('2025', '3', '', today=self.TODAY) == (2025, 3, 5)

    def test_leading_integer_is_used(self):
        assert parse_month_query('2025.0', '3', '2.5', today=self.TODAY) == (2025, 3, 2)
        assert parse_month_query(2025, 3, 4, today=self.TODAY) == (2025, 3, 4)

    def test_next_year_is_allowed(self):
        assert parse_month_query('2026', '1', today=self.TODAY)[0] == 2026

    @pytest.mark.parametrize('year', [None, 'abc', '1999', '2027'])
    def test_bad_year(self, year):
        with pytest.raises(ReportParameterError, match="'year'"):
            parse_month_query(year, '3', today=self.TODAY)

    @pytest.mark.parametrize('month', [None, '0', '13', 'march'])
    def test_bad_month(self, month):
        with pytest.raises(ReportParameterError, match="'month'"):
            parse_month_query('2025', month, today=self.TODAY)

    @pytest.mark.parametrize('limit', ['0', '-1', 'ten'])
    def test_bad_limit(self, limit):
        with pytest.raises(ReportParameterError, match="'limit'"):
            parse_month_query('2025', '3', limit, today=self.TODAY)

    def test_month_bounds_roll_over_december(self):
        assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2025, 1, 1))
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 3, 1))
