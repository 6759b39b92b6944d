"""
Test Suite for Cost & Discount Utilities

Run with: python -m pytest tests/test_cost_utils.py
"""

import unittest
from types import SimpleNamespace

from actuarial_curves import Category
from cost_utils import (
    ADD_ON_PRODUCTS,
    bundle_discount,
    calculate_total_cost,
    family_discount,
    filter_by_budget,
    get_product,
    state_cost_multiplier,
)
from household_types import Residence
from reference_tables import UnknownStateError


class TestProductCatalog(unittest.TestCase):

    def test_one_product_per_category(self):
        self.assertEqual(len(ADD_ON_PRODUCTS), 8)
        self.assertEqual({p.category for p in ADD_ON_PRODUCTS}, set(Category))

    def test_base_costs(self):
        self.assertEqual(get_product('dental').base_cost_per_month, 45)
        self.assertEqual(get_product(Category.LONG_TERM_CARE).base_cost_per_month, 200)

    def test_life_product_id(self):
        product = get_product('life')
        self.assertEqual(product.insurance_id, 'term-life')
        self.assertEqual(product.short_name, 'Term Life')


class TestStateCostMultiplier(unittest.TestCase):

    def test_no_residences(self):
        self.assertEqual(state_cost_multiplier([]), 1.0)

    def test_single_state(self):
        self.assertAlmostEqual(state_cost_multiplier([Residence('NY')]), 1.12)

    def test_month_weighted(self):
        residences = [Residence('NY', months_per_year=9), Residence('FL', months_per_year=3)]
        self.assertAlmostEqual(state_cost_multiplier(residences), 1.12 * 0.75 + 1.02 * 0.25)

    def test_equal_weights_when_all_zero(self):
        residences = [Residence('NY', months_per_year=0), Residence('FL', months_per_year=0)]
        self.assertAlmostEqual(state_cost_multiplier(residences), 1.07)

    def test_unknown_state_raises(self):
        with self.assertRaises(UnknownStateError):
            state_cost_multiplier([Residence('NY'), Residence('QQ')])


class TestDiscounts(unittest.TestCase):

    def test_bundle_discount_threshold(self):
        self.assertEqual(bundle_discount(2), 1.0)
        self.assertEqual(bundle_discount(3), 0.95)
        self.assertEqual(bundle_discount(8), 0.95)

    def test_family_discount_threshold(self):
        self.assertEqual(family_discount(1), 1.0)
        self.assertEqual(family_discount(2), 0.90)

    def test_total_cost_with_bundle(self):
        """Three items priced 50, 25 and 100: round(175 x 0.95) = 166"""
        self.assertEqual(calculate_total_cost([50, 25, 100]), 166)

    def test_total_cost_without_bundle(self):
        self.assertEqual(calculate_total_cost([50, 25]), 75)

    def test_total_cost_empty(self):
        self.assertEqual(calculate_total_cost([]), 0)


class TestBudgetFilter(unittest.TestCase):

    def _recs(self, *costs):
        return [SimpleNamespace(name=f"rec{i}", household_cost_per_month=c) for i, c in enumerate(costs)]

    def test_takes_items_in_order(self):
        recs = self._recs(100, 80, 50)
        kept = filter_by_budget(recs, 180)
        self.assertEqual([r.name for r in kept], ['rec0', 'rec1'])

    def test_skips_items_that_overflow(self):
        recs = self._recs(100, 120, 50)
        kept = filter_by_budget(recs, 160)
        self.assertEqual([r.name for r in kept], ['rec0', 'rec2'])

    def test_zero_budget(self):
        self.assertEqual(filter_by_budget(self._recs(10), 0), [])


if __name__ == '__main__':
    unittest.main()
