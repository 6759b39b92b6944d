"""
Test Suite for Year-Versioned Reference Tables

Run with: python -m pytest tests/test_reference_tables.py
"""

import dataclasses
import unittest

from reference_tables import (
    SUPPORTED_TAX_YEARS,
    UnknownStateError,
    UnknownTaxYearError,
    get_reference_tables,
)


class TestFederalPovertyLevel(unittest.TestCase):

    def setUp(self):
        self.tables = get_reference_tables(2024)

    def test_table_sizes(self):
        self.assertEqual(self.tables.fpl_for_household(1), 14580)
        self.assertEqual(self.tables.fpl_for_household(2), 19720)
        self.assertEqual(self.tables.fpl_for_household(8), 50560)

    def test_extends_beyond_eight(self):
        self.assertEqual(self.tables.fpl_for_household(9), 50560 + 5140)
        self.assertEqual(self.tables.fpl_for_household(11), 50560 + 3 * 5140)

    def test_size_below_one_treated_as_one(self):
        self.assertEqual(self.tables.fpl_for_household(0), 14580)
        self.assertEqual(self.tables.fpl_for_household(-3), 14580)

    def test_historical_year(self):
        self.assertEqual(get_reference_tables(2023).fpl_for_household(1), 13590)


class TestContributionSchedule(unittest.TestCase):

    def setUp(self):
        self.tables = get_reference_tables()

    def test_bracket_upper_bounds_inclusive(self):
        self.assertEqual(self.tables.contribution_bracket_for(150).max_fpl, 150)
        self.assertEqual(self.tables.contribution_bracket_for(400).max_fpl, 400)
        self.assertEqual(self.tables.contribution_bracket_for(400.01).max_fpl, float('inf'))

    def test_interpolation_inside_bracket(self):
        bracket = self.tables.contribution_bracket_for(175)
        self.assertAlmostEqual(bracket.percent_at(175), 1.0)

    def test_open_ended_bracket_is_flat(self):
        bracket = self.tables.contribution_bracket_for(900)
        self.assertEqual(bracket.percent_at(900), 8.5)


class TestLookups(unittest.TestCase):

    def setUp(self):
        self.tables = get_reference_tables()

    def test_state_multiplier_case_insensitive(self):
        self.assertEqual(self.tables.state_cost_multiplier('ny'), 1.12)
        self.assertEqual(self.tables.state_cost_multiplier(' TX '), 1.01)

    def test_unknown_state_fails_fast(self):
        with self.assertRaises(UnknownStateError) as ctx:
            self.tables.state_cost_multiplier('ZZ')
        self.assertIn('ZZ', str(ctx.exception))

    def test_unknown_state_is_value_error(self):
        with self.assertRaises(ValueError):
            self.tables.state_cost_multiplier('XX')

    def test_medicaid_expansion(self):
        self.assertTrue(self.tables.is_medicaid_expansion_state('CA'))
        self.assertFalse(self.tables.is_medicaid_expansion_state('tx'))

    def test_require_state_normalizes(self):
        self.assertEqual(self.tables.require_state(' ca '), 'CA')

    def test_medicaid_lookup_rejects_unknown_state(self):
        with self.assertRaises(UnknownStateError):
            self.tables.is_medicaid_expansion_state('ZZ')

    def test_contribution_limits_by_year(self):
        self.assertEqual(get_reference_tables(2024).contribution_limits.hsa_individual, 4150)
        self.assertEqual(get_reference_tables(2023).contribution_limits.hsa_individual, 3850)
        self.assertEqual(get_reference_tables(2024).contribution_limits.hsa_base_limit('family'), 8300)


class TestRegistry(unittest.TestCase):

    def test_supported_years(self):
        self.assertIn(2024, SUPPORTED_TAX_YEARS)
        self.assertIn(2023, SUPPORTED_TAX_YEARS)

    def test_default_year_is_2024(self):
        self.assertEqual(get_reference_tables().year, 2024)

    def test_unknown_year_fails_fast(self):
        with self.assertRaises(UnknownTaxYearError) as ctx:
            get_reference_tables(1999)
        self.assertIn('1999', str(ctx.exception))


class TestImmutability(unittest.TestCase):
    """Tables are read-only so calls cannot leak state into each other"""

    def test_dataclass_is_frozen(self):
        tables = get_reference_tables()
        with self.assertRaises(dataclasses.FrozenInstanceError):
            tables.year = 2030

    def test_mappings_are_read_only(self):
        tables = get_reference_tables()
        with self.assertRaises(TypeError):
            tables.fpl_by_household_size[1] = 0
        with self.assertRaises(TypeError):
            tables.state_cost_multipliers['NY'] = 2.0

    def test_replace_builds_independent_tables(self):
        tables = get_reference_tables()
        custom = dataclasses.replace(tables, fpl_per_additional_person=1)
        self.assertEqual(custom.fpl_for_household(9), 50561)
        self.assertEqual(tables.fpl_for_household(9), 55700)


if __name__ == '__main__':
    unittest.main()
