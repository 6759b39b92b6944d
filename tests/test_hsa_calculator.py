"""
Test Suite for the HSA Contribution Calculator

Run with: python -m pytest tests/test_hsa_calculator.py
"""

import unittest

from hsa_calculator import (
    CoverageType,
    HSAInput,
    calculate_contribution_limits,
    calculate_hsa_optimization,
    calculate_paycheck_contribution,
    calculate_recommended_contribution,
    calculate_tax_equivalent_yield,
    calculate_tax_savings,
    estimate_retirement_healthcare_costs,
    generate_projections,
    get_hsa_limits,
    validate_hdhp_eligibility,
)
from reference_tables import UnknownTaxYearError


def _input(coverage='individual', age=40, income=80000, federal=0.22, deductible=3000, **kwargs):
    return HSAInput(
        coverage_type=coverage,
        age=age,
        annual_income=income,
        federal_tax_rate=federal,
        monthly_premium=300,
        deductible=deductible,
        **kwargs
    )


class TestContributionLimits(unittest.TestCase):

    def test_catch_up_at_55(self):
        limits = calculate_contribution_limits(_input(age=55))
        self.assertEqual(limits.base_limit, 4150)
        self.assertEqual(limits.catch_up_contribution, 1000)
        self.assertEqual(limits.total_limit, 5150)

    def test_no_catch_up_at_54(self):
        limits = calculate_contribution_limits(_input(age=54))
        self.assertEqual(limits.total_limit, 4150)
        self.assertEqual(limits.catch_up_contribution, 0)

    def test_employer_money_reduces_employee_room(self):
        limits = calculate_contribution_limits(_input(coverage='family', employer_contribution=1000))
        self.assertEqual(limits.total_limit, 8300)
        self.assertEqual(limits.max_employee_contribution, 7300)

    def test_coverage_type_parsed(self):
        self.assertEqual(_input(coverage='FAMILY').coverage_type, CoverageType.FAMILY)


class TestTaxSavings(unittest.TestCase):

    def test_components_and_total(self):
        savings = calculate_tax_savings(_input(state_tax_rate=0.06), 4150)
        self.assertEqual(savings.federal_tax_savings, 913)
        self.assertEqual(savings.state_tax_savings, 249)
        self.assertEqual(savings.fica_savings, 317)
        self.assertEqual(savings.total_annual_savings, 913 + 249 + 317)
        self.assertEqual(savings.effective_cost_per_dollar, 0.64)

    def test_zero_contribution(self):
        savings = calculate_tax_savings(_input(), 0)
        self.assertEqual(savings.total_annual_savings, 0)
        self.assertEqual(savings.effective_cost_per_dollar, 1.0)


class TestRecommendedContribution(unittest.TestCase):

    def _recommend(self, data):
        return calculate_recommended_contribution(data, calculate_contribution_limits(data))

    def test_affordable_income_gets_maximum(self):
        self.assertEqual(self._recommend(_input(income=50000)), 4150)

    def test_targets_expected_expenses(self):
        self.assertEqual(self._recommend(_input(income=30000, expected_expenses=2000)), 2000)

    def test_capped_at_affordable_amount(self):
        self.assertEqual(self._recommend(_input(income=30000, expected_expenses=5000)), 3000)

    def test_employee_share_after_employer(self):
        data = _input(income=30000, expected_expenses=2000, employer_contribution=500)
        self.assertEqual(self._recommend(data), 1500)


class TestProjections(unittest.TestCase):

    def test_first_year(self):
        rows = generate_projections(_input(current_balance=1000, expected_return=0.07), 4150)
        first = rows[0]
        self.assertEqual(first.year, 1)
        self.assertEqual(first.age, 41)
        self.assertAlmostEqual(first.investment_growth, 70)
        self.assertAlmostEqual(first.ending_balance, 5220)

    def test_rows_chain(self):
        rows = generate_projections(_input(current_balance=1000, years_to_retirement=5), 2000)
        self.assertEqual(len(rows), 5)
        for previous, current in zip(rows, rows[1:]):
            self.assertEqual(current.beginning_balance, previous.ending_balance)

    def test_zero_years(self):
        self.assertEqual(generate_projections(_input(years_to_retirement=0), 4150), [])

    def test_zero_return_is_honoured(self):
        rows = generate_projections(_input(current_balance=1000, expected_return=0, years_to_retirement=3), 0)
        self.assertTrue(all(r.investment_growth == 0 for r in rows))
        self.assertEqual(rows[-1].ending_balance, 1000)

    def test_expenses_inflate_after_first_year(self):
        data = _input(current_balance=10000, expected_expenses=1000, healthcare_inflation=0.05,
                      years_to_retirement=2)
        rows = generate_projections(data, 0)
        self.assertAlmostEqual(rows[0].expenses_paid, 1000)
        self.assertAlmostEqual(rows[1].expenses_paid, 1050)

    def test_balance_never_negative(self):
        data = _input(expected_expenses=5000, years_to_retirement=3)
        rows = generate_projections(data, 0)
        self.assertTrue(all(r.ending_balance == 0 for r in rows))
        self.assertEqual(rows[0].expenses_paid, 0)


class TestOptimization(unittest.TestCase):

    def test_full_analysis(self):
        analysis = calculate_hsa_optimization(_input(age=58, current_balance=2000))
        self.assertTrue(analysis.catch_up_eligible)
        self.assertEqual(analysis.recommended_contribution, 5150)
        self.assertEqual(len(analysis.projections), 20)
        self.assertEqual(analysis.retirement_balance, int(round(analysis.projections[-1].ending_balance)))
        self.assertEqual(analysis.projections_frame().shape, (20, 7))
        self.assertTrue(analysis.fsa_comparison.hsa_advantages)

    def test_tax_savings_use_max_employee_contribution(self):
        data = _input(coverage='family', employer_contribution=1000)
        analysis = calculate_hsa_optimization(data)
        self.assertEqual(analysis.tax_savings.federal_tax_savings, int(round(7300 * 0.22)))

    def test_balance_kept_when_no_projection(self):
        analysis = calculate_hsa_optimization(_input(current_balance=1234, years_to_retirement=0))
        self.assertEqual(analysis.retirement_balance, 1234)

    def test_deductible_warning(self):
        analysis = calculate_hsa_optimization(_input(deductible=1000))
        self.assertTrue(any(r.startswith('Warning: Your deductible') for r in analysis.recommendations))

    def test_catch_up_countdown(self):
        analysis = calculate_hsa_optimization(_input(age=52))
        self.assertTrue(any(r.startswith('In 3 years') for r in analysis.recommendations))


class TestHelpers(unittest.TestCase):

    def test_hdhp_eligibility(self):
        result = validate_hdhp_eligibility('individual', 1000, 9000)
        self.assertFalse(result['eligible'])
        self.assertEqual(len(result['issues']), 2)
        self.assertTrue(validate_hdhp_eligibility(CoverageType.FAMILY, 3200, 16100)['eligible'])

    def test_paycheck_rounds_up_to_cent(self):
        self.assertEqual(calculate_paycheck_contribution(4150, 26), 159.62)

    def test_paycheck_rejects_zero_periods(self):
        with self.assertRaises(ValueError):
            calculate_paycheck_contribution(4150, 0)

    def test_retirement_costs(self):
        result = estimate_retirement_healthcare_costs(65, 65, 1000, healthcare_inflation=0)
        self.assertEqual(len(result['yearly_estimates']), 21)
        self.assertEqual(result['total_lifetime_cost'], 21000)

    def test_limits_by_year(self):
        self.assertEqual(get_hsa_limits(2023)['individual'], 3850)
        self.assertEqual(get_hsa_limits()['family'], 8300)
        with self.assertRaises(UnknownTaxYearError):
            get_hsa_limits(1999)

    def test_tax_equivalent_yield(self):
        self.assertAlmostEqual(calculate_tax_equivalent_yield(0.075, 0.20, 0.05), 0.1)
        with self.assertRaises(ValueError):
            calculate_tax_equivalent_yield(0.05, 0.7, 0.3)


if __name__ == '__main__':
    unittest.main()
