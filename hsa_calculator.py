"""
HSA Contribution Calculator

Optimizes Health Savings Account contributions:
- Contribution limits (base + age-55 catch-up, less employer money)
- Tax savings across federal, state and FICA
- Recommended contribution from an affordability heuristic
- Year-by-year balance projection under investment return and
  healthcare inflation

Projection order per year: contributions and growth are both computed from
the beginning balance, then expenses are paid from the resulting total.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from constants import (
    ASSUMED_LIFE_EXPECTANCY,
    FICA_RATE,
    HSA_AFFORDABLE_INCOME_SHARE,
    HSA_DEFAULT_EXPECTED_RETURN,
    HSA_DEFAULT_HEALTHCARE_INFLATION,
    HSA_DEFAULT_PROJECTION_YEARS,
    HSA_HIGH_BRACKET_RATE,
    HSA_INVESTING_BALANCE_THRESHOLD,
    HSA_MAXIMIZE_INCOME_THRESHOLD,
    RETIREMENT_CATCH_UP_AGE,
)
from reference_tables import ReferenceTables, get_reference_tables
from rounding import round_half_up

logger = logging.getLogger(__name__)


class CoverageType(Enum):
    INDIVIDUAL = "individual"
    FAMILY = "family"


@dataclass
class HSAInput:
    """
    HSA optimizer inputs.

    Optional fields left as None take the documented defaults; explicit zeros
    are honoured (a 0% return really means no growth).
    """
    coverage_type: CoverageType
    age: int
    annual_income: float
    federal_tax_rate: float            # Decimal, e.g. 0.22
    monthly_premium: float
    deductible: float
    current_balance: Optional[float] = None
    state_tax_rate: Optional[float] = None
    employer_contribution: Optional[float] = None
    expected_expenses: Optional[float] = None
    years_to_retirement: Optional[int] = None
    expected_return: Optional[float] = None
    healthcare_inflation: Optional[float] = None

    def __post_init__(self):
        if not isinstance(self.coverage_type, CoverageType):
            self.coverage_type = CoverageType(str(self.coverage_type).lower())

    @property
    def balance(self) -> float:
        return 0.0 if self.current_balance is None else self.current_balance

    @property
    def state_rate(self) -> float:
        return 0.0 if self.state_tax_rate is None else self.state_tax_rate

    @property
    def employer_amount(self) -> float:
        return 0.0 if self.employer_contribution is None else self.employer_contribution

    @property
    def expenses(self) -> float:
        return 0.0 if self.expected_expenses is None else self.expected_expenses

    @property
    def projection_years(self) -> int:
        if self.years_to_retirement is None:
            return HSA_DEFAULT_PROJECTION_YEARS
        return self.years_to_retirement

    @property
    def return_rate(self) -> float:
        if self.expected_return is None:
            return HSA_DEFAULT_EXPECTED_RETURN
        return self.expected_return

    @property
    def inflation_rate(self) -> float:
        if self.healthcare_inflation is None:
            return HSA_DEFAULT_HEALTHCARE_INFLATION
        return self.healthcare_inflation


@dataclass(frozen=True)
class HSAContributionLimits:
    base_limit: float
    catch_up_contribution: float
    total_limit: float
    employer_contribution: float
    max_employee_contribution: float


@dataclass(frozen=True)
class HSATaxSavings:
    """Annual tax savings; total is the sum of the rounded components."""
    federal_tax_savings: int
    state_tax_savings: int
    fica_savings: int
    total_annual_savings: int
    effective_cost_per_dollar: float


@dataclass(frozen=True)
class HSAProjection:
    year: int
    age: int
    beginning_balance: float
    contribution: float
    investment_growth: float
    expenses_paid: float
    ending_balance: float


@dataclass(frozen=True)
class FSAComparison:
    hsa_advantages: tuple
    fsa_advantages: tuple


FSA_COMPARISON = FSAComparison(
    hsa_advantages=(
        'Funds roll over year to year (no "use it or lose it")',
        'Account stays with you if you change jobs',
        'Can be invested for long-term growth',
        'Triple tax advantage: deduction, growth, and withdrawals',
        'Can be used for Medicare premiums after 65',
        'Catch-up contributions available at age 55',
    ),
    fsa_advantages=(
        'Available with any health plan (not just HDHP)',
        'Full amount available on January 1st',
        'Lower deductible plans often available',
        'Good for predictable, high medical expenses',
    ),
)


@dataclass
class HSAAnalysis:
    """Full HSA optimization result."""
    limits: HSAContributionLimits
    recommended_contribution: int
    tax_savings: HSATaxSavings
    catch_up_eligible: bool
    projections: List[HSAProjection]
    retirement_balance: int
    recommendations: List[str] = field(default_factory=list)
    fsa_comparison: FSAComparison = FSA_COMPARISON

    def projections_frame(self) -> pd.DataFrame:
        """Year-by-year projection as a DataFrame (one row per year)."""
        columns = ['year', 'age', 'beginning_balance', 'contribution',
                   'investment_growth', 'expenses_paid', 'ending_balance']
        return pd.DataFrame(
            [[getattr(p, c) for c in columns] for p in self.projections],
            columns=columns,
        )


# =============================================================================
# CALCULATIONS
# =============================================================================

def calculate_contribution_limits(data: HSAInput,
                                  tables: Optional[ReferenceTables] = None) -> HSAContributionLimits:
    """Base limit plus catch-up, and what is left for the employee after employer money."""
    tables = tables or get_reference_tables()
    limits = tables.contribution_limits

    base_limit = limits.hsa_base_limit(data.coverage_type.value)
    catch_up = limits.hsa_catch_up if data.age >= limits.hsa_catch_up_age else 0
    total_limit = base_limit + catch_up
    employer = data.employer_amount

    return HSAContributionLimits(
        base_limit=base_limit,
        catch_up_contribution=catch_up,
        total_limit=total_limit,
        employer_contribution=employer,
        max_employee_contribution=max(0, total_limit - employer),
    )


def calculate_tax_savings(data: HSAInput, contribution: float) -> HSATaxSavings:
    """
    Tax savings on an employee contribution made through payroll.

    Each component is rounded on its own and the total is the sum of the
    rounded components, so the displayed breakdown always adds up.
    """
    federal = round_half_up(contribution * data.federal_tax_rate)
    state = round_half_up(contribution * data.state_rate)
    fica = round_half_up(contribution * FICA_RATE)
    total = federal + state + fica

    if contribution > 0:
        effective_cost = round(1 - total / contribution, 2)
    else:
        effective_cost = 1.0

    return HSATaxSavings(
        federal_tax_savings=federal,
        state_tax_savings=state,
        fica_savings=fica,
        total_annual_savings=total,
        effective_cost_per_dollar=effective_cost,
    )


def calculate_recommended_contribution(data: HSAInput, limits: HSAContributionLimits) -> int:
    """
    Employee contribution recommended by the affordability heuristic.

    If 10% of income covers the full limit, recommend the maximum employee
    contribution. Otherwise target the greater of expected expenses and the
    employer contribution, capped at the affordable amount, and recommend
    the employee's share of that target.
    """
    affordable = data.annual_income * HSA_AFFORDABLE_INCOME_SHARE

    if affordable >= limits.total_limit:
        return round_half_up(limits.max_employee_contribution)

    target = min(max(data.expenses, limits.employer_contribution), affordable)
    recommended = min(limits.max_employee_contribution, target - limits.employer_contribution)
    return round_half_up(max(0, recommended))


def generate_projections(data: HSAInput, annual_contribution: float) -> List[HSAProjection]:
    """
    Project the HSA balance year by year.

    Each row starts from the previous row's ending balance. Year 1 uses the
    expected expenses as given; later years inflate them.
    """
    projections = []
    balance = round(data.balance, 2)
    expenses = data.expenses
    total_contribution = annual_contribution + data.employer_amount

    for year in range(1, data.projection_years + 1):
        beginning = balance
        growth = beginning * data.return_rate

        if year > 1:
            expenses = expenses * (1 + data.inflation_rate)

        available = beginning + total_contribution + growth
        paid = min(available, expenses)
        ending = round(available - paid, 2)

        projections.append(HSAProjection(
            year=year,
            age=data.age + year,
            beginning_balance=round(beginning, 2),
            contribution=round(total_contribution, 2),
            investment_growth=round(growth, 2),
            expenses_paid=round(paid, 2),
            ending_balance=ending,
        ))
        balance = ending

    return projections


def generate_recommendations(data: HSAInput, limits: HSAContributionLimits,
                             tax_savings: HSATaxSavings,
                             tables: Optional[ReferenceTables] = None) -> List[str]:
    tables = tables or get_reference_tables()
    contribution_limits = tables.contribution_limits
    catch_up_age = contribution_limits.hsa_catch_up_age
    catch_up = contribution_limits.hsa_catch_up
    min_deductible = tables.hdhp_requirements.min_deductible[data.coverage_type.value]
    recommendations = []

    if data.annual_income >= HSA_MAXIMIZE_INCOME_THRESHOLD:
        recommendations.append(
            f"Maximize your HSA contribution to ${limits.total_limit:,.0f}/year to get the full "
            f"tax benefit of ${tax_savings.total_annual_savings:,} in annual savings."
        )

    if data.age >= catch_up_age:
        recommendations.append(
            f"You're eligible for the ${catch_up:,.0f} catch-up contribution. "
            f"Take advantage of this additional tax-advantaged savings."
        )
    elif data.age >= RETIREMENT_CATCH_UP_AGE:
        recommendations.append(
            f"In {catch_up_age - data.age} years, you'll be eligible for an additional "
            f"${catch_up:,.0f} catch-up contribution."
        )

    if data.balance < HSA_INVESTING_BALANCE_THRESHOLD:
        recommendations.append(
            f"Consider building your HSA balance to at least ${HSA_INVESTING_BALANCE_THRESHOLD:,} "
            f"before investing. Keep some cash for near-term expenses."
        )
    else:
        recommendations.append(
            "With a healthy balance, consider investing HSA funds for long-term growth. "
            "HSA investments grow tax-free."
        )

    if data.deductible < min_deductible:
        recommendations.append(
            f"Warning: Your deductible (${data.deductible:,.0f}) is below the HDHP minimum "
            f"(${min_deductible:,.0f}). Verify your plan qualifies."
        )

    if data.federal_tax_rate >= HSA_HIGH_BRACKET_RATE:
        recommendations.append(
            "At your tax bracket, HSA contributions provide significant tax savings. "
            "Consider maximizing contributions before other investment accounts."
        )

    if data.state_rate == 0:
        recommendations.append(
            "Note: Some states (CA, NJ) do not recognize HSA tax benefits. Check your state tax laws."
        )

    if data.expenses < limits.total_limit:
        recommendations.append(
            "Consider paying medical expenses out-of-pocket and letting your HSA grow tax-free. "
            "Save receipts to reimburse yourself years later."
        )

    return recommendations


def calculate_hsa_optimization(data: HSAInput, tables: Optional[ReferenceTables] = None) -> HSAAnalysis:
    """
    Calculate HSA contribution optimization.

    Args:
        data: Account holder, plan and assumption inputs
        tables: Reference tables (defaults to the current year)

    Returns:
        HSAAnalysis with limits, tax savings, recommended contribution,
        projections and recommendations
    """
    tables = tables or get_reference_tables()
    limits = calculate_contribution_limits(data, tables)
    tax_savings = calculate_tax_savings(data, limits.max_employee_contribution)
    recommended = calculate_recommended_contribution(data, limits)
    projections = generate_projections(data, recommended)

    if projections:
        retirement_balance = projections[-1].ending_balance
    else:
        retirement_balance = data.balance

    logger.debug(
        f"HSA {data.coverage_type.value} age {data.age}: limit ${limits.total_limit:,.0f}, "
        f"recommended ${recommended:,}, {len(projections)} projection years"
    )

    return HSAAnalysis(
        limits=limits,
        recommended_contribution=recommended,
        tax_savings=tax_savings,
        catch_up_eligible=data.age >= tables.contribution_limits.hsa_catch_up_age,
        projections=projections,
        retirement_balance=round_half_up(retirement_balance),
        recommendations=generate_recommendations(data, limits, tax_savings, tables),
    )


optimize = calculate_hsa_optimization


# =============================================================================
# HELPERS
# =============================================================================

def validate_hdhp_eligibility(coverage_type, deductible: float, out_of_pocket_max: float,
                              tables: Optional[ReferenceTables] = None) -> Dict[str, Any]:
    """
    Check a plan against the HDHP deductible and out-of-pocket rules.

    Returns:
        Dict with 'eligible' (bool) and 'issues' (list of messages)
    """
    tables = tables or get_reference_tables()
    coverage = CoverageType(coverage_type).value if not isinstance(coverage_type, CoverageType) \
        else coverage_type.value
    min_deductible = tables.hdhp_requirements.min_deductible[coverage]
    max_oop = tables.hdhp_requirements.max_out_of_pocket[coverage]
    issues = []

    if deductible < min_deductible:
        issues.append(f"Deductible (${deductible:,.0f}) is below the HDHP minimum (${min_deductible:,.0f})")

    if out_of_pocket_max > max_oop:
        issues.append(f"Out-of-pocket maximum (${out_of_pocket_max:,.0f}) exceeds the HDHP limit (${max_oop:,.0f})")

    return {'eligible': len(issues) == 0, 'issues': issues}


def calculate_paycheck_contribution(annual_contribution: float, pay_periods_per_year: int) -> float:
    """Per-paycheck amount, rounded up to the cent so the annual total is reached."""
    if pay_periods_per_year <= 0:
        raise ValueError(f"pay_periods_per_year must be positive, got {pay_periods_per_year}")
    return math.ceil(annual_contribution / pay_periods_per_year * 100) / 100


def estimate_retirement_healthcare_costs(current_age: int, retirement_age: int,
                                         current_annual_costs: float,
                                         healthcare_inflation: float = HSA_DEFAULT_HEALTHCARE_INFLATION
                                         ) -> Dict[str, Any]:
    """
    Inflate today's annual healthcare costs across retirement (to age 85).

    Returns:
        Dict with 'yearly_estimates' (list of {'age', 'estimated_cost'}) and
        'total_lifetime_cost'
    """
    yearly = []
    total = 0.0
    for age in range(retirement_age, ASSUMED_LIFE_EXPECTANCY + 1):
        cost = current_annual_costs * (1 + healthcare_inflation) ** (age - current_age)
        yearly.append({'age': age, 'estimated_cost': round_half_up(cost)})
        total += cost

    return {'yearly_estimates': yearly, 'total_lifetime_cost': round_half_up(total)}


def get_hsa_limits(year: Optional[int] = None) -> Dict[str, float]:
    """
    HSA limits for a tax year.

    Raises:
        UnknownTaxYearError: If no reference tables exist for the year
    """
    tables = get_reference_tables(year) if year is not None else get_reference_tables()
    limits = tables.contribution_limits
    return {
        'individual': limits.hsa_individual,
        'family': limits.hsa_family,
        'catch_up': limits.hsa_catch_up,
    }


def calculate_tax_equivalent_yield(hsa_yield: float, federal_tax_rate: float,
                                   state_tax_rate: float = 0.0) -> float:
    """Taxable yield needed to match a tax-free HSA yield."""
    combined = federal_tax_rate + state_tax_rate
    if combined >= 1:
        raise ValueError(f"Combined tax rate must be below 100%, got {combined:.0%}")
    return hsa_yield / (1 - combined)
