"""
ACA Premium Tax Credit (Subsidy) Calculator

Computes marketplace subsidies from household MAGI for the MAGI optimizer.

Key concepts:
- FPL (Federal Poverty Level): Household-size-indexed income threshold
- Benchmark premium: Second Lowest Cost Silver Plan (SLCSP) monthly premium
- Expected contribution: Share of income the household pays toward the
  benchmark, interpolated within the contribution brackets
- Subsidy = max(0, benchmark - MAGI x contribution% / 12)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from constants import (
    BENCHMARK_AGE_FACTORS,
    BENCHMARK_BASE_PREMIUM,
    BENCHMARK_CHEAP_FACTOR,
    BENCHMARK_CHEAP_STATES,
    BENCHMARK_EXPENSIVE_FACTOR,
    BENCHMARK_EXPENSIVE_STATES,
    EFFECTIVE_CLIFF_FPL,
    MEDICAID_EXPANSION_FPL,
    STATUTORY_CLIFF_FPL,
    SUBSIDY_FLOOR_FPL,
)
from reference_tables import ReferenceTables, get_reference_tables
from rounding import round_half_up


class SubsidyTier(Enum):
    """Where a household's MAGI falls on the subsidy schedule."""
    MEDICAID = "medicaid"
    SUBSIDY = "subsidy"
    CLIFF = "cliff"
    ABOVE_CLIFF = "above_cliff"


@dataclass(frozen=True)
class SubsidyResult:
    """Subsidy figures for one MAGI."""
    monthly_subsidy: int
    annual_subsidy: int
    expected_contribution: int      # Annual
    contribution_percent: float     # Percent of income, 2 decimals


def get_fpl_for_household(household_size: int, tables: Optional[ReferenceTables] = None) -> float:
    """
    Get Federal Poverty Level for a given household size.

    Args:
        household_size: Number of people in household (sizes below 1 count as 1)
        tables: Reference tables (defaults to the current year)

    Returns:
        Annual FPL in dollars
    """
    tables = tables or get_reference_tables()
    return tables.fpl_for_household(household_size)


def get_contribution_percentage(fpl_percent: float, tables: Optional[ReferenceTables] = None) -> float:
    """
    Get the expected contribution percentage of income.

    Uses linear interpolation within FPL brackets; flat above the top bracket.

    Args:
        fpl_percent: Household income as percentage of FPL (e.g., 200 for 200% FPL)
        tables: Reference tables (defaults to the current year)

    Returns:
        Contribution percentage (0-8.5)
    """
    tables = tables or get_reference_tables()
    return tables.contribution_bracket_for(fpl_percent).percent_at(fpl_percent)


def calculate_subsidy(magi: float, fpl: float, benchmark_premium: float,
                      tables: Optional[ReferenceTables] = None) -> SubsidyResult:
    """
    Calculate the premium tax credit for a MAGI.

    Args:
        magi: Annual modified adjusted gross income
        fpl: Annual FPL for the household
        benchmark_premium: Monthly benchmark (SLCSP) premium
        tables: Reference tables (defaults to the current year)

    Returns:
        SubsidyResult; all zeros below 100% FPL
    """
    fpl_percent = (magi / fpl) * 100

    # Below 100% FPL there is no marketplace subsidy
    if fpl_percent < SUBSIDY_FLOOR_FPL:
        return SubsidyResult(0, 0, 0, 0.0)

    contribution_pct = get_contribution_percentage(fpl_percent, tables)

    monthly_contribution = (magi * (contribution_pct / 100)) / 12
    monthly_subsidy = max(0.0, benchmark_premium - monthly_contribution)

    return SubsidyResult(
        monthly_subsidy=round_half_up(monthly_subsidy),
        annual_subsidy=round_half_up(monthly_subsidy * 12),
        expected_contribution=round_half_up(monthly_contribution * 12),
        contribution_percent=round(contribution_pct, 2),
    )


def determine_tier(fpl_percent: float, state: str, tables: Optional[ReferenceTables] = None) -> SubsidyTier:
    """
    Classify a household's position on the subsidy schedule.

    Below 100% FPL a non-expansion state still reports SUBSIDY; the coverage
    gap is surfaced as a warning by the optimizer.
    """
    tables = tables or get_reference_tables()
    expansion = tables.is_medicaid_expansion_state(state)

    if fpl_percent < SUBSIDY_FLOOR_FPL:
        return SubsidyTier.MEDICAID if expansion else SubsidyTier.SUBSIDY
    if fpl_percent < MEDICAID_EXPANSION_FPL and expansion:
        return SubsidyTier.MEDICAID
    if fpl_percent <= STATUTORY_CLIFF_FPL:
        return SubsidyTier.SUBSIDY
    if fpl_percent <= EFFECTIVE_CLIFF_FPL:
        return SubsidyTier.CLIFF
    return SubsidyTier.ABOVE_CLIFF


def estimate_benchmark_premium(age: float, state: str,
                               tables: Optional[ReferenceTables] = None) -> int:
    """
    Rough monthly benchmark premium when no SLCSP quote is available.

    450/month for a 40-year-old, scaled by an age band and a state factor.

    Raises:
        UnknownStateError: If the state code is not in the reference tables
    """
    tables = tables or get_reference_tables()
    code = tables.require_state(state)

    age_factor = BENCHMARK_AGE_FACTORS[-1][1]
    for max_age, factor in BENCHMARK_AGE_FACTORS:
        if age <= max_age:
            age_factor = factor
            break

    if code in BENCHMARK_EXPENSIVE_STATES:
        state_factor = BENCHMARK_EXPENSIVE_FACTOR
    elif code in BENCHMARK_CHEAP_STATES:
        state_factor = BENCHMARK_CHEAP_FACTOR
    else:
        state_factor = 1.0

    return round_half_up(BENCHMARK_BASE_PREMIUM * age_factor * state_factor)


def calculate_fpl_percent(magi: float, household_size: int,
                          tables: Optional[ReferenceTables] = None) -> int:
    """MAGI as a whole-number percentage of FPL."""
    return round_half_up(magi / get_fpl_for_household(household_size, tables) * 100)


def get_income_at_fpl(fpl_percent: float, household_size: int,
                      tables: Optional[ReferenceTables] = None) -> int:
    """Whole-dollar income at a given FPL percentage."""
    return round_half_up(get_fpl_for_household(household_size, tables) * fpl_percent / 100)


def is_medicaid_expansion_state(state: str, tables: Optional[ReferenceTables] = None) -> bool:
    tables = tables or get_reference_tables()
    return tables.is_medicaid_expansion_state(state)


def quick_subsidy_calculator(magi: float, household_size: int, benchmark_premium: float,
                             tables: Optional[ReferenceTables] = None) -> Dict[str, Any]:
    """
    One-shot subsidy estimate for a MAGI.

    Returns:
        Dict with:
        - fpl_percent: Income as whole-number % of FPL
        - monthly_subsidy / annual_subsidy
        - expected_monthly_contribution
        - effective_monthly_premium: Benchmark minus subsidy (never negative)
    """
    fpl = get_fpl_for_household(household_size, tables)
    subsidy = calculate_subsidy(magi, fpl, benchmark_premium, tables)

    return {
        'fpl_percent': round_half_up(magi / fpl * 100),
        'monthly_subsidy': subsidy.monthly_subsidy,
        'annual_subsidy': subsidy.annual_subsidy,
        'expected_monthly_contribution': round_half_up(subsidy.expected_contribution / 12),
        'effective_monthly_premium': max(0, benchmark_premium - subsidy.monthly_subsidy),
    }
