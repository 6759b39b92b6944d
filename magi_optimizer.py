"""
MAGI Optimizer

Helps a household understand and optimize Modified Adjusted Gross Income
for ACA marketplace subsidies:

1. Current position: FPL percentage, subsidy tier and subsidy figures
2. Breakpoints table: subsidy recomputed at fixed FPL levels
3. Optimal target: bounded search over the FPL breakpoints below current MAGI
4. Reduction strategies: 401(k), IRA, HSA, self-employment, income timing
5. Cliff analysis against both the statutory (400%) and effective (450%) cliffs

The optimal-target search is a discrete scan over a handful of policy-defined
FPL levels, not a continuous optimizer.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import pandas as pd

from constants import (
    AFTER_TAX_INCOME_RETENTION,
    BREAKPOINT_FPL_LEVELS,
    CLIFF_PROBE_OFFSET,
    CLIFF_SAFETY_BUFFER_FPL_SHARE,
    EFFECTIVE_CLIFF_FPL,
    HIGH_SUBSIDY_ZONE_FPL_RANGE,
    INCOME_TIMING_FLEXIBILITY,
    MINIMUM_CLIFF_SAFETY_BUFFER,
    NEAR_CLIFF_FPL_RANGE,
    OPTIMIZATION_FPL_LEVELS,
    SELF_EMPLOYED_HEALTH_INSURANCE_SHARE,
    SELF_EMPLOYMENT_TAX_DEDUCTIBLE_SHARE,
    STATUTORY_CLIFF_FPL,
    SUBSIDY_FLOOR_FPL,
)
from reference_tables import ReferenceTables, get_reference_tables
from rounding import round_half_up
from subsidy_calculator import (
    SubsidyTier,
    calculate_subsidy,
    determine_tier,
    estimate_benchmark_premium,
)

logger = logging.getLogger(__name__)


class FilingStatus(Enum):
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"


@dataclass
class MAGIOptimizerInput:
    """
    Household inputs for MAGI analysis.

    Attributes:
        estimated_magi: Current estimated annual MAGI
        household_size: Tax household size
        state: State of residence (two-letter code)
        age: Age of the primary applicant
        filing_status: Tax filing status
        benchmark_premium: Monthly SLCSP premium; estimated when not given
        current_retirement_contributions: Pre-tax retirement already contributed
        current_hsa_contributions: HSA already contributed
        has_401k_access: Employer 401(k) is available
        has_hdhp: Enrolled in an HSA-qualified high deductible plan
        self_employment_income: Net self-employment income
        hsa_coverage_type: 'individual' or 'family' HSA limit for the HSA lever
    """
    estimated_magi: float
    household_size: int
    state: str
    age: int
    filing_status: FilingStatus = FilingStatus.SINGLE
    benchmark_premium: Optional[float] = None
    current_retirement_contributions: float = 0.0
    current_hsa_contributions: float = 0.0
    has_401k_access: bool = True
    has_hdhp: bool = False
    self_employment_income: float = 0.0
    hsa_coverage_type: str = 'family'

    def __post_init__(self):
        if not isinstance(self.filing_status, FilingStatus):
            self.filing_status = FilingStatus(str(self.filing_status).lower())


@dataclass(frozen=True)
class SubsidyBreakpoint:
    """Subsidy figures tabulated at one FPL level."""
    fpl_percent: int
    income_at_fpl: int
    expected_contribution_percent: float
    monthly_subsidy: int
    annual_subsidy: int


@dataclass(frozen=True)
class CurrentSubsidy:
    """The household's position at its current MAGI."""
    magi: float
    fpl_percent: int
    tier: SubsidyTier
    monthly_subsidy: int
    annual_subsidy: int
    expected_contribution: int
    effective_premium: float


@dataclass(frozen=True)
class OptimalTarget:
    """Best MAGI target found by the breakpoint search."""
    target_magi: int
    target_fpl: int
    monthly_subsidy: int
    annual_subsidy: int
    reduction_needed: int
    additional_annual_subsidy: int


@dataclass(frozen=True)
class MAGIStrategy:
    """
    One MAGI-reduction lever.

    An inapplicable strategy is a normal outcome (applicable=False with a
    reason), not an error.
    """
    name: str
    description: str
    max_reduction: float
    recommended_reduction: float
    priority: int
    applicable: bool = True
    not_applicable_reason: Optional[str] = None
    subsidy_increase: int = 0
    net_benefit: int = 0


@dataclass(frozen=True)
class CliffAnalysis:
    near_cliff: bool
    distance_from_cliff: int     # Dollars below the effective cliff (negative above it)
    cliff_amount: int            # Income at the effective cliff
    subsidy_at_risk: int         # Annual subsidy lost crossing the statutory cliff
    safety_buffer: int


@dataclass
class MAGIAnalysis:
    """Full MAGI analysis result."""
    current: CurrentSubsidy
    breakpoints: List[SubsidyBreakpoint]
    optimal: OptimalTarget
    strategies: List[MAGIStrategy]
    cliff_analysis: CliffAnalysis
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    benchmark_premium: float = 0.0
    fpl: float = 0.0

    def breakpoints_frame(self) -> pd.DataFrame:
        """Breakpoints table for charting, one row per FPL level."""
        return pd.DataFrame(
            [
                {
                    'FPL %': bp.fpl_percent,
                    'Income': bp.income_at_fpl,
                    'Contribution %': bp.expected_contribution_percent,
                    'Monthly Subsidy': bp.monthly_subsidy,
                    'Annual Subsidy': bp.annual_subsidy,
                }
                for bp in self.breakpoints
            ],
            columns=['FPL %', 'Income', 'Contribution %', 'Monthly Subsidy', 'Annual Subsidy'],
        )


# =============================================================================
# ANALYSIS STEPS
# =============================================================================

def calculate_breakpoints(fpl: float, benchmark_premium: float,
                          tables: Optional[ReferenceTables] = None) -> List[SubsidyBreakpoint]:
    """Recompute the subsidy at each reference FPL level."""
    breakpoints = []
    for fpl_percent in BREAKPOINT_FPL_LEVELS:
        income = fpl * fpl_percent / 100
        subsidy = calculate_subsidy(income, fpl, benchmark_premium, tables)
        breakpoints.append(SubsidyBreakpoint(
            fpl_percent=fpl_percent,
            income_at_fpl=round_half_up(income),
            expected_contribution_percent=subsidy.contribution_percent,
            monthly_subsidy=subsidy.monthly_subsidy,
            annual_subsidy=subsidy.annual_subsidy,
        ))
    return breakpoints


def find_optimal_magi(magi: float, fpl: float, benchmark_premium: float,
                      tables: Optional[ReferenceTables] = None) -> OptimalTarget:
    """
    Search the optimization FPL levels below the current MAGI for a better target.

    A candidate qualifies when its subsidy gain exceeds the after-tax value of
    the income given up (75% of the reduction). Among qualifying candidates the
    one with the highest annual subsidy wins; otherwise the current MAGI stands.
    """
    current = calculate_subsidy(magi, fpl, benchmark_premium, tables)

    optimal_magi = magi
    optimal_subsidy = current.annual_subsidy
    optimal_fpl = magi / fpl * 100

    for fpl_percent in OPTIMIZATION_FPL_LEVELS:
        test_magi = fpl * fpl_percent / 100
        if test_magi >= magi:
            continue

        test = calculate_subsidy(test_magi, fpl, benchmark_premium, tables)
        income_reduction = magi - test_magi
        subsidy_increase = test.annual_subsidy - current.annual_subsidy
        net_benefit = subsidy_increase - income_reduction * AFTER_TAX_INCOME_RETENTION

        if net_benefit > 0 and test.annual_subsidy > optimal_subsidy:
            optimal_magi = test_magi
            optimal_subsidy = test.annual_subsidy
            optimal_fpl = fpl_percent

    at_optimal = calculate_subsidy(optimal_magi, fpl, benchmark_premium, tables)
    return OptimalTarget(
        target_magi=round_half_up(optimal_magi),
        target_fpl=round_half_up(optimal_fpl),
        monthly_subsidy=at_optimal.monthly_subsidy,
        annual_subsidy=at_optimal.annual_subsidy,
        reduction_needed=round_half_up(max(0.0, magi - optimal_magi)),
        additional_annual_subsidy=at_optimal.annual_subsidy - current.annual_subsidy,
    )


def _with_subsidy_effect(strategy: MAGIStrategy, magi: float, fpl: float,
                         benchmark_premium: float, current_annual: int,
                         tables: Optional[ReferenceTables]) -> MAGIStrategy:
    if not strategy.applicable or strategy.recommended_reduction <= 0:
        return strategy
    reduced = calculate_subsidy(magi - strategy.recommended_reduction, fpl, benchmark_premium, tables)
    subsidy_increase = reduced.annual_subsidy - current_annual
    net_benefit = subsidy_increase - strategy.recommended_reduction * AFTER_TAX_INCOME_RETENTION
    return MAGIStrategy(
        name=strategy.name,
        description=strategy.description,
        max_reduction=strategy.max_reduction,
        recommended_reduction=strategy.recommended_reduction,
        priority=strategy.priority,
        applicable=strategy.applicable,
        not_applicable_reason=strategy.not_applicable_reason,
        subsidy_increase=int(subsidy_increase),
        net_benefit=round_half_up(net_benefit),
    )


def generate_strategies(data: MAGIOptimizerInput, reduction_needed: float,
                        fpl: Optional[float] = None, benchmark_premium: Optional[float] = None,
                        tables: Optional[ReferenceTables] = None) -> List[MAGIStrategy]:
    """
    Build the MAGI-reduction strategies, sorted by priority (stable).

    Args:
        data: Optimizer input
        reduction_needed: Reduction from the optimal-target search
        fpl: Household FPL; when given with benchmark_premium each applicable
            strategy also gets its subsidy increase and net benefit
        benchmark_premium: Monthly benchmark premium
        tables: Reference tables (defaults to the current year)
    """
    tables = tables or get_reference_tables()
    limits = tables.contribution_limits
    age = data.age
    current_retirement = data.current_retirement_contributions or 0
    current_hsa = data.current_hsa_contributions or 0
    strategies = []

    # Traditional 401(k)
    k401_name = 'Traditional 401(k) Contribution'
    k401_description = 'Increase pre-tax 401(k) contributions to reduce MAGI'
    if data.has_401k_access:
        k401_max = limits.traditional_401k
        if age >= limits.retirement_catch_up_age:
            k401_max += limits.traditional_401k_catch_up
        available = max(0, k401_max - current_retirement)
        strategies.append(MAGIStrategy(
            name=k401_name,
            description=k401_description,
            max_reduction=available,
            recommended_reduction=min(available, reduction_needed),
            priority=1,
        ))
    else:
        strategies.append(MAGIStrategy(
            name=k401_name,
            description=k401_description,
            max_reduction=0,
            recommended_reduction=0,
            priority=1,
            applicable=False,
            not_applicable_reason='No 401(k) access',
        ))

    # Traditional IRA
    ira_max = limits.traditional_ira
    if age >= limits.retirement_catch_up_age:
        ira_max += limits.traditional_ira_catch_up
    strategies.append(MAGIStrategy(
        name='Traditional IRA Contribution',
        description='Contribute to traditional IRA for tax deduction',
        max_reduction=ira_max,
        recommended_reduction=min(ira_max, max(0, reduction_needed - current_retirement)),
        priority=2,
    ))

    # HSA
    hsa_name = 'HSA Contribution'
    hsa_description = 'Max out HSA contributions (requires HDHP)'
    if data.has_hdhp:
        hsa_max = limits.hsa_base_limit(data.hsa_coverage_type)
        if age >= limits.hsa_catch_up_age:
            hsa_max += limits.hsa_catch_up
        hsa_available = max(0, hsa_max - current_hsa)
        # Triple tax advantage ranks it alongside the 401(k)
        strategies.append(MAGIStrategy(
            name=hsa_name,
            description=hsa_description,
            max_reduction=hsa_available,
            recommended_reduction=min(hsa_available, reduction_needed),
            priority=1,
        ))
    else:
        strategies.append(MAGIStrategy(
            name=hsa_name,
            description=hsa_description,
            max_reduction=0,
            recommended_reduction=0,
            priority=3,
            applicable=False,
            not_applicable_reason='Requires High Deductible Health Plan (HDHP)',
        ))

    # Self-employment deductions
    se_income = data.self_employment_income or 0
    if se_income > 0:
        se_deduction = round_half_up(se_income * SELF_EMPLOYED_HEALTH_INSURANCE_SHARE
                                     + se_income * SELF_EMPLOYMENT_TAX_DEDUCTIBLE_SHARE)
        strategies.append(MAGIStrategy(
            name='Self-Employment Deductions',
            description='Deduct health insurance premiums and half of SE tax',
            max_reduction=se_deduction,
            recommended_reduction=se_deduction,
            priority=2,
        ))

    # Income timing
    timing_max = round_half_up(data.estimated_magi * INCOME_TIMING_FLEXIBILITY)
    strategies.append(MAGIStrategy(
        name='Income Timing',
        description='Defer bonuses, capital gains, or Roth conversions to next year',
        max_reduction=timing_max,
        recommended_reduction=min(timing_max, reduction_needed),
        priority=3,
    ))

    if fpl is not None and benchmark_premium is not None:
        current_annual = calculate_subsidy(data.estimated_magi, fpl, benchmark_premium, tables).annual_subsidy
        strategies = [
            _with_subsidy_effect(s, data.estimated_magi, fpl, benchmark_premium, current_annual, tables)
            for s in strategies
        ]

    # sorted() is stable, so equal priorities keep insertion order
    return sorted(strategies, key=lambda s: s.priority)


def analyze_cliff_risk(magi: float, fpl: float, benchmark_premium: float,
                       tables: Optional[ReferenceTables] = None) -> CliffAnalysis:
    """
    Measure exposure to the subsidy cliff.

    Distance is measured to the effective cliff (450% FPL); the subsidy at
    risk compares incomes just below and just above the statutory 400% line.
    """
    fpl_percent = magi / fpl * 100
    statutory_cliff = fpl * STATUTORY_CLIFF_FPL / 100
    effective_cliff = fpl * EFFECTIVE_CLIFF_FPL / 100

    just_below = calculate_subsidy(statutory_cliff - CLIFF_PROBE_OFFSET, fpl, benchmark_premium, tables)
    just_above = calculate_subsidy(statutory_cliff + CLIFF_PROBE_OFFSET, fpl, benchmark_premium, tables)

    low, high = NEAR_CLIFF_FPL_RANGE
    return CliffAnalysis(
        near_cliff=low <= fpl_percent <= high,
        distance_from_cliff=round_half_up(effective_cliff - magi),
        cliff_amount=round_half_up(effective_cliff),
        subsidy_at_risk=just_below.annual_subsidy - just_above.annual_subsidy,
        safety_buffer=round_half_up(max(MINIMUM_CLIFF_SAFETY_BUFFER, fpl * CLIFF_SAFETY_BUFFER_FPL_SHARE)),
    )


def generate_warnings(data: MAGIOptimizerInput, fpl_percent: float, tier: SubsidyTier,
                      tables: Optional[ReferenceTables] = None) -> List[str]:
    tables = tables or get_reference_tables()
    warnings = []

    if tier == SubsidyTier.MEDICAID:
        warnings.append(
            "Your income may qualify you for Medicaid instead of marketplace subsidies. "
            "Check your state's Medicaid program."
        )

    low, high = NEAR_CLIFF_FPL_RANGE
    if low <= fpl_percent <= high:
        warnings.append(
            "CAUTION: You are near the subsidy cliff. Small income increases could "
            "significantly reduce your subsidy."
        )

    if fpl_percent < SUBSIDY_FLOOR_FPL and not tables.is_medicaid_expansion_state(data.state):
        warnings.append(
            'Your state has not expanded Medicaid. You may fall into the "coverage gap" '
            'with limited options.'
        )

    if data.filing_status == FilingStatus.MARRIED_SEPARATE:
        warnings.append(
            "Filing married separately typically disqualifies you from premium tax credits "
            "except in cases of domestic abuse or spousal abandonment."
        )

    warnings.append(
        "MAGI calculations are estimates. Consult a tax professional for your specific situation."
    )
    return warnings


def generate_recommendations(data: MAGIOptimizerInput, optimal: OptimalTarget,
                             strategies: List[MAGIStrategy], fpl_percent: float,
                             tables: Optional[ReferenceTables] = None) -> List[str]:
    tables = tables or get_reference_tables()
    limits = tables.contribution_limits
    recommendations = []

    if optimal.reduction_needed > 0 and optimal.additional_annual_subsidy > 1000:
        recommendations.append(
            f"Reducing your MAGI by ${optimal.reduction_needed:,} could increase your annual "
            f"subsidy by ${optimal.additional_annual_subsidy:,}."
        )

    applicable = [s for s in strategies if s.applicable and s.max_reduction > 0]
    if applicable:
        top = applicable[0]
        recommendations.append(
            f"Consider {top.name.lower()}: Up to ${top.max_reduction:,.0f} reduction available."
        )

    if data.has_hdhp and (data.current_hsa_contributions or 0) < limits.hsa_individual:
        recommendations.append(
            "Maximize HSA contributions for triple tax advantage: tax deduction now, "
            "tax-free growth, and tax-free withdrawals for medical expenses."
        )

    if data.has_401k_access and (data.current_retirement_contributions or 0) < limits.traditional_401k:
        recommendations.append(
            "Increase traditional 401(k) contributions to reduce MAGI while building retirement savings."
        )

    low, high = HIGH_SUBSIDY_ZONE_FPL_RANGE
    if low <= fpl_percent <= high:
        recommendations.append(
            "You're in a high-subsidy zone. Consider strategies to keep income below "
            "400% FPL to maximize benefits."
        )

    return recommendations


def analyze_magi(data: MAGIOptimizerInput, tables: Optional[ReferenceTables] = None) -> MAGIAnalysis:
    """
    Analyze MAGI and provide optimization strategies.

    Args:
        data: Household income and account inputs
        tables: Reference tables (defaults to the current year)

    Returns:
        MAGIAnalysis with current position, breakpoints, optimal target,
        strategies, cliff analysis, warnings and recommendations

    Raises:
        UnknownStateError: If data.state is not in the reference tables
    """
    tables = tables or get_reference_tables()
    tables.require_state(data.state)
    fpl = tables.fpl_for_household(data.household_size)
    magi = data.estimated_magi
    fpl_percent = magi / fpl * 100

    benchmark = data.benchmark_premium
    if not benchmark:
        benchmark = estimate_benchmark_premium(data.age, data.state, tables)
        logger.debug(f"No benchmark premium given, estimated ${benchmark}/mo")

    current_subsidy = calculate_subsidy(magi, fpl, benchmark, tables)
    tier = determine_tier(fpl_percent, data.state, tables)

    optimal = find_optimal_magi(magi, fpl, benchmark, tables)
    strategies = generate_strategies(data, optimal.reduction_needed, fpl, benchmark, tables)

    logger.debug(
        f"MAGI ${magi:,.0f} = {fpl_percent:.1f}% FPL (size {data.household_size}), "
        f"tier {tier.value}, target {optimal.target_fpl}% FPL"
    )

    return MAGIAnalysis(
        current=CurrentSubsidy(
            magi=magi,
            fpl_percent=round_half_up(fpl_percent),
            tier=tier,
            monthly_subsidy=current_subsidy.monthly_subsidy,
            annual_subsidy=current_subsidy.annual_subsidy,
            expected_contribution=current_subsidy.expected_contribution,
            effective_premium=max(0, benchmark - current_subsidy.monthly_subsidy),
        ),
        breakpoints=calculate_breakpoints(fpl, benchmark, tables),
        optimal=optimal,
        strategies=strategies,
        cliff_analysis=analyze_cliff_risk(magi, fpl, benchmark, tables),
        warnings=generate_warnings(data, fpl_percent, tier, tables),
        recommendations=generate_recommendations(data, optimal, strategies, fpl_percent, tables),
        benchmark_premium=benchmark,
        fpl=fpl,
    )
