"""
Reference Tables - Year-Versioned Lookup Data

Bundles the raw figures in constants.py into one immutable object per tax
year. Every calculator takes a ReferenceTables argument (defaulting to the
current year), so multi-year comparisons and historical tests only need a
different tables object, never a patched global.

Lookups that would otherwise corrupt cost or subsidy math fail fast:
- Unknown state codes raise UnknownStateError
- Unknown tax years raise UnknownTaxYearError
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Mapping, Tuple

from constants import (
    ACA_CONTRIBUTION_BRACKETS_ENHANCED,
    CONTRIBUTION_LIMITS_2023,
    CONTRIBUTION_LIMITS_2024,
    DEFAULT_TAX_YEAR,
    FPL_2023_BY_HOUSEHOLD_SIZE,
    FPL_2023_PER_ADDITIONAL_PERSON,
    FPL_2024_BY_HOUSEHOLD_SIZE,
    FPL_2024_PER_ADDITIONAL_PERSON,
    HDHP_REQUIREMENTS_2023,
    HDHP_REQUIREMENTS_2024,
    HSA_CATCH_UP_AGE,
    MEDICAID_EXPANSION_STATES,
    RETIREMENT_CATCH_UP_AGE,
    STATE_COST_INDEX,
)


class UnknownStateError(ValueError):
    """Raised when a state code has no entry in the reference tables."""


class UnknownTaxYearError(ValueError):
    """Raised when no reference tables exist for the requested year."""


@dataclass(frozen=True)
class ContributionBracket:
    """One segment of the ACA expected-contribution schedule."""
    min_fpl: float
    max_fpl: float
    min_percent: float
    max_percent: float

    def percent_at(self, fpl_percent: float) -> float:
        """Linearly interpolate the contribution percentage inside this bracket."""
        if self.max_fpl == float('inf') or self.max_fpl == self.min_fpl:
            return self.min_percent
        position = (fpl_percent - self.min_fpl) / (self.max_fpl - self.min_fpl)
        return self.min_percent + position * (self.max_percent - self.min_percent)


@dataclass(frozen=True)
class ContributionLimits:
    """Annual limits for the tax-advantaged accounts used as MAGI levers."""
    traditional_401k: float
    traditional_401k_catch_up: float
    traditional_ira: float
    traditional_ira_catch_up: float
    hsa_individual: float
    hsa_family: float
    hsa_catch_up: float
    retirement_catch_up_age: int = RETIREMENT_CATCH_UP_AGE
    hsa_catch_up_age: int = HSA_CATCH_UP_AGE

    def hsa_base_limit(self, coverage_type: str) -> float:
        return self.hsa_family if coverage_type == 'family' else self.hsa_individual


@dataclass(frozen=True)
class HDHPRequirements:
    """Minimum deductible and maximum out-of-pocket for HSA-qualified plans."""
    min_deductible: Mapping[str, float]
    max_out_of_pocket: Mapping[str, float]


@dataclass(frozen=True)
class ReferenceTables:
    """
    Immutable reference data for one tax year.

    Attributes:
        year: Coverage/tax year these tables apply to
        fpl_by_household_size: FPL in dollars for household sizes 1-8
        fpl_per_additional_person: Increment for each person beyond 8
        contribution_brackets: Ordered ACA expected-contribution schedule
        contribution_limits: 401(k)/IRA/HSA limits and catch-ups
        hdhp_requirements: HDHP qualification thresholds
        medicaid_expansion_states: State codes that expanded Medicaid
        state_cost_multipliers: Healthcare cost index by state code
    """
    year: int
    fpl_by_household_size: Mapping[int, float]
    fpl_per_additional_person: float
    contribution_brackets: Tuple[ContributionBracket, ...]
    contribution_limits: ContributionLimits
    hdhp_requirements: HDHPRequirements
    medicaid_expansion_states: FrozenSet[str] = field(default_factory=frozenset)
    state_cost_multipliers: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def fpl_for_household(self, household_size: int) -> float:
        """
        Get Federal Poverty Level for a given household size.

        Sizes below 1 are treated as 1; sizes above 8 extend the table by the
        per-additional-person increment.
        """
        household_size = max(1, int(household_size))
        largest = max(self.fpl_by_household_size)
        if household_size <= largest:
            return self.fpl_by_household_size[household_size]
        additional_people = household_size - largest
        return self.fpl_by_household_size[largest] + additional_people * self.fpl_per_additional_person

    def require_state(self, state: str) -> str:
        """
        Normalize a state code, failing fast when the tables do not know it.

        Raises:
            UnknownStateError: If the code has no entry in the state cost index
        """
        code = str(state).strip().upper()
        if code not in self.state_cost_multipliers:
            raise UnknownStateError(
                f"No cost index for state code '{state}' in {self.year} reference tables"
            )
        return code

    def is_medicaid_expansion_state(self, state: str) -> bool:
        return self.require_state(state) in self.medicaid_expansion_states

    def state_cost_multiplier(self, state: str) -> float:
        return self.state_cost_multipliers[self.require_state(state)]

    def contribution_bracket_for(self, fpl_percent: float) -> ContributionBracket:
        """Return the bracket containing fpl_percent (upper bounds inclusive)."""
        for bracket in self.contribution_brackets:
            if fpl_percent <= bracket.max_fpl:
                return bracket
        return self.contribution_brackets[-1]


def _build_brackets(rows) -> Tuple[ContributionBracket, ...]:
    brackets = []
    lower = 100.0
    for max_fpl, min_pct, max_pct in rows:
        brackets.append(ContributionBracket(lower, float(max_fpl), min_pct, max_pct))
        lower = float(max_fpl)
    return tuple(brackets)


def _build_tables(year: int, fpl: Dict[int, float], per_additional: float,
                  limits: Dict[str, float], hdhp: Dict[str, Dict[str, float]]) -> ReferenceTables:
    return ReferenceTables(
        year=year,
        fpl_by_household_size=MappingProxyType(dict(fpl)),
        fpl_per_additional_person=per_additional,
        contribution_brackets=_build_brackets(ACA_CONTRIBUTION_BRACKETS_ENHANCED),
        contribution_limits=ContributionLimits(**limits),
        hdhp_requirements=HDHPRequirements(
            min_deductible=MappingProxyType(dict(hdhp['min_deductible'])),
            max_out_of_pocket=MappingProxyType(dict(hdhp['max_out_of_pocket'])),
        ),
        medicaid_expansion_states=frozenset(MEDICAID_EXPANSION_STATES),
        state_cost_multipliers=MappingProxyType(dict(STATE_COST_INDEX)),
    )


_TABLES_BY_YEAR = MappingProxyType({
    2024: _build_tables(2024, FPL_2024_BY_HOUSEHOLD_SIZE, FPL_2024_PER_ADDITIONAL_PERSON,
                        CONTRIBUTION_LIMITS_2024, HDHP_REQUIREMENTS_2024),
    2023: _build_tables(2023, FPL_2023_BY_HOUSEHOLD_SIZE, FPL_2023_PER_ADDITIONAL_PERSON,
                        CONTRIBUTION_LIMITS_2023, HDHP_REQUIREMENTS_2023),
})

SUPPORTED_TAX_YEARS = tuple(sorted(_TABLES_BY_YEAR))


def get_reference_tables(year: int = DEFAULT_TAX_YEAR) -> ReferenceTables:
    """
    Get the reference tables for a tax year.

    Args:
        year: Tax year (see SUPPORTED_TAX_YEARS)

    Returns:
        ReferenceTables for that year

    Raises:
        UnknownTaxYearError: If no tables exist for the year
    """
    try:
        return _TABLES_BY_YEAR[int(year)]
    except KeyError:
        supported = ', '.join(str(y) for y in SUPPORTED_TAX_YEARS)
        raise UnknownTaxYearError(
            f"No reference tables for tax year {year} (supported: {supported})"
        ) from None
