"""
Add-On Insurance Recommendation Engine

Generates priced, tiered supplemental-insurance recommendations for a
household. Each member is scored on each category's actuarial curve,
household modifiers are applied per member, and the per-member scores are
collapsed to one household score per category (the maximum).

Pricing:
    adjusted cost  = base cost x weighted state multiplier x curve multiplier
    household cost = adjusted cost x applicable members x bundle discount
                     (x family discount when requested)

The bundle discount is decided once for the whole run from the number of
recommended categories, then applied uniformly to every category.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import pandas as pd

from actuarial_curves import Category, CurvePoint, evaluate
from constants import (
    BUDGET_RANGES,
    CHILDREN_PRESENT_BOOST,
    CHRONIC_CONDITION_BOOST,
    EXPENSIVE_PRODUCT_THRESHOLD,
    HIGH_PRESCRIPTION_BOOST,
    HIGH_PRESCRIPTION_COUNT,
    LOW_BUDGET_PENALTY,
    LOW_BUDGET_THRESHOLD,
    MEDICARE_ELIGIBLE_BOOST,
    MULTI_RESIDENCE_BOOST,
    PRIORITY_THRESHOLDS,
    TOBACCO_USE_BOOST,
)
from cost_utils import (
    ADD_ON_PRODUCTS,
    AddOnProduct,
    bundle_discount,
    family_discount,
    state_cost_multiplier,
)
from household_types import (
    Household,
    HouseholdAgeGroup,
    Person,
    Preferences,
    PrimaryPlan,
    age_group_label,
    analyze_household_age_groups,
)
from reference_tables import ReferenceTables, get_reference_tables
from rounding import round_half_up

logger = logging.getLogger(__name__)


class Priority(Enum):
    """Recommendation priority tier."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @classmethod
    def from_score(cls, score: float) -> "Priority":
        if score >= PRIORITY_THRESHOLDS['high']:
            return cls.HIGH
        if score >= PRIORITY_THRESHOLDS['medium']:
            return cls.MEDIUM
        return cls.LOW


_PRIORITY_ORDER = {Priority.HIGH: 0, Priority.MEDIUM: 1, Priority.LOW: 2}


@dataclass(frozen=True)
class Recommendation:
    """One priced supplemental-coverage recommendation."""
    insurance_id: str
    category: Category
    name: str
    priority: Priority
    probability_score: int
    adjusted_cost_per_month: int      # Per person, after state and age adjustment
    household_cost_per_month: int     # All applicable members, after discounts
    applicable_members: int
    reasons: Tuple[str, ...]
    age_group: str


@dataclass
class RecommendationAnalysis:
    """
    Result of a recommendation run.

    Attributes:
        recommendations: Default view (medium priority and above), sorted
        all_recommendations: Every evaluated category, sorted ("show all")
        high_priority: High-priority subset of recommendations
        medium_priority: Medium-priority subset of recommendations
        low_priority: Low-priority categories (only in all_recommendations)
        total_monthly_high_priority: Household cost of high-priority items
        total_monthly_all_recommended: Household cost of the default view
        total_monthly_with_primary_plan: Primary premium plus default view
        bundle_discount: Multiplier applied to every household cost
        household_age_groups: Display age buckets
        show_all: Default for the show-all toggle, taken from Preferences
    """
    recommendations: List[Recommendation] = field(default_factory=list)
    all_recommendations: List[Recommendation] = field(default_factory=list)
    high_priority: List[Recommendation] = field(default_factory=list)
    medium_priority: List[Recommendation] = field(default_factory=list)
    low_priority: List[Recommendation] = field(default_factory=list)
    total_monthly_high_priority: int = 0
    total_monthly_all_recommended: int = 0
    total_monthly_with_primary_plan: float = 0.0
    bundle_discount: float = 1.0
    household_age_groups: List[HouseholdAgeGroup] = field(default_factory=list)
    show_all: bool = False

    def visible(self, show_all: Optional[bool] = None) -> List[Recommendation]:
        """Recommendations for display; show_all=None uses the run's preference."""
        if show_all is None:
            show_all = self.show_all
        return self.all_recommendations if show_all else self.recommendations

    def to_dataframe(self, show_all: Optional[bool] = None) -> pd.DataFrame:
        """Tabular view for the presentation layer."""
        rows = [
            {
                'Product': rec.name,
                'Category': rec.category.value,
                'Priority': rec.priority.value,
                'Score': rec.probability_score,
                'Per Person ($/mo)': rec.adjusted_cost_per_month,
                'Members': rec.applicable_members,
                'Household ($/mo)': rec.household_cost_per_month,
                'Age Group': rec.age_group,
            }
            for rec in self.visible(show_all)
        ]
        columns = ['Product', 'Category', 'Priority', 'Score', 'Per Person ($/mo)',
                   'Members', 'Household ($/mo)', 'Age Group']
        return pd.DataFrame(rows, columns=columns)


# =============================================================================
# SCORE MODIFIERS
# =============================================================================
# Each modifier returns (points, reason) for one member, or None when it does
# not apply. They run in list order for every member.

Modifier = Callable[[AddOnProduct, Person, Household], Optional[Tuple[int, str]]]


def _chronic_condition(product, person, household):
    if person.has_chronic_conditions and product.category in (
            Category.CRITICAL_ILLNESS, Category.HOSPITAL_INDEMNITY, Category.DISABILITY):
        return CHRONIC_CONDITION_BOOST, 'Beneficial for those with chronic conditions'
    return None


def _tobacco_use(product, person, household):
    if person.uses_tobacco and product.category in (Category.CRITICAL_ILLNESS, Category.LIFE):
        return TOBACCO_USE_BOOST, 'Tobacco use raises critical illness and mortality risk'
    return None


def _children_present(product, person, household):
    if household.has_children and product.category in (Category.DENTAL, Category.VISION):
        return CHILDREN_PRESENT_BOOST, 'Highly recommended for families with children'
    return None


def _high_prescriptions(product, person, household):
    if household.prescription_count == HIGH_PRESCRIPTION_COUNT and product.category == Category.CRITICAL_ILLNESS:
        return HIGH_PRESCRIPTION_BOOST, 'Additional protection for ongoing medical needs'
    return None


def _medicare_eligible(product, person, household):
    if household.has_medicare_eligible and product.category in (
            Category.DENTAL, Category.VISION, Category.HOSPITAL_INDEMNITY):
        return MEDICARE_ELIGIBLE_BOOST, 'Fills important gaps in Medicare coverage'
    return None


def _multiple_residences(product, person, household):
    if len(household.residences) > 1 and product.category == Category.ACCIDENT:
        return MULTI_RESIDENCE_BOOST, 'Additional protection for frequent travelers'
    return None


def _low_budget(product, person, household):
    budget = BUDGET_RANGES.get(household.budget) if household.budget else None
    if budget is not None and budget < LOW_BUDGET_THRESHOLD \
            and product.base_cost_per_month > EXPENSIVE_PRODUCT_THRESHOLD:
        return -LOW_BUDGET_PENALTY, 'Consider budget constraints'
    return None


MODIFIERS: List[Modifier] = [
    _chronic_condition,
    _tobacco_use,
    _children_present,
    _high_prescriptions,
    _medicare_eligible,
    _multiple_residences,
    _low_budget,
]


@dataclass
class _MemberScore:
    person: Person
    point: CurvePoint
    score: int


def _score_members(product: AddOnProduct, household: Household):
    """Score every member; returns (member scores, reasons in modifier order)."""
    fired_reasons: List[Optional[str]] = [None] * len(MODIFIERS)
    scores = []

    for person in household.members:
        point = evaluate(person.age, product.category)
        score = point.probability_score
        for index, modifier in enumerate(MODIFIERS):
            result = modifier(product, person, household)
            if result is None:
                continue
            points, reason = result
            score += points
            fired_reasons[index] = reason
        scores.append(_MemberScore(person, point, min(100, max(0, score))))

    return scores, [reason for reason in fired_reasons if reason]


def _build_reasons(product: AddOnProduct, driver: _MemberScore,
                   age_groups: List[HouseholdAgeGroup], modifier_reasons: List[str]) -> Tuple[str, ...]:
    reasons = [driver.point.reasoning]

    if age_groups:
        names = ', '.join(group.group_name for group in age_groups)
        reasons.append(f"Household composition: {names}")

    for reason in modifier_reasons:
        if reason not in reasons:
            reasons.append(reason)

    if product.category in (Category.DENTAL, Category.VISION):
        reasons.append('Typically not covered by standard health insurance')

    return tuple(reasons)


@dataclass
class _CategoryScore:
    product: AddOnProduct
    score: int
    driver: _MemberScore
    applicable_members: int
    modifier_reasons: List[str]


def _score_category(product: AddOnProduct, household: Household) -> _CategoryScore:
    members, modifier_reasons = _score_members(product, household)

    # First member wins ties so adults drive over children with equal scores
    driver = members[0]
    for member in members[1:]:
        if member.score > driver.score:
            driver = member

    applicable = sum(1 for m in members if m.score >= product.relevance_floor)
    return _CategoryScore(product, driver.score, driver, applicable, modifier_reasons)


def _sort_key(rec: Recommendation):
    return _PRIORITY_ORDER[rec.priority], -rec.probability_score


def recommend(
    household: Household,
    primary_plan: Optional[PrimaryPlan] = None,
    preferences: Optional[Preferences] = None,
    tables: Optional[ReferenceTables] = None,
) -> RecommendationAnalysis:
    """
    Generate add-on insurance recommendations for a household.

    Args:
        household: Household members, residences and context
        primary_plan: Chosen primary plan (only its premium is read)
        preferences: Excluded categories and discount options
        tables: Reference tables (defaults to the current year)

    Returns:
        RecommendationAnalysis; empty (not an error) for an empty household

    Raises:
        UnknownStateError: If a residence state has no cost index
    """
    preferences = preferences or Preferences()
    tables = tables or get_reference_tables()
    primary_premium = primary_plan.monthly_premium if primary_plan else 0.0

    if household.is_empty:
        logger.debug("Empty household, returning empty recommendation set")
        return RecommendationAnalysis(
            total_monthly_with_primary_plan=primary_premium,
            show_all=preferences.show_all,
        )

    excluded = set()
    for value in preferences.exclude_categories:
        excluded.add(Category.parse(value))

    age_groups = analyze_household_age_groups(household)
    state_multiplier = state_cost_multiplier(household.residences, tables)

    # Excluded categories never reach scoring, so they cannot affect the bundle count
    scored = [
        _score_category(product, household)
        for product in ADD_ON_PRODUCTS
        if product.category not in excluded
    ]

    recommended_count = sum(1 for s in scored if s.score >= PRIORITY_THRESHOLDS['medium'])
    bundle = bundle_discount(recommended_count)

    all_recommendations = []
    for s in scored:
        adjusted_cost = round_half_up(s.product.base_cost_per_month * state_multiplier * s.driver.point.cost_multiplier)
        household_cost = adjusted_cost * s.applicable_members * bundle
        if preferences.apply_family_discount:
            household_cost *= family_discount(s.applicable_members)

        all_recommendations.append(Recommendation(
            insurance_id=s.product.insurance_id,
            category=s.product.category,
            name=s.product.name,
            priority=Priority.from_score(s.score),
            probability_score=s.score,
            adjusted_cost_per_month=adjusted_cost,
            household_cost_per_month=round_half_up(household_cost),
            applicable_members=s.applicable_members,
            reasons=_build_reasons(s.product, s.driver, age_groups, s.modifier_reasons),
            age_group=age_group_label(s.driver.person.age),
        ))

    all_recommendations.sort(key=_sort_key)
    recommendations = [r for r in all_recommendations if r.priority != Priority.LOW]
    high = [r for r in recommendations if r.priority == Priority.HIGH]
    medium = [r for r in recommendations if r.priority == Priority.MEDIUM]
    low = [r for r in all_recommendations if r.priority == Priority.LOW]

    total_high = sum(r.household_cost_per_month for r in high)
    total_recommended = sum(r.household_cost_per_month for r in recommendations)

    logger.debug(
        f"Scored {len(scored)} categories for {household.size} members: "
        f"{len(high)} high, {len(medium)} medium, bundle x{bundle}"
    )

    return RecommendationAnalysis(
        recommendations=recommendations,
        all_recommendations=all_recommendations,
        high_priority=high,
        medium_priority=medium,
        low_priority=low,
        total_monthly_high_priority=total_high,
        total_monthly_all_recommended=total_recommended,
        total_monthly_with_primary_plan=primary_premium + total_recommended,
        bundle_discount=bundle,
        household_age_groups=age_groups,
        show_all=preferences.show_all,
    )


def recommendations_by_priority(analysis: RecommendationAnalysis, priority) -> List[Recommendation]:
    """Recommendations of one priority tier (accepts a Priority or its name)."""
    if not isinstance(priority, Priority):
        priority = Priority(str(priority).lower())
    return [r for r in analysis.all_recommendations if r.priority == priority]
