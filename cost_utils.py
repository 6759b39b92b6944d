"""
Cost & Discount utilities for supplemental coverage.

Holds the add-on product catalog and the pricing adjustments applied on top of
the actuarial cost multiplier:
- State cost multiplier (month-weighted across residences)
- Bundle discount (3+ recommended categories)
- Family discount (2+ covered members, opt-in)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from actuarial_curves import Category
from constants import (
    ADD_ON_BASE_COSTS,
    ADD_ON_RELEVANCE_FLOORS,
    BUNDLE_DISCOUNT,
    BUNDLE_MIN_CATEGORIES,
    FAMILY_DISCOUNT,
    FAMILY_MIN_MEMBERS,
)
from household_types import Residence
from reference_tables import ReferenceTables, get_reference_tables
from rounding import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddOnProduct:
    """A supplemental product offered alongside the primary plan."""
    insurance_id: str
    name: str
    short_name: str
    category: Category
    base_cost_per_month: float
    relevance_floor: int
    description: str
    typical_coverage: str
    best_for: Tuple[str, ...]


def _product(insurance_id, name, short_name, category, description, typical_coverage, best_for):
    return AddOnProduct(
        insurance_id=insurance_id,
        name=name,
        short_name=short_name,
        category=category,
        base_cost_per_month=ADD_ON_BASE_COSTS[category.value],
        relevance_floor=ADD_ON_RELEVANCE_FLOORS[category.value],
        description=description,
        typical_coverage=typical_coverage,
        best_for=tuple(best_for),
    )


# Catalog order is the order categories are evaluated in
ADD_ON_PRODUCTS: Tuple[AddOnProduct, ...] = (
    _product(
        'dental', 'Dental Insurance', 'Dental', Category.DENTAL,
        'Coverage for preventive care, basic procedures, and major dental work',
        '100% preventive, 80% basic, 50% major',
        ['Families with children', 'Anyone needing regular dental care', 'Orthodontic needs'],
    ),
    _product(
        'vision', 'Vision Insurance', 'Vision', Category.VISION,
        'Coverage for eye exams, glasses, contact lenses, and vision correction',
        '$150-300 frames allowance, exam covered',
        ['Anyone who wears glasses/contacts', 'Families with children', 'Computer workers'],
    ),
    _product(
        'accident', 'Accident Insurance', 'Accident', Category.ACCIDENT,
        'Cash benefits for injuries from accidents, covering out-of-pocket costs',
        'Lump sum payments based on injury type',
        ['Active individuals', 'Families with children', 'High-deductible health plans'],
    ),
    _product(
        'critical-illness', 'Critical Illness Insurance', 'Critical Illness', Category.CRITICAL_ILLNESS,
        'Lump sum payment upon diagnosis of major illnesses like cancer, heart attack, or stroke',
        '$10,000-$100,000 lump sum benefit',
        ['Mid-career professionals', 'Those with family history', 'High-deductible plans'],
    ),
    _product(
        'hospital-indemnity', 'Hospital Indemnity Insurance', 'Hospital Indemnity', Category.HOSPITAL_INDEMNITY,
        'Daily cash benefit for hospital stays, regardless of medical bills',
        '$100-500 per day of hospitalization',
        ['High-deductible plans', 'Frequent travelers', 'Older adults'],
    ),
    _product(
        'disability', 'Disability Insurance (Income Protection)', 'Disability', Category.DISABILITY,
        'Replaces portion of income if unable to work due to illness or injury',
        '60% of pre-disability income',
        ['Primary earners', 'Self-employed', 'Single-income households'],
    ),
    _product(
        'long-term-care', 'Long-Term Care Insurance', 'Long-Term Care', Category.LONG_TERM_CARE,
        'Coverage for extended care services like nursing homes, assisted living, or in-home care',
        '$150-300 per day for 3-5 years',
        ['Ages 50-60 (best rates)', 'Those with family history', 'Asset protection'],
    ),
    _product(
        'term-life', 'Term Life Insurance', 'Term Life', Category.LIFE,
        'Death benefit to protect dependents and replace income for 10-30 years',
        '$250,000-$1,000,000 death benefit',
        ['Parents with children', 'Primary earners', 'Mortgage holders'],
    ),
)

_PRODUCTS_BY_CATEGORY: Dict[Category, AddOnProduct] = {p.category: p for p in ADD_ON_PRODUCTS}


def get_product(category) -> AddOnProduct:
    """Look up the catalog product for a category (or its wire name)."""
    return _PRODUCTS_BY_CATEGORY[Category.parse(category)]


def state_cost_multiplier(residences: Sequence[Residence],
                          tables: Optional[ReferenceTables] = None) -> float:
    """
    Month-weighted average cost index across a household's residences.

    Args:
        residences: Residences with state codes and months-per-year weights
        tables: Reference tables (defaults to the current year)

    Returns:
        Weighted multiplier; 1.0 when there are no residences. If every
        residence has a zero weight the states are averaged equally.

    Raises:
        UnknownStateError: If any state code has no cost index
    """
    if not residences:
        return 1.0

    tables = tables or get_reference_tables()
    multipliers = [tables.state_cost_multiplier(r.state) for r in residences]
    weights = [max(0.0, float(r.months_per_year)) for r in residences]

    total_weight = sum(weights)
    if total_weight <= 0:
        return sum(multipliers) / len(multipliers)

    return sum(m * w for m, w in zip(multipliers, weights)) / total_weight


def bundle_discount(recommended_count: int) -> float:
    """Multiplier for the whole recommendation set: 0.95 with 3+ categories."""
    return BUNDLE_DISCOUNT if recommended_count >= BUNDLE_MIN_CATEGORIES else 1.0


def family_discount(member_count: int) -> float:
    """Multiplier for a single category's household cost: 0.90 with 2+ members."""
    return FAMILY_DISCOUNT if member_count >= FAMILY_MIN_MEMBERS else 1.0


def calculate_total_cost(monthly_costs: Iterable[float]) -> int:
    """
    Total monthly cost with the bundle discount applied to the sum.

    Example: [50, 25, 100] -> 175 x 0.95 = 166.25 -> 166
    """
    costs = list(monthly_costs)
    subtotal = sum(costs)
    return round_half_up(subtotal * bundle_discount(len(costs)))


def filter_by_budget(recommendations: Sequence, max_budget: float) -> List:
    """
    Take recommendations in order while they fit in the monthly budget.

    Items that would overflow the budget are skipped, not a stopping point, so
    a cheaper item further down the list can still be included.
    """
    total = 0.0
    selected = []
    for rec in recommendations:
        cost = rec.household_cost_per_month
        if total + cost <= max_budget:
            selected.append(rec)
            total += cost
    logger.debug(f"Budget filter kept {len(selected)}/{len(recommendations)} within ${max_budget:,.0f}")
    return selected
