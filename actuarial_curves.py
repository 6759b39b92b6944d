"""
Actuarial Risk Curves for Supplemental (Add-On) Insurance

Turns a person's age and a coverage category into a probability-of-need
score, a risk level, an expected utilization rate and a cost multiplier.

Each category has its own small curve function built from three shapes:
- Piecewise linear (dental, vision, accident, hospital indemnity)
- Sigmoid for risks that accelerate with age (critical illness, long-term care)
- Gaussian for risks that peak in the working/family years (disability, life)

Ages are clamped to 0-120 and rounded half-up before lookup. Curves are
continuous enough that no single-year step moves the score by 30 points.
"""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache, total_ordering
from typing import Callable, Dict, Iterable, Sequence, Tuple, Union

import numpy as np

from constants import DEFAULT_HOUSEHOLD_AGE, MAX_CURVE_AGE, MIN_CURVE_AGE
from rounding import round_half_up


class UnknownCategoryError(ValueError):
    """Raised when a coverage category name is not recognised."""


class Category(Enum):
    """Supplemental coverage categories (values are the wire names)."""
    DENTAL = "dental"
    VISION = "vision"
    ACCIDENT = "accident"
    CRITICAL_ILLNESS = "critical-illness"
    HOSPITAL_INDEMNITY = "hospital-indemnity"
    DISABILITY = "disability"
    LONG_TERM_CARE = "long-term-care"
    LIFE = "life"

    @classmethod
    def parse(cls, value: Union["Category", str]) -> "Category":
        """Accept a Category or its wire name; unknown names fail fast."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ', '.join(c.value for c in cls)
            raise UnknownCategoryError(
                f"Unknown coverage category '{value}' (expected one of: {valid})"
            ) from None


@total_ordering
class RiskLevel(Enum):
    """Ordered risk classification for a curve point."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"

    @property
    def rank(self) -> int:
        return _RISK_RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, RiskLevel):
            return NotImplemented
        return self.rank < other.rank


_RISK_RANKS = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.VERY_HIGH: 3,
}


@dataclass(frozen=True)
class CurvePoint:
    """Result of evaluating one category curve at one age."""
    probability_score: int      # 0-100
    risk_level: RiskLevel
    utilization_rate: float     # Expected annual utilization (0-1)
    cost_multiplier: float      # Age-based premium adjustment (> 0)
    reasoning: str


# =============================================================================
# CURVE SHAPES
# =============================================================================

def _sigmoid(x: float, midpoint: float, steepness: float) -> float:
    return float(1.0 / (1.0 + np.exp(-steepness * (x - midpoint))))


def _gaussian(x: float, mean: float, std_dev: float) -> float:
    return float(np.exp(-((x - mean) ** 2) / (2 * std_dev ** 2)))


def _piecewise(age: float, points: Sequence[Tuple[float, float]]) -> float:
    """Piecewise linear curve through (age, score) points; flat past the ends."""
    ages, values = zip(*sorted(points))
    return float(np.interp(age, ages, values))


def _round_score(probability: float) -> int:
    probability = min(100.0, max(0.0, probability))
    return round_half_up(probability)


def _risk_level(probability: float, very_high: float, high: float, medium: float) -> RiskLevel:
    if probability >= very_high:
        return RiskLevel.VERY_HIGH
    if probability >= high:
        return RiskLevel.HIGH
    if probability >= medium:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def normalize_age(age: float) -> int:
    """Clamp to the curve domain and round half-up to a whole year."""
    rounded = round_half_up(float(age))
    return max(MIN_CURVE_AGE, min(MAX_CURVE_AGE, rounded))


# =============================================================================
# CATEGORY CURVES
# =============================================================================

def dental_curve(age: int) -> CurvePoint:
    """
    Dental: high through childhood (cavities, orthodontics), a maintenance
    plateau in adulthood, rising again for seniors (crowns, dentures).
    """
    probability = _piecewise(age, [
        (0, 85), (5, 95), (12, 98), (18, 75), (30, 70),
        (50, 75), (65, 90), (80, 95), (120, 95),
    ])

    cost_multiplier = 1.3 if age >= 65 else 1.0
    utilization = 0.8 if age < 18 or age >= 65 else 0.6

    if age < 18:
        reasoning = 'High cavity risk and orthodontic needs during childhood development'
    elif age >= 65:
        reasoning = 'Increased risk of tooth loss, gum disease, and complex dental procedures'
    else:
        reasoning = 'Regular preventive care and maintenance procedures'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 85, 70, 0),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


def vision_curve(age: int) -> CurvePoint:
    """Vision: school-age screening bump, low in early adulthood, rising after 40."""
    probability = _piecewise(age, [
        (0, 60), (8, 75), (18, 55), (30, 45), (40, 60),
        (50, 75), (60, 85), (70, 95), (120, 95),
    ])

    if age >= 65:
        cost_multiplier = 1.4
    elif age >= 40:
        cost_multiplier = 1.1
    else:
        cost_multiplier = 1.0

    utilization = 0.7 if age >= 40 else 0.4

    if age < 18:
        reasoning = 'Regular vision screening during developmental years'
    elif age >= 65:
        reasoning = 'High risk of cataracts, macular degeneration, and glaucoma'
    elif age >= 40:
        reasoning = 'Presbyopia and age-related vision changes common after 40'
    else:
        reasoning = 'Routine vision correction and eye health monitoring'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 85, 70, 50),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


def accident_curve(age: int) -> CurvePoint:
    """Accident: peaks in the teens (driving, sports) and again with late-life falls."""
    probability = _piecewise(age, [
        (0, 70), (3, 85), (10, 90), (16, 95), (25, 88), (35, 60),
        (50, 55), (65, 70), (75, 85), (90, 95), (120, 95),
    ])

    if age >= 70:
        cost_multiplier = 1.5
    elif 16 <= age <= 25:
        cost_multiplier = 1.2
    else:
        cost_multiplier = 1.0

    utilization = 0.15 if age >= 70 or 5 <= age <= 25 else 0.08

    if age <= 5:
        reasoning = 'High accident risk during early childhood development'
    elif 16 <= age <= 25:
        reasoning = 'Peak accident risk from driving, sports, and risky behavior'
    elif age >= 70:
        reasoning = 'Increased fall risk and injury severity in older adults'
    else:
        reasoning = 'General accident protection for unexpected injuries'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 85, 70, 55),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


def critical_illness_curve(age: int) -> CurvePoint:
    """Critical illness: sigmoid rise centred on 50 with a 55-75 peak-risk boost."""
    probability = _sigmoid(age, 50, 0.08) * 95
    if 55 <= age <= 75:
        probability = min(100.0, probability + 10)

    if age >= 60:
        cost_multiplier = 2.0
    elif age >= 50:
        cost_multiplier = 1.5
    elif age >= 40:
        cost_multiplier = 1.2
    elif age < 30:
        cost_multiplier = 0.7
    else:
        cost_multiplier = 1.0

    if age >= 50:
        utilization = 0.03
    elif age >= 40:
        utilization = 0.015
    else:
        utilization = 0.005

    if age < 30:
        reasoning = 'Low risk but provides financial protection for rare critical events'
    elif age < 40:
        reasoning = 'Early onset critical illness possible; best rates available now'
    elif age < 50:
        reasoning = 'Critical illness risk begins to increase significantly after 40'
    elif age < 65:
        reasoning = 'High risk period for cancer, heart attack, and stroke'
    else:
        reasoning = 'Peak age for critical illness; provides financial security for treatment'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 80, 60, 35),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


def hospital_indemnity_curve(age: int) -> CurvePoint:
    """Hospital indemnity: low through working years, climbing steadily after 50."""
    probability = _piecewise(age, [
        (0, 55), (5, 40), (18, 35), (40, 40), (50, 55),
        (60, 70), (70, 85), (80, 95), (120, 98),
    ])

    if age >= 70:
        cost_multiplier = 1.6
    elif age >= 60:
        cost_multiplier = 1.3
    elif age >= 50:
        cost_multiplier = 1.1
    else:
        cost_multiplier = 1.0

    if age >= 65:
        utilization = 0.25
    elif age >= 50:
        utilization = 0.12
    else:
        utilization = 0.05

    if age >= 70:
        reasoning = 'Very high hospitalization risk; provides daily cash benefits'
    elif age >= 50:
        reasoning = 'Hospitalization risk increases with chronic conditions'
    elif age < 18:
        reasoning = 'Provides coverage for unexpected childhood illnesses and injuries'
    else:
        reasoning = 'Supplements health insurance for unexpected hospital stays'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 80, 65, 45),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


_DISABILITY_RETIRED_SCORE = 15.0


def _working_years_score(age: float) -> float:
    score = _gaussian(age, 45, 18) * 100
    if 30 <= age <= 55:
        score = min(100.0, score + 15)
    return score


def disability_curve(age: int) -> CurvePoint:
    """
    Disability (income protection): bell curve over the working years.

    Ramps in over ages 15-18 and tapers to the retired floor over 65-67 so
    entering and leaving the workforce never jumps the score.
    """
    if age < 15:
        probability = 0.0
    elif age < 18:
        probability = _working_years_score(18) * (age - 14) / 4
    elif age < 65:
        probability = _working_years_score(age)
    elif age < 67:
        last_working = _working_years_score(64)
        probability = _DISABILITY_RETIRED_SCORE + (last_working - _DISABILITY_RETIRED_SCORE) * (67 - age) / 3
    else:
        probability = _DISABILITY_RETIRED_SCORE

    if age >= 50:
        cost_multiplier = 1.4
    elif age >= 40:
        cost_multiplier = 1.2
    elif age < 25:
        cost_multiplier = 0.9
    else:
        cost_multiplier = 1.0

    if 40 <= age < 65:
        utilization = 0.04
    elif 25 <= age < 40:
        utilization = 0.02
    else:
        utilization = 0.01

    if age < 18:
        reasoning = 'Not applicable - no earned income'
    elif age < 25:
        reasoning = 'Early career; lower income to protect but good rates available'
    elif age < 40:
        reasoning = 'Critical protection during family-building and career-growth years'
    elif age < 55:
        reasoning = 'Peak earning years; essential income protection for family'
    elif age < 65:
        reasoning = 'Pre-retirement income protection; higher disability risk'
    else:
        reasoning = 'Not applicable - retired with no earned income to protect'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 80, 60, 30),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


# Minimum long-term-care score by age; ramps in from 40
_LTC_FLOOR_POINTS = [(40, 20), (50, 65), (60, 75), (70, 85), (80, 95)]


def long_term_care_curve(age: int) -> CurvePoint:
    """Long-term care: sigmoid centred on 60, held above a rising floor from 40."""
    probability = _sigmoid(age, 60, 0.10) * 95
    if age >= 40:
        probability = max(probability, _piecewise(age, _LTC_FLOOR_POINTS))

    if age >= 70:
        cost_multiplier = 3.0
    elif age >= 65:
        cost_multiplier = 2.2
    elif age >= 60:
        cost_multiplier = 1.6
    elif age >= 55:
        cost_multiplier = 1.3
    elif age >= 50:
        cost_multiplier = 1.0
    else:
        cost_multiplier = 0.8

    if age >= 65:
        utilization = 0.7
    elif age >= 50:
        utilization = 0.5
    else:
        utilization = 0.3

    if age < 40:
        reasoning = 'Very low need; wait until age 50 for better actuarial fit'
    elif age < 50:
        reasoning = 'Planning ahead possible but premiums higher for years before use'
    elif age < 60:
        reasoning = 'Optimal age to purchase - balance of cost and future need'
    elif age < 70:
        reasoning = 'Important to secure coverage before rates become prohibitive'
    elif age < 80:
        reasoning = 'High need but very expensive; may be difficult to qualify'
    else:
        reasoning = 'Critical need but likely uninsurable; consider Medicaid planning'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 80, 60, 40),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


def life_curve(age: int) -> CurvePoint:
    """Term life: peaks in the child-rearing years, fading after retirement."""
    probability = _gaussian(age, 40, 15) * 100
    if 30 <= age <= 50:
        probability = min(100.0, probability + 10)
    if age >= 70:
        probability = max(15.0, probability - 40)

    if age >= 60:
        cost_multiplier = 2.5
    elif age >= 50:
        cost_multiplier = 1.6
    elif age >= 40:
        cost_multiplier = 1.2
    elif age < 30:
        cost_multiplier = 0.7
    else:
        cost_multiplier = 1.0

    if age >= 60:
        utilization = 0.015
    elif age >= 50:
        utilization = 0.008
    elif age >= 40:
        utilization = 0.004
    else:
        utilization = 0.001

    if age < 25:
        reasoning = 'Low need unless dependents; excellent rates for future planning'
    elif age < 40:
        reasoning = 'Critical protection for growing families and mortgage obligations'
    elif age < 55:
        reasoning = 'Essential coverage for family income and college funding'
    elif age < 65:
        reasoning = 'Income replacement until retirement; rates increase significantly'
    elif age < 75:
        reasoning = 'Limited need post-retirement; consider permanent life if needed'
    else:
        reasoning = 'Term insurance typically not cost-effective; consider final expense'

    return CurvePoint(
        probability_score=_round_score(probability),
        risk_level=_risk_level(probability, 80, 60, 35),
        utilization_rate=utilization,
        cost_multiplier=cost_multiplier,
        reasoning=reasoning,
    )


CURVES: Dict[Category, Callable[[int], CurvePoint]] = {
    Category.DENTAL: dental_curve,
    Category.VISION: vision_curve,
    Category.ACCIDENT: accident_curve,
    Category.CRITICAL_ILLNESS: critical_illness_curve,
    Category.HOSPITAL_INDEMNITY: hospital_indemnity_curve,
    Category.DISABILITY: disability_curve,
    Category.LONG_TERM_CARE: long_term_care_curve,
    Category.LIFE: life_curve,
}


# =============================================================================
# PUBLIC API
# =============================================================================

@lru_cache(maxsize=None)
def _evaluate_whole_age(age: int, category: Category) -> CurvePoint:
    return CURVES[category](age)


def evaluate(age: float, category: Union[Category, str]) -> CurvePoint:
    """
    Evaluate a category's actuarial curve at an age.

    Args:
        age: Person's age; clamped to 0-120 and rounded to a whole year
        category: Category or its wire name (e.g. 'critical-illness')

    Returns:
        CurvePoint with score, risk level, utilization and cost multiplier

    Raises:
        UnknownCategoryError: If the category name is not recognised
    """
    return _evaluate_whole_age(normalize_age(age), Category.parse(category))


def evaluate_household(ages: Iterable[float], category: Union[Category, str]) -> CurvePoint:
    """
    Evaluate a category for every age and return the highest-need point.

    An empty age list evaluates the default household age (35).
    """
    category = Category.parse(category)
    points = [evaluate(age, category) for age in ages]
    if not points:
        return evaluate(DEFAULT_HOUSEHOLD_AGE, category)
    return max(points, key=lambda point: point.probability_score)


def age_adjusted_cost(base_cost: float, age: float, category: Union[Category, str]) -> int:
    """Base monthly cost scaled by the curve's cost multiplier, in whole dollars."""
    point = evaluate(age, category)
    return round_half_up(base_cost * point.cost_multiplier)
