"""
Household input types for the recommendation engine.

Value objects describing who is in the household, where they live and what
primary coverage they already carry. Bounds checking (adult age 18-120,
at most five residences, ZIP/state agreement) belongs to the caller's form
validation; these types only normalise.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Tuple

from constants import AGE_GROUP_BRACKETS


@dataclass(frozen=True)
class Person:
    """One household member."""
    age: float
    uses_tobacco: bool = False
    chronic_conditions: Tuple[str, ...] = ()

    def __post_init__(self):
        # Frozen dataclass: coerce list input through object.__setattr__
        if not isinstance(self.chronic_conditions, tuple):
            object.__setattr__(self, 'chronic_conditions', tuple(self.chronic_conditions or ()))

    @property
    def has_chronic_conditions(self) -> bool:
        return len(self.chronic_conditions) > 0


@dataclass(frozen=True)
class Residence:
    """A state the household lives in for part of the year."""
    state: str
    months_per_year: float = 12
    zip_code: str = ''


@dataclass(frozen=True)
class Household:
    """
    Household composition and context.

    Attributes:
        adults: Adult members, in entry order
        children: Child members, in entry order
        residences: Residences with month weights (total <= 12)
        has_medicare_eligible: Anyone in the household is Medicare eligible
        budget: Monthly budget bracket key (e.g. '300-500'), if given
        prescription_count: Prescription bracket key (e.g. '4-or-more'), if given
        has_existing_insurance: Household already carries supplemental coverage
    """
    adults: Tuple[Person, ...] = ()
    children: Tuple[Person, ...] = ()
    residences: Tuple[Residence, ...] = ()
    has_medicare_eligible: bool = False
    budget: Optional[str] = None
    prescription_count: Optional[str] = None
    has_existing_insurance: bool = False

    def __post_init__(self):
        for name in ('adults', 'children', 'residences'):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value or ()))

    @classmethod
    def from_ages(cls, adult_ages, child_ages=(), states=(), **kwargs) -> 'Household':
        """Convenience constructor from bare ages and full-year state codes."""
        return cls(
            adults=tuple(Person(age) for age in adult_ages),
            children=tuple(Person(age) for age in child_ages),
            residences=tuple(Residence(state) for state in states),
            **kwargs,
        )

    @property
    def members(self) -> Tuple[Person, ...]:
        """Adults then children."""
        return self.adults + self.children

    @property
    def ages(self) -> List[float]:
        return [person.age for person in self.members]

    @property
    def size(self) -> int:
        return len(self.adults) + len(self.children)

    @property
    def is_empty(self) -> bool:
        return self.size == 0

    @property
    def has_children(self) -> bool:
        return len(self.children) > 0


@dataclass(frozen=True)
class PrimaryPlan:
    """The primary health plan already chosen; only its premium is read."""
    plan_type: str
    monthly_premium: float = 0.0


@dataclass(frozen=True)
class Preferences:
    """Caller-controlled options for a recommendation run."""
    exclude_categories: FrozenSet[str] = field(default_factory=frozenset)
    show_all: bool = False
    apply_family_discount: bool = False

    def __post_init__(self):
        if not isinstance(self.exclude_categories, frozenset):
            object.__setattr__(self, 'exclude_categories', frozenset(self.exclude_categories or ()))


@dataclass(frozen=True)
class HouseholdAgeGroup:
    """Display bucket of household members by age."""
    group_name: str
    min_age: int
    max_age: int
    member_count: int
    ages: Tuple[float, ...]


def age_group_label(age: float) -> str:
    """Display bracket name for a single age."""
    for name, min_age, max_age in AGE_GROUP_BRACKETS:
        if min_age <= age <= max_age:
            return name
    # Outside 0-120 (or fractional gaps between brackets): nearest end bracket
    if age < AGE_GROUP_BRACKETS[0][1]:
        return AGE_GROUP_BRACKETS[0][0]
    for name, min_age, max_age in AGE_GROUP_BRACKETS:
        if age < min_age:
            return name
    return AGE_GROUP_BRACKETS[-1][0]


def analyze_household_age_groups(household: Household) -> List[HouseholdAgeGroup]:
    """
    Group household members into display age brackets.

    Only non-empty brackets are returned, youngest first. Grouping is for
    presentation; scoring always uses the exact age.
    """
    buckets = {}
    for age in household.ages:
        buckets.setdefault(age_group_label(age), []).append(age)

    groups = []
    for name, min_age, max_age in AGE_GROUP_BRACKETS:
        ages = buckets.get(name)
        if ages:
            groups.append(HouseholdAgeGroup(
                group_name=name,
                min_age=min_age,
                max_age=max_age,
                member_count=len(ages),
                ages=tuple(ages),
            ))
    return groups
