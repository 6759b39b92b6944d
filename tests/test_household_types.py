"""
Test Suite for Household Input Types

Run with: python -m pytest tests/test_household_types.py
"""

import unittest

from household_types import (
    Household,
    Person,
    Preferences,
    Residence,
    age_group_label,
    analyze_household_age_groups,
)


class TestValueObjects(unittest.TestCase):

    def test_person_coerces_conditions_to_tuple(self):
        person = Person(40, chronic_conditions=['asthma', 'diabetes'])
        self.assertEqual(person.chronic_conditions, ('asthma', 'diabetes'))
        self.assertTrue(person.has_chronic_conditions)
        self.assertFalse(Person(40).has_chronic_conditions)

    def test_household_coerces_lists(self):
        household = Household(adults=[Person(40)], residences=[Residence('TX')])
        self.assertIsInstance(household.adults, tuple)
        self.assertIsInstance(household.residences, tuple)

    def test_members_are_adults_then_children(self):
        household = Household.from_ages([40, 38], [10, 3])
        self.assertEqual(household.ages, [40, 38, 10, 3])
        self.assertEqual(household.size, 4)
        self.assertTrue(household.has_children)

    def test_empty_household(self):
        household = Household()
        self.assertTrue(household.is_empty)
        self.assertEqual(household.ages, [])

    def test_preferences_exclusions_frozen(self):
        prefs = Preferences(exclude_categories=['dental', 'vision'])
        self.assertEqual(prefs.exclude_categories, frozenset({'dental', 'vision'}))


class TestAgeGroups(unittest.TestCase):

    def test_labels(self):
        self.assertEqual(age_group_label(0), 'Children (0-17)')
        self.assertEqual(age_group_label(30), 'Young Adults (18-30)')
        self.assertEqual(age_group_label(64), 'Pre-Retirement (51-64)')
        self.assertEqual(age_group_label(120), 'Seniors (75+)')

    def test_fractional_age_between_brackets(self):
        self.assertEqual(age_group_label(17.5), 'Young Adults (18-30)')

    def test_groups_youngest_first_and_non_empty_only(self):
        household = Household.from_ages([45, 42], [7])
        groups = analyze_household_age_groups(household)
        self.assertEqual([g.group_name for g in groups], ['Children (0-17)', 'Adults (41-50)'])
        self.assertEqual(groups[1].member_count, 2)
        self.assertEqual(groups[1].ages, (45, 42))

    def test_empty_household_has_no_groups(self):
        self.assertEqual(analyze_household_age_groups(Household()), [])


if __name__ == '__main__':
    unittest.main()
