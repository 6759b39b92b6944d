"""
Constants and reference data for the Coverage Advisor engine
Includes FPL tables, ACA contribution schedules, contribution limits,
state cost indices and the supplemental product catalog costs.

Tables are stamped with the year they apply to. reference_tables.py bundles
them into immutable per-year lookup objects; engine code should read them
through that module rather than importing these names directly.
"""

# ==============================================================================
# FEDERAL POVERTY LEVEL
# ==============================================================================
# Source: HHS Poverty Guidelines (48 contiguous states + DC)
# The prior year's guidelines apply to each coverage year, so the 2024 tables
# carry the 2023 HHS figures.

FPL_2024_BY_HOUSEHOLD_SIZE = {
    1: 14580,
    2: 19720,
    3: 24860,
    4: 30000,
    5: 35140,
    6: 40280,
    7: 45420,
    8: 50560,
}
FPL_2024_PER_ADDITIONAL_PERSON = 5140

FPL_2023_BY_HOUSEHOLD_SIZE = {
    1: 13590,
    2: 18310,
    3: 23030,
    4: 27750,
    5: 32470,
    6: 37190,
    7: 41910,
    8: 46630,
}
FPL_2023_PER_ADDITIONAL_PERSON = 4720

# ==============================================================================
# ACA EXPECTED CONTRIBUTION SCHEDULE (enhanced subsidies)
# ==============================================================================
# (upper FPL %, contribution % at bracket start, contribution % at bracket end)
# The first bracket starts at 100% FPL. Percentages are of annual income and
# are linearly interpolated within each bracket.

ACA_CONTRIBUTION_BRACKETS_ENHANCED = [
    (150, 0.0, 0.0),
    (200, 0.0, 2.0),
    (250, 2.0, 4.0),
    (300, 4.0, 6.0),
    (400, 6.0, 8.5),
    (float('inf'), 8.5, 8.5),  # Enhanced subsidies extend above 400%
]

SUBSIDY_FLOOR_FPL = 100           # No marketplace subsidy below this
MEDICAID_EXPANSION_FPL = 138      # Medicaid ceiling in expansion states
STATUTORY_CLIFF_FPL = 400         # Original ACA eligibility line
EFFECTIVE_CLIFF_FPL = 450         # Where enhanced-subsidy tapering makes the cliff bite
NEAR_CLIFF_FPL_RANGE = (380, 420)
HIGH_SUBSIDY_ZONE_FPL_RANGE = (350, 400)

# Reference FPL levels for the breakpoint table
BREAKPOINT_FPL_LEVELS = [100, 150, 200, 250, 300, 350, 400, 450, 500]

# Candidate FPL targets for the optimal-MAGI search
OPTIMIZATION_FPL_LEVELS = [150, 200, 250, 300, 350, 400]

# Assumed after-tax cost of each dollar of forgone income
AFTER_TAX_INCOME_RETENTION = 0.75

# Probe distance either side of the statutory cliff (dollars of MAGI)
CLIFF_PROBE_OFFSET = 100

MINIMUM_CLIFF_SAFETY_BUFFER = 500
CLIFF_SAFETY_BUFFER_FPL_SHARE = 0.05

# ==============================================================================
# CONTRIBUTION LIMITS
# ==============================================================================
# Source: IRS Notice 2023-75, Rev. Proc. 2023-23 (2024); Notice 2022-55,
# Rev. Proc. 2022-24 (2023)

CONTRIBUTION_LIMITS_2024 = {
    'traditional_401k': 23000,
    'traditional_401k_catch_up': 7500,   # Age 50+
    'traditional_ira': 7000,
    'traditional_ira_catch_up': 1000,    # Age 50+
    'hsa_individual': 4150,
    'hsa_family': 8300,
    'hsa_catch_up': 1000,                # Age 55+
}

CONTRIBUTION_LIMITS_2023 = {
    'traditional_401k': 22500,
    'traditional_401k_catch_up': 7500,
    'traditional_ira': 6500,
    'traditional_ira_catch_up': 1000,
    'hsa_individual': 3850,
    'hsa_family': 7750,
    'hsa_catch_up': 1000,
}

RETIREMENT_CATCH_UP_AGE = 50
HSA_CATCH_UP_AGE = 55

# HDHP qualification thresholds
HDHP_REQUIREMENTS_2024 = {
    'min_deductible': {'individual': 1600, 'family': 3200},
    'max_out_of_pocket': {'individual': 8050, 'family': 16100},
}

HDHP_REQUIREMENTS_2023 = {
    'min_deductible': {'individual': 1500, 'family': 3000},
    'max_out_of_pocket': {'individual': 7500, 'family': 15000},
}

# Social Security + Medicare payroll tax
FICA_RATE = 0.0765

# Self-employment MAGI levers (share of SE income)
SELF_EMPLOYED_HEALTH_INSURANCE_SHARE = 0.10
SELF_EMPLOYMENT_TAX_DEDUCTIBLE_SHARE = 0.0765

# Share of MAGI assumed movable between tax years
INCOME_TIMING_FLEXIBILITY = 0.10

# ==============================================================================
# HSA PLANNING ASSUMPTIONS
# ==============================================================================

HSA_DEFAULT_PROJECTION_YEARS = 20
HSA_DEFAULT_EXPECTED_RETURN = 0.07
HSA_DEFAULT_HEALTHCARE_INFLATION = 0.05
HSA_AFFORDABLE_INCOME_SHARE = 0.10       # Share of income treated as affordable
HSA_INVESTING_BALANCE_THRESHOLD = 5000
HSA_MAXIMIZE_INCOME_THRESHOLD = 50000
HSA_HIGH_BRACKET_RATE = 0.24
ASSUMED_LIFE_EXPECTANCY = 85

# ==============================================================================
# MEDICAID
# ==============================================================================

MEDICAID_EXPANSION_STATES = [
    'AK', 'AZ', 'AR', 'CA', 'CO', 'CT', 'DE', 'HI', 'IL', 'IN', 'IA', 'KY',
    'LA', 'ME', 'MD', 'MA', 'MI', 'MN', 'MO', 'MT', 'NE', 'NV', 'NH', 'NJ',
    'NM', 'NY', 'NC', 'ND', 'OH', 'OK', 'OR', 'PA', 'RI', 'SD', 'VA', 'VT',
    'WA', 'WV',
]

# ==============================================================================
# BENCHMARK PREMIUM ESTIMATE
# ==============================================================================
# Used only when the caller has no SLCSP quote.

BENCHMARK_BASE_PREMIUM = 450  # Monthly, 40-year-old

# (upper age inclusive, factor); ages past the last band use the final factor
BENCHMARK_AGE_FACTORS = [
    (20, 0.635),
    (29, 0.8),
    (39, 0.95),
    (49, 1.1),
    (59, 1.5),
    (120, 1.8),
]

BENCHMARK_EXPENSIVE_STATES = ['AK', 'WY', 'NY', 'VT', 'WV']
BENCHMARK_CHEAP_STATES = ['UT', 'NH', 'MN', 'MI', 'OH']
BENCHMARK_EXPENSIVE_FACTOR = 1.3
BENCHMARK_CHEAP_FACTOR = 0.85

# ==============================================================================
# STATE HEALTHCARE COST INDEX
# ==============================================================================
# Source: CMS Geographic Adjustment Factor data, normalized to 1.0 = national
# average. Applied to supplemental product base costs.

STATE_COST_INDEX = {
    "AK": 1.27, "AL": 0.92, "AR": 0.90, "AZ": 0.99, "CA": 1.18,
    "CO": 1.05, "CT": 1.15, "DC": 1.21, "DE": 1.06, "FL": 1.02,
    "GA": 0.98, "HI": 1.12, "IA": 0.93, "ID": 0.94, "IL": 1.04,
    "IN": 0.94, "KS": 0.93, "KY": 0.92, "LA": 0.93, "MA": 1.14,
    "MD": 1.08, "ME": 0.95, "MI": 0.99, "MN": 1.03, "MO": 0.93,
    "MS": 0.88, "MT": 0.94, "NC": 0.97, "ND": 0.93, "NE": 0.93,
    "NH": 1.06, "NJ": 1.13, "NM": 0.94, "NV": 1.00, "NY": 1.12,
    "OH": 0.97, "OK": 0.92, "OR": 1.03, "PA": 1.02, "PR": 0.85,
    "RI": 1.08, "SC": 0.96, "SD": 0.92, "TN": 0.96, "TX": 1.01,
    "UT": 0.98, "VA": 1.03, "VT": 1.00, "WA": 1.05, "WI": 0.98,
    "WV": 0.89, "WY": 0.95,
}

# ==============================================================================
# SUPPLEMENTAL (ADD-ON) PRODUCTS
# ==============================================================================

# Age domain for curve lookups
MIN_CURVE_AGE = 0
MAX_CURVE_AGE = 120
DEFAULT_HOUSEHOLD_AGE = 35  # Used when a household has no ages at all

# National average base cost per member per month
ADD_ON_BASE_COSTS = {
    'dental': 45,
    'vision': 22,
    'accident': 35,
    'critical-illness': 100,
    'hospital-indemnity': 55,
    'disability': 125,
    'long-term-care': 200,
    'life': 60,
}

# Minimum member score for a category to count that member as covered
ADD_ON_RELEVANCE_FLOORS = {
    'dental': 25,
    'vision': 25,
    'accident': 25,
    'critical-illness': 25,
    'hospital-indemnity': 25,
    'disability': 25,
    'long-term-care': 25,
    'life': 25,
}

# Priority thresholds on the 0-100 probability score
PRIORITY_THRESHOLDS = {
    'high': 75,
    'medium': 50,
}

# Cost adjustment factors
BUNDLE_DISCOUNT = 0.95            # 5% off with 3+ recommended categories
BUNDLE_MIN_CATEGORIES = 3
FAMILY_DISCOUNT = 0.90            # 10% off when 2+ members are covered
FAMILY_MIN_MEMBERS = 2

# Score modifiers (points on the 0-100 scale)
CHRONIC_CONDITION_BOOST = 10
TOBACCO_USE_BOOST = 5
CHILDREN_PRESENT_BOOST = 10
HIGH_PRESCRIPTION_BOOST = 5
MEDICARE_ELIGIBLE_BOOST = 10
MULTI_RESIDENCE_BOOST = 5
LOW_BUDGET_PENALTY = 10

LOW_BUDGET_THRESHOLD = 500        # Monthly budget midpoint
EXPENSIVE_PRODUCT_THRESHOLD = 100  # Base monthly cost
HIGH_PRESCRIPTION_COUNT = '4-or-more'

# Monthly budget brackets -> midpoint
BUDGET_RANGES = {
    'under-300': 250,
    '300-500': 400,
    '500-750': 625,
    '750-1000': 875,
    'over-1000': 1200,
}

# Household age brackets (display grouping only, never used for scoring)
AGE_GROUP_BRACKETS = [
    ('Children (0-17)', 0, 17),
    ('Young Adults (18-30)', 18, 30),
    ('Adults (31-40)', 31, 40),
    ('Adults (41-50)', 41, 50),
    ('Pre-Retirement (51-64)', 51, 64),
    ('Seniors (65-74)', 65, 74),
    ('Seniors (75+)', 75, 120),
]

DEFAULT_TAX_YEAR = 2024

if __name__ == "__main__":
    # Display constants for verification
    print("Coverage Advisor Constants")
    print("=" * 50)
    print(f"\nFPL 2024 (household of 1): ${FPL_2024_BY_HOUSEHOLD_SIZE[1]:,}")
    print(f"Contribution brackets: {len(ACA_CONTRIBUTION_BRACKETS_ENHANCED)}")
    print(f"Cost index states: {len(STATE_COST_INDEX)}")
    print(f"Add-on products: {', '.join(ADD_ON_BASE_COSTS)}")
    print("\n✓ All constants loaded successfully!")
