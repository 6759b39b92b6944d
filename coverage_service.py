"""
Coverage Analysis Service

Thin facade that binds one configuration (and its reference tables) to the
three analyses the presentation layer calls:
- Add-on insurance recommendations
- MAGI / subsidy optimization
- HSA contribution optimization

Failures are logged with context and re-raised unchanged.
"""

import logging
from typing import Optional

from addon_recommendations import RecommendationAnalysis, recommend
from engine_config import EngineConfig, configure_logging
from household_types import Household, Preferences, PrimaryPlan
from hsa_calculator import HSAAnalysis, HSAInput, calculate_hsa_optimization
from magi_optimizer import MAGIAnalysis, MAGIOptimizerInput, analyze_magi

logger = logging.getLogger(__name__)


class CoverageAnalysisService:
    """
    Service entry point for household coverage analyses.

    Usage:
        service = CoverageAnalysisService()
        analysis = service.recommend_add_ons(household, primary_plan)
        for rec in analysis.recommendations:
            print(rec.name, rec.household_cost_per_month)
    """

    def __init__(self, config: Optional[EngineConfig] = None, setup_logging: bool = False):
        """
        Initialize the service.

        Args:
            config: Engine configuration; loaded from the environment when omitted
            setup_logging: Apply the configured log level to the root logger

        Raises:
            UnknownTaxYearError: If the configured year has no reference tables
            ValueError: If setup_logging is set and the log level is unknown
        """
        self.config = config or EngineConfig.from_environment()
        is_valid, error = self.config.validate()
        if not is_valid:
            logger.warning(f"Engine configuration problem: {error}")
        if setup_logging:
            configure_logging(self.config.log_level)
        self.tables = self.config.reference_tables()

    def recommend_add_ons(
        self,
        household: Household,
        primary_plan: Optional[PrimaryPlan] = None,
        preferences: Optional[Preferences] = None,
    ) -> RecommendationAnalysis:
        """Add-on recommendations for a household."""
        try:
            analysis = recommend(household, primary_plan, preferences, self.tables)
        except ValueError as e:
            logger.error(f"Add-on recommendation failed for {household.size}-member household: {e}")
            raise

        logger.info(
            f"Add-on recommendations: {len(analysis.recommendations)} recommended "
            f"({len(analysis.high_priority)} high), ${analysis.total_monthly_all_recommended}/mo"
        )
        return analysis

    def analyze_magi(self, data: MAGIOptimizerInput) -> MAGIAnalysis:
        """MAGI and subsidy optimization."""
        try:
            analysis = analyze_magi(data, self.tables)
        except ValueError as e:
            logger.error(f"MAGI analysis failed: {e}")
            raise

        logger.info(
            f"MAGI analysis: {analysis.current.fpl_percent}% FPL, tier {analysis.current.tier.value}, "
            f"${analysis.current.annual_subsidy:,}/yr subsidy"
        )
        return analysis

    def optimize_hsa(self, data: HSAInput) -> HSAAnalysis:
        """HSA contribution optimization."""
        try:
            analysis = calculate_hsa_optimization(data, self.tables)
        except ValueError as e:
            logger.error(f"HSA optimization failed: {e}")
            raise

        logger.info(
            f"HSA optimization: recommend ${analysis.recommended_contribution:,}/yr, "
            f"${analysis.retirement_balance:,} after {len(analysis.projections)} years"
        )
        return analysis
