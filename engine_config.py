"""
Engine configuration for Coverage Advisor.

Settings come from environment variables (a local .env file is honoured):
- COVERAGE_TAX_YEAR: Reference-table year (default 2024)
- COVERAGE_LOG_LEVEL: Logging level name (default INFO)
"""

import os
import logging
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

from constants import DEFAULT_TAX_YEAR
from reference_tables import SUPPORTED_TAX_YEARS, ReferenceTables, get_reference_tables

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class EngineConfig:
    """Configuration for the analysis engine."""
    tax_year: int = DEFAULT_TAX_YEAR
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        raw_year = os.getenv("COVERAGE_TAX_YEAR", str(DEFAULT_TAX_YEAR)).strip()
        try:
            tax_year = int(raw_year)
        except ValueError:
            logger.warning(f"COVERAGE_TAX_YEAR '{raw_year}' is not a year, using {DEFAULT_TAX_YEAR}")
            tax_year = DEFAULT_TAX_YEAR

        return cls(
            tax_year=tax_year,
            log_level=os.getenv("COVERAGE_LOG_LEVEL", "INFO").strip().upper(),
        )

    def validate(self) -> Tuple[bool, str]:
        """Validate configuration. Returns (is_valid, error_message)."""
        if self.tax_year not in SUPPORTED_TAX_YEARS:
            supported = ', '.join(str(y) for y in SUPPORTED_TAX_YEARS)
            return False, f"COVERAGE_TAX_YEAR {self.tax_year} is not supported (supported: {supported})"
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            return False, f"COVERAGE_LOG_LEVEL '{self.log_level}' is not a valid logging level"
        return True, ""

    def reference_tables(self) -> ReferenceTables:
        """
        Reference tables for the configured year.

        Raises:
            UnknownTaxYearError: If the configured year has no tables
        """
        return get_reference_tables(self.tax_year)


def configure_logging(level: str = "INFO") -> None:
    """
    Install a basic stream handler for command-line or notebook use.

    The engine modules never configure logging on import; callers opt in.
    The level is applied to the root logger even when handlers already exist.
    """
    name = str(level).upper()
    if name not in VALID_LOG_LEVELS:
        raise ValueError(f"Unknown log level '{level}' (expected one of: {', '.join(VALID_LOG_LEVELS)})")
    logging.basicConfig(level=getattr(logging, name), format=LOG_FORMAT)
    logging.getLogger().setLevel(getattr(logging, name))
