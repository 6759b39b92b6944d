"""
Test Suite for Engine Configuration and the Coverage Analysis Service

Run with: python -m pytest tests/test_engine_config.py
"""

import logging
import unittest
from unittest.mock import patch

from coverage_service import CoverageAnalysisService
from engine_config import EngineConfig, configure_logging
from household_types import Household, Person, Residence
from hsa_calculator import HSAInput
from magi_optimizer import MAGIOptimizerInput
from reference_tables import UnknownStateError, UnknownTaxYearError


class TestEngineConfig(unittest.TestCase):

    def test_defaults(self):
        config = EngineConfig()
        self.assertEqual(config.tax_year, 2024)
        self.assertEqual(config.log_level, "INFO")
        self.assertEqual(config.validate(), (True, ""))

    @patch.dict('os.environ', {'COVERAGE_TAX_YEAR': '2023', 'COVERAGE_LOG_LEVEL': 'debug'})
    def test_from_environment(self):
        config = EngineConfig.from_environment()
        self.assertEqual(config.tax_year, 2023)
        self.assertEqual(config.log_level, "DEBUG")
        is_valid, _ = config.validate()
        self.assertTrue(is_valid)
        self.assertEqual(config.reference_tables().year, 2023)

    @patch.dict('os.environ', {'COVERAGE_TAX_YEAR': '1999'})
    def test_unsupported_year_invalid(self):
        is_valid, error = EngineConfig.from_environment().validate()
        self.assertFalse(is_valid)
        self.assertIn('1999', error)

    @patch.dict('os.environ', {'COVERAGE_TAX_YEAR': 'abc'})
    def test_non_numeric_year_falls_back(self):
        with self.assertLogs('engine_config', level='WARNING'):
            config = EngineConfig.from_environment()
        self.assertEqual(config.tax_year, 2024)

    def test_invalid_log_level(self):
        is_valid, error = EngineConfig(log_level='verbose').validate()
        self.assertFalse(is_valid)
        self.assertIn('verbose', error)

    def test_configure_logging_rejects_unknown_level(self):
        with self.assertRaises(ValueError):
            configure_logging('loud')


class TestLoggingSetup(unittest.TestCase):

    def setUp(self):
        self.root = logging.getLogger()
        self.saved_level = self.root.level

    def tearDown(self):
        self.root.setLevel(self.saved_level)

    def test_configure_logging_sets_root_level(self):
        configure_logging('warning')
        self.assertEqual(self.root.level, logging.WARNING)

    def test_service_applies_configured_level(self):
        CoverageAnalysisService(EngineConfig(log_level='ERROR'), setup_logging=True)
        self.assertEqual(self.root.level, logging.ERROR)

    def test_service_leaves_logging_alone_by_default(self):
        self.root.setLevel(logging.INFO)
        CoverageAnalysisService(EngineConfig(log_level='ERROR'))
        self.assertEqual(self.root.level, logging.INFO)


class TestCoverageAnalysisService(unittest.TestCase):

    def setUp(self):
        self.service = CoverageAnalysisService(EngineConfig())

    def test_recommend_add_ons(self):
        analysis = self.service.recommend_add_ons(Household.from_ages([40], states=['TX']))
        self.assertEqual(len(analysis.recommendations), 5)

    def test_analyze_magi(self):
        analysis = self.service.analyze_magi(MAGIOptimizerInput(82000, 2, 'TX', 45))
        self.assertEqual(analysis.current.fpl_percent, 416)

    def test_optimize_hsa(self):
        data = HSAInput('individual', 40, 80000, 0.22, 300, 3000)
        self.assertEqual(self.service.optimize_hsa(data).recommended_contribution, 4150)

    def test_errors_logged_and_reraised(self):
        household = Household(adults=[Person(40)], residences=[Residence('ZZ')])
        with self.assertLogs('coverage_service', level='ERROR'):
            with self.assertRaises(UnknownStateError):
                self.service.recommend_add_ons(household)

    def test_magi_unknown_state_logged_and_reraised(self):
        with self.assertLogs('coverage_service', level='ERROR'):
            with self.assertRaises(UnknownStateError):
                self.service.analyze_magi(MAGIOptimizerInput(10000, 1, 'ZZ', 40))

    def test_unsupported_year_fails_at_construction(self):
        with self.assertLogs('coverage_service', level='WARNING'):
            with self.assertRaises(UnknownTaxYearError):
                CoverageAnalysisService(EngineConfig(tax_year=1999))


if __name__ == '__main__':
    unittest.main()
