"""Test utilities package for oligopoly laboratory tests.

This package provides shared utilities for testing, including database
management, sample game configurations, and common assertions.
"""

from .test_assertions import (
    assert_completed_game,
    assert_quantities_close,
    assert_round_result_structure,
)
from .test_data import (
    create_sample_bertrand_config,
    create_sample_cournot_config,
    create_sample_nfirm_config,
    create_sample_random_config,
)
from .test_db import TestDatabaseManager, create_test_database, create_test_repository

__all__ = [
    # Database utilities
    "TestDatabaseManager",
    "create_test_database",
    "create_test_repository",
    # Test data utilities
    "create_sample_bertrand_config",
    "create_sample_cournot_config",
    "create_sample_nfirm_config",
    "create_sample_random_config",
    # Assertion utilities
    "assert_completed_game",
    "assert_quantities_close",
    "assert_round_result_structure",
]
