#!/usr/bin/env python3
# File: tests/run_tests.py
"""
Test runner for the Parking Allocator

Usage:
    python tests/run_tests.py                  # every suite
    python tests/run_tests.py unit             # one directory
    python tests/run_tests.py unit.test_aggregates.TestParkingLotRelease
"""

import sys
import unittest
from pathlib import Path

# Make the repository root importable when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent))

TESTS_DIR = Path(__file__).parent


def run_all_tests(start_dir: Path = TESTS_DIR):
    """Discover and run every test_*.py module below ``start_dir``"""
    test_loader = unittest.TestLoader()
    test_suite = test_loader.discover(
        str(start_dir), pattern='test_*.py', top_level_dir=str(TESTS_DIR.parent)
    )
    return unittest.TextTestRunner(verbosity=2).run(test_suite)


def run_specific_test(test_name: str):
    """Run a directory (``unit``) or a dotted module / test case name"""
    if (TESTS_DIR / test_name).is_dir():
        return run_all_tests(TESTS_DIR / test_name)

    test_suite = unittest.TestLoader().loadTestsFromName(f'tests.{test_name}')
    return unittest.TextTestRunner(verbosity=2).run(test_suite)


if __name__ == "__main__":
    if len(sys.argv) > 1:
        result = run_specific_test(sys.argv[1])
    else:
        result = run_all_tests()

    sys.exit(0 if result.wasSuccessful() else 1)
