#!/usr/bin/env python3
r"""Run all unit tests of the fdfields package.

Usage:

    ./tests.py [-f|--failfast] [-b|--buffer] [-t|--timing]
               [-s|--run-slow-tests] [-v|--verbose]
"""

import logging
import unittest
import os
import sys

import os.path as op
sys.path.insert(0, op.dirname(op.realpath(__file__)))

from testutils import TestSettings


def run_tests():
    failfast = '-f' in sys.argv or '--failfast' in sys.argv
    buffering = '-b' in sys.argv or '--buffer' in sys.argv
    timing = '-t' in sys.argv or '--timing' in sys.argv
    runSlow = '-s' in sys.argv or '--run-slow-tests' in sys.argv
    if '-v' in sys.argv or '--verbose' in sys.argv:
        logging.getLogger().setLevel(logging.INFO)
    TestSettings.failfast = failfast
    TestSettings.buffering = buffering
    TestSettings.timing = timing
    TestSettings.skipslow = not runSlow
    start_dir = os.path.dirname(os.path.realpath(__file__))
    logging.info("Discovering tests in: %s", start_dir)
    suite = unittest.TestLoader().discover(start_dir, pattern="test_*.py")
    logging.info("Found %d tests", suite.countTestCases())
    result = unittest.TextTestRunner(verbosity=2, failfast=failfast, buffer=buffering).run(suite)
    return len(result.failures) + len(result.errors)


if __name__ == '__main__':
    logging.basicConfig(format="%(levelname)s: %(message)s")
    sys.exit(1 if run_tests() else 0)
