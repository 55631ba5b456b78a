r"""@package testutils

Common base class and settings for the fdfields unit tests.

All test cases derive from FdTestCase, which reads the switches collected
in TestSettings. These are set by the `tests.py` runner from its command
line.

Tests decorated with slowtest (e.g. convergence studies) are skipped
unless `TestSettings.skipslow` has been set to `False`, which `tests.py`
does for `--run-slow-tests`.
"""

import sys
import functools
import unittest
import time

import numpy as np


__all__ = [
    "FdTestCase",
    "TestSettings",
    "slowtest",
]


def slowtest(func):
    """Mark a test as slow, i.e. skip it unless slow tests are enabled."""
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        if TestSettings.skipslow:
            self.skipTest("slow test (use --run-slow-tests)")
        return func(self, *args, **kwargs)
    return wrapper


class FdTestCase(unittest.TestCase):
    """Base class of all fdfields test cases.

    Additions to `unittest.TestCase`:
        * each test's duration is printed (with `verbosity=2`) when
          TestSettings.timing is set
        * failureHook() is called after a failed or errored test
        * assertions for comparing floating point sequences and arrays
    """

    _result = None
    _start_time = None
    _problems_before = 0

    def run(self, result=None):
        self._result = result
        self._problems_before = self._num_problems()
        return super(FdTestCase, self).run(result)

    def _num_problems(self):
        r"""Number of errors and failures recorded so far."""
        # Runners other than unittest's may pass results without these lists.
        errors = getattr(self._result, 'errors', None)
        failures = getattr(self._result, 'failures', None)
        if errors is None or failures is None:
            return 0
        return len(errors) + len(failures)

    def setUp(self):
        self._start_time = time.time()
        self.addCleanup(self._after_test)

    def _after_test(self):
        failed = self._num_problems() > self._problems_before
        if failed:
            self.failureHook(self._result)
        elif (TestSettings.timing
              and getattr(self._result, 'showAll', False)):
            print("(%.4f seconds) ... " % (time.time() - self._start_time),
                  file=sys.stderr, end='')

    def failureHook(self, result):
        r"""Called after a test failed or raised an error.

        Override to e.g. print the expression tree the test worked on.
        """
        pass

    def assertIsType(self, obj, cls):
        r"""Assert that `type(obj)` is `cls` (subclasses don't count)."""
        self.assertIs(type(obj), cls)

    def assertListAlmostEqual(self, a, b, places=None, delta=None):
        r"""Element-wise assertAlmostEqual() for two sequences of numbers.

        Either `places` (default `7`) or `delta` may be given. All differing
        elements are reported (up to a limit).
        """
        if places is not None and delta is not None:
            raise TypeError("specify either `places` or `delta`, not both")
        if len(a) != len(b):
            raise self.failureException(
                "sequences differ in length: %d != %d" % (len(a), len(b))
            )
        if delta is None:
            places = 7 if places is None else places
            def close(x, y):
                return round(abs(x - y), places) == 0
        else:
            def close(x, y):
                return abs(x - y) <= delta
        bad = [i for i, (x, y) in enumerate(zip(a, b))
               if not (x == y or close(x, y))]
        if bad:
            lines = ["  at %d: %r != %r (diff %r)" % (i, a[i], b[i], b[i] - a[i])
                     for i in bad[:10]]
            if len(bad) > 10:
                lines.append("  ...")
            raise self.failureException(
                "%d of %d elements differ:\n%s"
                % (len(bad), len(a), "\n".join(lines))
            )

    def assertVectorAlmostEqual(self, a, b, delta=1e-9):
        r"""Assert that the Euclidean norm of `a - b` is below `delta`.

        Works for arrays of any (equal) shape, e.g. matrices.
        """
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
        if a.shape != b.shape:
            raise self.failureException(
                "shapes differ: %s != %s" % (a.shape, b.shape)
            )
        dist = np.linalg.norm(a - b)
        if not dist < delta:
            raise self.failureException(
                "%s != %s (distance %g >= %g)"
                % (a.tolist(), b.tolist(), dist, delta)
            )


class TestSettings(object):
    """Switches set by the test runner."""
    ## Stop at the first failure or error.
    failfast = False
    ## Whether test output is buffered (informational only).
    buffering = False
    ## Print the duration of each test.
    timing = False
    ## Skip tests decorated with slowtest.
    skipslow = True
