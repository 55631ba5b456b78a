#!/usr/bin/env python3

import unittest
import sys
import pickle
import warnings
from io import StringIO
from contextlib import redirect_stdout

import numpy as np
from mpmath import mp

from testutils import FdTestCase
from .common import Dynamic, DimensionMismatchError
from .scalarexpr import ScalarExpression, ExpressionWarning, DEFAULT_STEP
from .basics import Constant, ScalarField, SympyField, DiscretizedField
from .basics import sin
from .evaluators import _Evaluator


class _Square(ScalarExpression):
    r"""Sum of squares of the point components, with a factor."""
    def __init__(self, a=1, dim=2, **kw):
        super(_Square, self).__init__(dim=dim, **kw)
        self.a = a
    def _expr_str(self): return "a |x|**2, where a=%r" % self.a
    def _evaluator(self, use_mp):
        a = self.a
        return lambda x: a * sum(xi**2 for xi in x)

class _Scaled(ScalarExpression):
    def __init__(self, expr, a=1):
        super(_Scaled, self).__init__(x=expr, dim=expr.static_inner_size)
        self.a = a
    def _expr_str(self):
        return "a x, where a=%r, x=%s" % (self.a, self.x.str())
    def _evaluator(self, use_mp):
        a = self.a
        fx = self.x.evaluator(use_mp).function()
        return lambda p: a * fx(p)


class TestArity(FdTestCase):
    def test_static(self):
        expr = _Square(dim=3)
        self.assertEqual(expr.static_inner_size, 3)
        self.assertEqual(expr.inner_size(), 3)
        self.assertFalse(expr.is_dynamic())
        with self.assertRaises(TypeError):
            expr.resize(4)

    def test_dynamic(self):
        expr = _Square(dim=Dynamic, size=2)
        self.assertIs(expr.static_inner_size, Dynamic)
        self.assertTrue(expr.is_dynamic())
        self.assertEqual(expr.inner_size(), 2)
        expr.resize(5)
        self.assertEqual(expr.inner_size(), 5)
        self.assertAlmostEqual(expr.evaluate(np.ones(5)), 5.0)
        with self.assertRaises(DimensionMismatchError):
            expr.evaluate(np.ones(2))
        with self.assertRaises(ValueError):
            expr.resize(0)

    def test_dynamic_default_size(self):
        self.assertEqual(Constant(1.0).inner_size(), 0)

    def test_invalid_dims(self):
        with self.assertRaises(ValueError):
            _Square(dim=0)
        with self.assertRaises(ValueError):
            _Square(dim=2.5)
        with self.assertRaises(DimensionMismatchError):
            _Square(dim=2, size=3)
        # Redundant but consistent size is fine.
        self.assertEqual(_Square(dim=2, size=2).inner_size(), 2)

    def test_point_checks(self):
        expr = _Square(dim=2)
        self.assertAlmostEqual(expr.evaluate([1., 2.]), 5.0)
        with self.assertRaises(DimensionMismatchError):
            expr.evaluate([1., 2., 3.])
        with self.assertRaises(DimensionMismatchError):
            expr.evaluate([[1., 2.]])

    def test_scalar_point_for_1d(self):
        expr = _Square(dim=1)
        self.assertAlmostEqual(expr.evaluate(3.0), 9.0)

    def test_dynamic_sentinel_pickles(self):
        self.assertIs(pickle.loads(pickle.dumps(Dynamic)), Dynamic)
        self.assertEqual(repr(Dynamic), "Dynamic")


class TestStep(FdTestCase):
    def test_default(self):
        self.assertEqual(_Square().step, DEFAULT_STEP)
        self.assertEqual(DEFAULT_STEP, 1e-3)

    def test_set_step(self):
        expr = _Square()
        expr.set_step(1e-2)
        self.assertEqual(expr.step, 1e-2)
        expr.step = 1e-4
        self.assertEqual(expr.step, 1e-4)
        with self.assertRaises(ValueError):
            expr.set_step(0)
        with self.assertRaises(ValueError):
            expr.set_step(-1e-3)

    def test_small_step_warns(self):
        expr = _Square()
        with warnings.catch_warnings(record=True) as w:
            warnings.simplefilter("always")
            expr.set_step(1e-10)
        self.assertEqual(len(w), 1)
        self.assertTrue(issubclass(w[0].category, ExpressionWarning))
        self.assertEqual(expr.step, 1e-10)


class TestExpressions(FdTestCase):
    def test_repr(self):
        expr = _Scaled(_Square(a=2), a=3)
        self.assertEqual(repr(expr),
                         "<_Scaled(a x, where a=3, x=(a |x|**2, where a=2))>")

    def test_name(self):
        expr = _Square()
        self.assertEqual(expr.name, "_Square")
        expr.name = "foo"
        self.assertEqual(expr.name, "foo")

    def test_number_sub_expression(self):
        expr = _Scaled(_Square(), a=2)
        expr.set_sub_exprs(x=4)
        self.assertIsType(expr.x, Constant)
        self.assertEqual(expr.x.inner_size(), 2)
        self.assertAlmostEqual(expr.evaluate([1., 1.]), 8.0)
        with self.assertRaises(TypeError):
            expr.set_sub_exprs(x="foo")

    def test_traverse_tree(self):
        a = _Square(name="a")
        b = Constant(1.0, dim=2, name="b")
        expr = sin(a) + b
        names = [(len(parents), key, e.name)
                 for parents, key, e in expr.traverse_tree(include_root=True)]
        self.assertEqual(names, [
            (0, "", "binop"),
            (1, "e1", "sin"),
            (2, "e", "a"),
            (1, "e2", "b"),
        ])

    def test_print_tree(self):
        expr = _Square(name="sq") * 2
        out = StringIO()
        with redirect_stdout(out):
            expr.print_tree()
        lines = out.getvalue().splitlines()
        self.assertEqual(lines[0], "root [binop (*)] <BinOp>")
        self.assertEqual(lines[1], ". e1 [sq] <_Square>")
        self.assertEqual(lines[2], ". e2 [const (2)] <Constant>")

    def test_pickle(self):
        expr = _Scaled(_Square(a=-1), a=1.5)
        expr.name = "foo"
        expr = pickle.loads(pickle.dumps(expr))
        self.assertIs(type(expr), _Scaled)
        self.assertEqual(expr.a, 1.5)
        self.assertIs(type(expr.x), _Square)
        self.assertEqual(expr.x.a, -1)
        self.assertEqual(expr.name, "foo")
        self.assertAlmostEqual(expr.evaluate([1., 2.]), -7.5)

    def test_pickle_mp_constant(self):
        expr = Constant(mp.pi, dim=3) * SympyField("x*y*z", "x y z")
        expr = pickle.loads(pickle.dumps(expr))
        self.assertIs(expr.e1.c, mp.pi)
        self.assertEqual(expr.static_inner_size, 3)
        with mp.workdps(30):
            self.assertTrue(mp.almosteq(expr.evaluate([1, 2, 1], use_mp=True),
                                        2*mp.pi))


class TestEvaluators(FdTestCase):
    def test_reuse(self):
        expr = _Scaled(_Square(), a=2)
        ev = expr.evaluator()
        self.assertEqual(ev.inner_size(), 2)
        self.assertIs(ev.expr, expr)
        for x in np.linspace(-1, 1, 5):
            self.assertAlmostEqual(ev([x, 1.]), 2*(x**2 + 1))

    def test_snapshot(self):
        inner = _Square()
        expr = _Scaled(inner, a=2)
        ev = expr.evaluator()
        expr.a = 10
        self.assertAlmostEqual(ev([1., 0.]), 2.0)
        self.assertAlmostEqual(expr.evaluate([1., 0.]), 10.0)

    def test_mpmath(self):
        expr = sin(SympyField("x + y", "x y"))
        with mp.workdps(40):
            value = expr.evaluate([mp.mpf(1)/3, mp.mpf(2)/3], use_mp=True)
            self.assertIsInstance(value, mp.mpf)
            self.assertTrue(mp.almosteq(value, mp.sin(1), rel_eps=mp.mpf(10)**-35))

    def test_evaluator_base_is_abstract(self):
        with self.assertRaises(TypeError):
            _Evaluator(_Square(), False)

    def test_context(self):
        with ScalarExpression.context(use_mp=True, dps=50) as ctx:
            self.assertIs(ctx, mp)
            self.assertEqual(mp.dps, 50)
        with ScalarExpression.context(use_mp=False) as ctx:
            self.assertIs(ctx, np)

    def test_force_evaluation_mode(self):
        expr = _Square()
        expr.force_evaluation_mode(True)
        self.assertTrue(expr.evaluator(use_mp=False).use_mp)
        expr.force_evaluation_mode(None)
        self.assertFalse(expr.evaluator(use_mp=False).use_mp)


class TestForwardAndSample(FdTestCase):
    def test_forward_chain(self):
        data = np.array([[1.0], [2.0], [3.0]])
        u = DiscretizedField(data, dim=2)
        expr = u * _Square()
        self.assertIs(expr.forward(2), expr)
        self.assertAlmostEqual(expr.forward(1).evaluate([1., 1.]), 4.0)

    def test_sample(self):
        expr = _Square(dim=2) + 1
        points = np.array([[0., 0.], [1., 0.], [1., 2.]])
        self.assertListAlmostEqual(expr.sample(points), [1., 2., 6.])

    def test_sample_1d(self):
        expr = ScalarField(lambda x: 2*x[0], dim=1)
        self.assertListAlmostEqual(expr.sample([1., 2., 3.]), [2., 4., 6.])

    def test_sample_forward(self):
        data = np.array([10., 20., 30.])
        u = DiscretizedField(data, dim=2)
        expr = u + _Square()
        points = np.array([[0., 0.], [1., 0.], [1., 2.]])
        self.assertListAlmostEqual(expr.sample(points, forward=True),
                                   [10., 21., 35.])
        self.assertEqual(u.row, 2)

    def test_sample_invalid(self):
        with self.assertRaises(DimensionMismatchError):
            _Square().sample(np.ones((2, 2, 2)))


def run_tests():
    suite = unittest.TestLoader().loadTestsFromModule(sys.modules[__name__])
    return len(unittest.TextTestRunner(verbosity=2).run(suite).failures)


if __name__ == '__main__':
    unittest.main()
