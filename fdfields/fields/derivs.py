r"""@package fdfields.fields.derivs

Finite difference derivatives of scalar expressions.

The expressions defined here are created by
scalarexpr.ScalarExpression.gradient() and
scalarexpr.ScalarExpression.hessian(). They approximate the derivatives
using central differences with the step size of the differentiated
expression. The weights of the stencils are computed by
numutils.fd_weights().

These are approximations: the truncation error is of order
\f$ O(h^p) \f$, where \f$ p \f$ is the `fd_order` (default `2`), and round-off
errors grow like \f$ \varepsilon/h \f$ (gradient) and \f$ \varepsilon/h^2 \f$
(Hessian) for small steps.
"""

import numpy as np
from mpmath import mp

from ..numutils import fd_weights
from .evaluators import TrivialEvaluator
from .scalarexpr import FieldExpression, ScalarExpression


__all__ = [
    "GradientOp",
    "HessianOp",
]


def _shifted(x, shifts):
    r"""Copy of `x` with `shifts` (pairs of index and offset) added."""
    y = x.copy()
    for i, d in shifts:
        y[i] += d
    return y


class _DerivativeOp(FieldExpression):
    r"""Base class for the finite difference derivative expressions."""

    def __init__(self, expr, step=None, fd_order=2, name=None):
        r"""Init function.

        Args:
            expr:   The scalar expression to differentiate.
            step:   Step size. Default is to use the step of `expr`.
            fd_order: Order of accuracy (positive even integer). Default is
                    `2`, i.e. the classic three point stencils.
            name:   Name of the expression (e.g. for print_tree()).
        """
        if not isinstance(expr, ScalarExpression):
            raise TypeError("Can only differentiate scalar expressions.")
        fd_weights(1, fd_order)
        super(_DerivativeOp, self).__init__(
            e=expr, dim=expr.static_inner_size,
            size=expr._runtime_size(),
            step=expr.step if step is None else step, name=name,
        )
        self._fd_order = fd_order

    @property
    def fd_order(self):
        r"""Convergence order of the finite differences."""
        return self._fd_order

    @property
    def nice_name(self):
        return "%s (h=%g, order %d)" % (self.name, self.step, self._fd_order)

    def _stencil(self, deriv, use_mp):
        r"""Stencil of pairs `(offset*h, weight)` for the given mode."""
        if use_mp:
            h = mp.mpf(self.step)
            return [(k*h, mp.mpf(w.p)/w.q)
                    for k, w in fd_weights(deriv, self._fd_order)]
        h = self.step
        return [(k*h, float(w)) for k, w in fd_weights(deriv, self._fd_order)]


class GradientOp(_DerivativeOp):
    r"""Gradient of a scalar expression using central differences.

    Evaluating this expression at a point in \f$ R^N \f$ returns a numpy
    array of shape ``(N,)``.
    """

    def __init__(self, expr, step=None, fd_order=2, name='grad'):
        super(GradientOp, self).__init__(expr, step=step, fd_order=fd_order,
                                         name=name)

    def _expr_str(self):
        return "grad e, where h=%r, e=%s" % (self.step, self.e.str())

    def _evaluator(self, use_mp):
        e = self.e.evaluator(use_mp)
        f = e.function()
        n = self.inner_size()
        stencil = self._stencil(1, use_mp)
        h = mp.mpf(self.step) if use_mp else self.step
        dtype = object if use_mp else float
        def grad(x):
            result = np.empty(n, dtype=dtype)
            for i in range(n):
                result[i] = sum(w * f(_shifted(x, [(i, d)]))
                                for d, w in stencil) / h
            return result
        return TrivialEvaluator(self, grad, use_mp, [e])


class HessianOp(_DerivativeOp):
    r"""Hessian of a scalar expression using central differences.

    Diagonal elements use the second derivative stencil, mixed derivatives
    the product of the first derivative stencils along both axes.
    Evaluating this expression at a point in \f$ R^N \f$ returns a symmetric
    numpy array of shape ``(N, N)``.
    """

    def __init__(self, expr, step=None, fd_order=2, name='hess'):
        super(HessianOp, self).__init__(expr, step=step, fd_order=fd_order,
                                        name=name)

    def _expr_str(self):
        return "hess e, where h=%r, e=%s" % (self.step, self.e.str())

    def _evaluator(self, use_mp):
        e = self.e.evaluator(use_mp)
        f = e.function()
        n = self.inner_size()
        stencil1 = self._stencil(1, use_mp)
        stencil2 = self._stencil(2, use_mp)
        h = mp.mpf(self.step) if use_mp else self.step
        dtype = object if use_mp else float
        def hess(x):
            result = np.empty((n, n), dtype=dtype)
            for i in range(n):
                result[i, i] = sum(w * f(_shifted(x, [(i, d)]))
                                   for d, w in stencil2) / h**2
                for j in range(i+1, n):
                    result[i, j] = result[j, i] = sum(
                        wi * wj * f(_shifted(x, [(i, di), (j, dj)]))
                        for di, wi in stencil1
                        for dj, wj in stencil1
                    ) / h**2
            return result
        return TrivialEvaluator(self, hess, use_mp, [e])
