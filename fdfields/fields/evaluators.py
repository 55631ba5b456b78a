r"""@package fdfields.fields.evaluators

Evaluator objects created by scalarexpr.FieldExpression.evaluator().
"""

from abc import ABCMeta, abstractmethod

from .common import _as_point


__all__ = [
    "TrivialEvaluator",
]


class _Evaluator(metaclass=ABCMeta):
    r"""Common base of evaluators.

    Only code defining new kinds of expressions needs to know about this
    class. Everyone else just calls the objects returned by evaluator().

    An evaluator is a snapshot of an expression tree taken when it is
    created: the tree structure, step sizes, evaluation mode and the arity
    are fixed at that point. The only state read at call time is the current
    value of data-backed leaves, which is what makes the usual loop

    \code
        ev = expr.evaluator()
        for i, p in enumerate(points):
            ev.forward(i)
            values[i] = ev(p)
    \endcode

    work with a single evaluator.

    Calling the evaluator checks and converts the point. Composite
    evaluators combine the unchecked callables returned by function() of
    their sub-evaluators, so the check happens once per evaluation.
    """
    def __init__(self, expr, use_mp, sub_evaluators=None):
        r"""Store the settings shared by all evaluators.

        @param expr
            Root node of the snapshotted (sub)tree.
        @param use_mp
            Whether the evaluator computes with `mpmath` arbitrary precision
            or numpy floating point arithmetic.
        @param sub_evaluators
            Evaluators of the children, kept alive with this one.
        """
        self._expr = expr
        self._inner_size = expr.inner_size()
        ## Whether this evaluator uses `mpmath` (if `True`) or floats.
        self.use_mp = use_mp
        self._sub_evaluators = [] if sub_evaluators is None else sub_evaluators

    @property
    def expr(self):
        r"""The expression this evaluator was created for."""
        return self._expr

    def inner_size(self):
        r"""Dimension of the points this evaluator accepts."""
        return self._inner_size

    def forward(self, i):
        r"""Forward a sample index to the data-backed leaves of the expression."""
        self._expr.forward(i)
        return self

    def __call__(self, x):
        r"""Value of the field at point `x` (checked and converted)."""
        return self.function()(_as_point(x, self._inner_size, self.use_mp))

    @abstractmethod
    def function(self):
        r"""Return the unchecked callable of this evaluator.

        The returned function expects a point already converted by the
        caller, i.e. a 1-D array of the right length with elements matching
        the evaluation mode.
        """
        pass


class TrivialEvaluator(_Evaluator):
    r"""Evaluator wrapping a plain callable.

    If your expression can be represented by a simple (lambda) function of
    the converted point, this convenience class can be used to bypass the
    need to implement a full evaluator child class.
    """
    def __init__(self, expr, f, use_mp, sub_evaluators=None):
        r"""Wrap `f` as evaluator of `expr`.

        @param expr
            Node the evaluator belongs to.
        @param f
            Callable taking the converted point. This function should respect
            the `use_mp` setting supplied to the
            scalarexpr.FieldExpression._evaluator() call which usually creates
            these evaluators.
        @param use_mp
            Evaluation mode of `f`.
        @param sub_evaluators
            Evaluators of the children, kept alive with this one.
        """
        super(TrivialEvaluator, self).__init__(expr, use_mp,
                                               sub_evaluators=sub_evaluators)
        if not callable(f):
            raise TypeError("`f` argument must be callable.")
        self._f = f

    def __call__(self, x):
        r"""Value of the field at point `x` (checked and converted)."""
        return self._f(_as_point(x, self._inner_size, self.use_mp))

    def function(self):
        return self._f
