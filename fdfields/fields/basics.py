r"""@package fdfields.fields.basics

Collection of basic scalarexpr.ScalarExpression subclasses.

The leaves of expression trees are Constant, ScalarField, SympyField and
DiscretizedField. The composite nodes BinOp, UnOp and NegationOp are
usually not created directly but through the arithmetic operators of
scalar expressions and the elementary functions sin(), cos(), tan(), exp()
and log() defined here.
"""

import operator

import numpy as np
import sympy as sp
from mpmath import mp

from .common import Dynamic, DimensionMismatchError
from .evaluators import TrivialEvaluator
from .scalarexpr import ScalarExpression


__all__ = [
    "Constant",
    "ScalarField",
    "SympyField",
    "DiscretizedField",
    "BinOp",
    "UnOp",
    "NegationOp",
    "sin",
    "cos",
    "tan",
    "exp",
    "log",
]


## Binary operations by symbol: (floating point, mpmath) implementations.
_OPERATORS = {
    '+': (np.add, operator.add),
    '-': (np.subtract, operator.sub),
    '*': (np.multiply, operator.mul),
    '/': (np.divide, operator.truediv),
}

## Elementary functions known by name. They are looked up in the module
## returned by scalarexpr.FieldExpression.math_module().
_FUNCTIONS = ('sin', 'cos', 'tan', 'exp', 'log')


def _func_name(func):
    r"""Short name of a callable for printing."""
    return getattr(func, '__name__', None) or type(func).__name__


class Constant(ScalarExpression):
    r"""Represent an expression that is a constant.

    Represents an expression of the form \f$ f(x) = c = \mathrm{const} \f$.
    The dimension is only used to check compatibility with other
    expressions. The value of the constant can be accessed through the `c`
    property.
    """

    def __init__(self, value=0, dim=Dynamic, size=None, name='const'):
        r"""Init function.

        Args:
            value:  The constant value.
            dim:    Dimension of the points the expression accepts.
            size:   Runtime dimension for `Dynamic` expressions.
            name:   Name of the expression (e.g. for print_tree()).
        """
        super(Constant, self).__init__(dim=dim, size=size, name=name)
        ## The constant value this expression represents.
        self.c = value

    def _expr_str(self):
        return "%r" % self.c

    @property
    def nice_name(self):
        return "%s (%r)" % (self.name, self.c)

    def _evaluator(self, use_mp):
        c = mp.mpf(self.c) if use_mp else np.float64(self.c)
        return lambda x: c


class ScalarField(ScalarExpression):
    r"""Scalar field defined by a Python callable.

    The callable receives the point as 1-D numpy array (of floats, or of
    `mp.mpf` values for `mpmath` evaluators) and should return a number.
    It should use `mpmath` functions if arbitrary precision evaluation is
    desired.

    Note that expressions built from lambda functions cannot be pickled.
    """

    def __init__(self, func, dim=Dynamic, size=None, name=None):
        r"""Init function.

        Args:
            func:   Callable taking a point.
            dim:    Dimension of the points the field is defined on.
            size:   Runtime dimension for `Dynamic` fields.
            name:   Name of the expression (e.g. for print_tree()).
        """
        if not callable(func):
            raise TypeError("`func` argument must be callable.")
        super(ScalarField, self).__init__(dim=dim, size=size, name=name)
        ## The wrapped function.
        self.func = func

    def _expr_str(self):
        return "f(x), where f=%s" % _func_name(self.func)

    def _evaluator(self, use_mp):
        return self.func


class SympyField(ScalarExpression):
    r"""Scalar field defined by a SymPy expression.

    The expression is turned into a numerical function at evaluator
    creation, using numpy for floating point and `mpmath` for arbitrary
    precision evaluators.

    @b Examples

    ```
        f = SympyField("sin(x) * exp(y)", "x y")
        f.evaluate([0.5, 1.0])
    ```
    """

    def __init__(self, expr, symbols, name=None):
        r"""Init function.

        Args:
            expr:   SymPy expression or string that SymPy can parse.
            symbols: Sequence of the SymPy symbols the point components are
                    substituted for (in that order), or a string of
                    whitespace or comma separated symbol names.
            name:   Name of the expression (e.g. for print_tree()).
        """
        if isinstance(symbols, str):
            symbols = sp.symbols(symbols, seq=True)
        symbols = tuple(symbols)
        if not symbols:
            raise ValueError("At least one symbol is required.")
        super(SympyField, self).__init__(dim=len(symbols), name=name)
        ## The symbolic expression (a SymPy object).
        self.sym_expr = sp.sympify(expr)
        ## The symbols corresponding to the point components.
        self.symbols = symbols

    def _expr_str(self):
        return "%s, where x=(%s)" % (
            self.sym_expr, ", ".join(str(s) for s in self.symbols)
        )

    def _evaluator(self, use_mp):
        fn = sp.lambdify(self.symbols, self.sym_expr,
                         modules='mpmath' if use_mp else 'numpy')
        return lambda x: fn(*x)


class DiscretizedField(ScalarExpression):
    r"""Scalar field whose values come from a table of data.

    The value of this field does not depend on the point it is evaluated at.
    Instead, forward() selects a row of a (num_rows x 1) table and the field
    evaluates to the value in that row until the next forward() call.
    Typically, the rows correspond to e.g. quadrature nodes of a mesh and a
    whole expression tree is forwarded to node `i` before evaluating it at
    that node.

    The data is not copied if it is a numpy array, i.e. changes to the array
    are visible to this field. Before the first call to forward(), the field
    evaluates to NaN.
    """

    def __init__(self, data, dim=Dynamic, size=None, name='data'):
        r"""Init function.

        Args:
            data:   Array of shape ``(num_rows, 1)`` (only the first column is
                    used if there are more) or a 1-D array.
            dim:    Dimension of the points the field is defined on.
            size:   Runtime dimension for `Dynamic` fields.
            name:   Name of the expression (e.g. for print_tree()).
        """
        super(DiscretizedField, self).__init__(dim=dim, size=size, name=name)
        data = np.asarray(data)
        if data.ndim == 1:
            data = data.reshape(-1, 1)
        if data.ndim != 2 or data.shape[1] < 1:
            raise ValueError("Data must be a table with at least one column "
                             "(got shape %s)." % (data.shape,))
        self._data = data
        self._row = None
        self._value = np.nan

    @property
    def data(self):
        r"""The referenced table."""
        return self._data

    @property
    def row(self):
        r"""Row selected by the last forward() call (`None` before)."""
        return self._row

    @property
    def nice_name(self):
        return "%s (row %r of %d)" % (self.name, self._row, self._data.shape[0])

    def forward(self, i):
        r"""Select row `i` of the data as the current value."""
        i = operator.index(i)
        num_rows = self._data.shape[0]
        if not 0 <= i < num_rows:
            raise IndexError("Row %d out of range for data with %d rows."
                             % (i, num_rows))
        self._row = i
        self._value = self._data[i, 0]
        return self

    def _expr_str(self):
        return "data[i, 0], where i=%r, rows=%d" % (self._row,
                                                     self._data.shape[0])

    def _evaluator(self, use_mp):
        leaf = self
        if use_mp:
            return lambda x: mp.mpf(leaf._value)
        return lambda x: leaf._value


class BinOp(ScalarExpression):
    r"""Combine two expressions with a binary operation.

    Represents an expression of the form \f$ f(x) = op(e_1(x), e_2(x)) \f$.
    Both expressions need to have the same dimension.
    """

    def __init__(self, expr1, expr2, op='+', name=None):
        r"""Init function.

        Args:
            expr1:  First operand.
            expr2:  Second operand.
            op:     One of ``'+', '-', '*', '/'`` or a callable taking two
                    values.
            name:   Name of the expression (e.g. for print_tree()).
        """
        if not (isinstance(expr1, ScalarExpression)
                and isinstance(expr2, ScalarExpression)):
            raise TypeError("Operands must be scalar expressions.")
        if expr1.static_inner_size != expr2.static_inner_size:
            raise DimensionMismatchError(
                "Cannot combine fields with different dimensions %r and %r."
                % (expr1.static_inner_size, expr2.static_inner_size)
            )
        if expr1.is_dynamic() and expr1.inner_size() != expr2.inner_size():
            raise DimensionMismatchError(
                "Cannot combine dynamic fields of runtime dimensions %d and %d."
                % (expr1.inner_size(), expr2.inner_size())
            )
        if not (op in _OPERATORS if isinstance(op, str) else callable(op)):
            raise ValueError("Unknown operation: %r" % (op,))
        super(BinOp, self).__init__(e1=expr1, e2=expr2,
                                    dim=expr1.static_inner_size,
                                    size=expr1._runtime_size(),
                                    name=name if name else 'binop')
        self._op = op

    @property
    def op(self):
        r"""The operation symbol or callable."""
        return self._op

    @property
    def nice_name(self):
        if isinstance(self._op, str):
            return "%s (%s)" % (self.name, self._op)
        return "%s (%s)" % (self.name, _func_name(self._op))

    def _expr_str(self):
        if isinstance(self._op, str):
            return ("e1 %s e2, where e1=%s, e2=%s"
                    % (self._op, self.e1.str(), self.e2.str()))
        return ("f(e1, e2), where f=%s, e1=%s, e2=%s"
                % (_func_name(self._op), self.e1.str(), self.e2.str()))

    def _evaluator(self, use_mp):
        e1 = self.e1.evaluator(use_mp)
        e2 = self.e2.evaluator(use_mp)
        f1 = e1.function()
        f2 = e2.function()
        if isinstance(self._op, str):
            op = _OPERATORS[self._op][1 if use_mp else 0]
        else:
            op = self._op
        def f(x):
            return op(f1(x), f2(x))
        return TrivialEvaluator(self, f, use_mp, [e1, e2])


class UnOp(ScalarExpression):
    r"""Apply a function to an expression.

    Represents an expression of the form \f$ f(x) = g(e(x)) \f$.
    """

    def __init__(self, expr, func, name=None):
        r"""Init function.

        Args:
            expr:   The operand.
            func:   One of ``'sin', 'cos', 'tan', 'exp', 'log'`` or a callable
                    taking one value.
            name:   Name of the expression (e.g. for print_tree()). Defaults
                    to the name of the function.
        """
        if not isinstance(expr, ScalarExpression):
            raise TypeError("Operand must be a scalar expression.")
        if not (func in _FUNCTIONS if isinstance(func, str) else callable(func)):
            raise ValueError("Unknown function: %r" % (func,))
        if not name:
            name = func if isinstance(func, str) else _func_name(func)
        super(UnOp, self).__init__(e=expr, dim=expr.static_inner_size,
                                   size=expr._runtime_size(), name=name)
        self._func = func

    @property
    def func(self):
        r"""The function name or callable."""
        return self._func

    def _expr_str(self):
        fname = self._func if isinstance(self._func, str) else _func_name(self._func)
        return "%s(e), where e=%s" % (fname, self.e.str())

    def _evaluator(self, use_mp):
        e = self.e.evaluator(use_mp)
        fe = e.function()
        if isinstance(self._func, str):
            g = getattr(self.math_module(use_mp), self._func)
        else:
            g = self._func
        def f(x):
            return g(fe(x))
        return TrivialEvaluator(self, f, use_mp, [e])


class NegationOp(ScalarExpression):
    r"""Negate an expression.

    Represents an expression of the form \f$ f(x) = -e(x) \f$.
    """

    def __init__(self, expr, name='neg'):
        r"""Init function.

        Args:
            expr:   The expression to negate.
            name:   Name of the expression (e.g. for print_tree()).
        """
        if not isinstance(expr, ScalarExpression):
            raise TypeError("Operand must be a scalar expression.")
        super(NegationOp, self).__init__(e=expr, dim=expr.static_inner_size,
                                         size=expr._runtime_size(), name=name)

    def _expr_str(self):
        return "-e, where e=%s" % self.e.str()

    def _evaluator(self, use_mp):
        e = self.e.evaluator(use_mp)
        fe = e.function()
        return TrivialEvaluator(self, lambda x: -fe(x), use_mp, [e])


def sin(expr):
    r"""Sine of a scalar expression."""
    return UnOp(expr, 'sin')


def cos(expr):
    r"""Cosine of a scalar expression."""
    return UnOp(expr, 'cos')


def tan(expr):
    r"""Tangent of a scalar expression."""
    return UnOp(expr, 'tan')


def exp(expr):
    r"""Exponential of a scalar expression."""
    return UnOp(expr, 'exp')


def log(expr):
    r"""Natural logarithm of a scalar expression."""
    return UnOp(expr, 'log')
