r"""@package fdfields.fields.scalarexpr

Base of the field expression system.

A field expression describes a function of a point in \f$ R^N \f$. Leaf
expressions (constants, tabulated data, wrapped Python or SymPy functions)
can be combined using the usual arithmetic operators and elementary
functions into expression trees, which are then evaluated as one fused
function.

As in any expression system, the description of an expression is decoupled
from its evaluation: calling evaluator() on the root of a tree takes a
snapshot of the tree and returns a callable object evaluating it. Upon
creation of an evaluator, evaluators of all composing sub-expressions are
created. Also, at creation time, evaluators can be configured to either
evaluate using fast numpy floating point operations or slower `mpmath`
arbitrary precision operations.

As a simple example, let's build \f$ f(x, y) = \sin(x) e^y + 2 \f$ and
evaluate it:

~~~.py
x = ScalarField(lambda p: p[0], dim=2)
y = ScalarField(lambda p: p[1], dim=2)
expr = sin(x) * exp(y) + 2
ev = expr.evaluator()
print("f(.5, 1) =", ev([.5, 1.]))
~~~

The arity of an expression (the dimension \f$ N \f$ of the points it
accepts) is either fixed when the expression is created or `Dynamic`, in
which case the actual dimension is a runtime property that may be changed
via resize(). Expressions of different arity cannot be combined.
"""

from abc import ABCMeta, abstractmethod
from contextlib import contextmanager
import numbers
import warnings

import numpy as np
from mpmath import mp

from ..pickle_helpers import freeze_state, thaw_state
from .common import Dynamic, DimensionMismatchError
from .common import _check_static_size, _check_runtime_size
from .evaluators import _Evaluator, TrivialEvaluator


__all__ = [
    "FieldExpression",
    "ScalarExpression",
    "ExpressionWarning",
    "DEFAULT_STEP",
]


## Default step size used in finite difference approximations.
DEFAULT_STEP = 1e-3

## Step sizes below this issue a warning.
_SMALL_STEP = 1e-8


class ExpressionWarning(UserWarning):
    """Warning issued when expressions might not evaluate as expected."""
    pass


def _is_number(value):
    r"""Whether `value` can be promoted to a constant expression."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (numbers.Number, mp.mpf, type(mp.pi)))


class FieldExpression(metaclass=ABCMeta):
    """Abstract node of a field expression tree.

    A node only describes its part of the field. To get numbers out of it,
    an evaluator is created from the current state of the tree, either
    explicitly via evaluator() or implicitly by evaluate() and sample().

    Nodes know their children (see set_sub_exprs()), which is used to
    forward sample indices, to walk and print the tree, and to produce the
    string representation returned by `repr()`. Trees can be pickled if
    the contained callables can.

    Subclasses implement:
        * _expr_str(): the node's formula with parameter values
        * _evaluator(): an evaluator or plain callable for the node
    """
    # pylint: disable=too-many-public-methods

    def __init__(self, dim=Dynamic, size=None, step=DEFAULT_STEP, name=None,
                 verbosity=1, **sub_exprs):
        r"""Set up arity, step and children of the node.

        Children are passed as keyword arguments, the keyword becoming the
        attribute they are reachable under (e.g. `e1` and `e2` of a
        basics.BinOp). The keyword order is the order in which forward()
        and traverse_tree() visit them.

        Args:
            dim: (int or Dynamic, optional)
                Dimension of the points this expression accepts. If
                `Dynamic` (default), the dimension is taken from `size` and
                may be changed later using resize().
            size: (int, optional)
                Runtime dimension for `Dynamic` expressions. If given for a
                fixed dimension expression, it must agree with `dim`.
            step: (float, optional)
                Step size used in finite difference approximations of
                derivatives of this expression. Default is `1e-3`.
            name: (string, optional)
                Label shown by print_tree(), e.g. to tell apart several
                fields of the same type. Defaults to the class name.
            verbosity: (int, optional)
                How much subclasses should report about what they do.
                Default is `1`.
        """
        self.verbosity = verbosity
        self.__static_size = _check_static_size(dim)
        self.__dynamic_size = 0
        if dim is Dynamic:
            if size is not None:
                self.__dynamic_size = _check_runtime_size(size)
        elif size is not None and size != dim:
            raise DimensionMismatchError(
                "Runtime dimension %r does not match fixed dimension %d."
                % (size, dim)
            )
        self.__step = None
        self.set_step(step)
        self.__children = {}
        ## Label of this node in printed trees.
        self.name = name or type(self).__name__
        self.set_sub_exprs(**sub_exprs)
        ## `True`/`False` to override the `use_mp` argument of evaluator().
        self._mode_override = None

    @property
    def nice_name(self):
        r"""Name plus node specific details, as shown by print_tree()."""
        return self.name

    @property
    def static_inner_size(self):
        r"""Dimension fixed at construction (an integer or `Dynamic`)."""
        return self.__static_size

    def is_dynamic(self):
        r"""Whether the dimension of this expression is a runtime property."""
        return self.__static_size is Dynamic

    def inner_size(self):
        r"""Dimension of the points this expression accepts."""
        if self.__static_size is Dynamic:
            return self.__dynamic_size
        return self.__static_size

    def resize(self, n):
        r"""Change the runtime dimension of a `Dynamic` expression.

        Only this node is changed, not its sub-expressions.
        """
        if not self.is_dynamic():
            raise TypeError("Cannot resize expression of fixed dimension %d."
                            % self.__static_size)
        self.__dynamic_size = _check_runtime_size(n)

    def _runtime_size(self):
        r"""Size argument for creating a node of the same dimension."""
        if self.is_dynamic() and self.__dynamic_size:
            return self.__dynamic_size
        return None

    @property
    def step(self):
        r"""Step size used in finite difference approximations."""
        return self.__step
    @step.setter
    def step(self, h):
        self.set_step(h)

    def set_step(self, h):
        r"""Set the step size used by gradient() and hessian().

        Already created derivative expressions keep their step.
        """
        if not h > 0:
            raise ValueError("Step size must be positive (got %r)." % (h,))
        if h < _SMALL_STEP:
            warnings.warn(
                "Finite difference step %g is likely dominated by round-off "
                "errors." % h,
                ExpressionWarning
            )
        self.__step = h

    def forward(self, i):
        r"""Forward a sample index to all data-backed leaves of this tree.

        This calls forward() on every sub-expression, so that leaves of type
        basics.DiscretizedField pick up row `i` of their data. Expressions
        without such leaves are not affected. Call this on the root of the
        tree before evaluating it at the point corresponding to `i`.

        @return This expression, so that calls can be chained.
        """
        for child in self.__children.values():
            child.forward(i)
        return self

    def traverse_tree(self, include_root=False, parents=None):
        r"""Iterate depth-first over all nodes below this one.

        Yields triples ``(parents, key, node)``: the chain of ancestors from
        the root down to the node's parent, the attribute name the node is
        stored under in its parent, and the node.

        Args:
            include_root: Also yield this node first, as ``([], "", self)``.
            parents: Ancestors of this node (used for recursion).

        @b Examples
        \code
            leaves = [e for _, _, e in expr.traverse_tree()
                      if not list(e.traverse_tree())]
        \endcode
        """
        parents = list(parents or ())
        if include_root:
            yield parents, "", self
        chain = parents + [self]
        for key, child in self.__children.items():
            yield chain, key, child
            yield from child.traverse_tree(parents=chain)

    def print_tree(self, root_name='root', nice_names=True):
        r"""Print one line per node, indented by depth.

        A line shows the key of the node in its parent, its name and its
        class, e.g. ``. e1 [sin] <UnOp>``.

        Args:
            root_name: Key shown for this node.
            nice_names: Show nice_name (with node details) instead of name.
        """
        nodes = [([], root_name, self)] + list(self.traverse_tree())
        for parents, key, node in nodes:
            label = node.nice_name if nice_names else node.name
            print("%s%s [%s] <%s>"
                  % (". " * len(parents), key, label, type(node).__name__))

    def __getstate__(self):
        r"""State for pickling, with `mpmath` constants made picklable.

        See pickle_helpers.freeze().
        """
        return freeze_state(self.__dict__)

    def __setstate__(self, state):
        self.__dict__.update(thaw_state(state))

    def __repr__(self):
        return "<%s%s>" % (type(self).__name__, self.str())

    def force_evaluation_mode(self, use_mp):
        r"""Make evaluator() of this node ignore its `use_mp` argument.

        Pass `True` or `False` to fix the mode of all future evaluators of
        this node, or `None` to return to the requested mode.
        """
        self._mode_override = use_mp

    def evaluator(self, use_mp=False):
        r"""Take a snapshot of the tree and return a callable evaluating it.

        Use `use_mp` to control whether the evaluator will use numpy floating
        point arithmetics (for `False`) or arbitrary precision mpmath
        computations (for `True`). Default is `False`.

        In floating point mode, IEEE semantics apply, e.g. division by zero
        results in `inf` or `nan` (with a numpy `RuntimeWarning`).
        """
        if self._mode_override is not None:
            use_mp = self._mode_override
        ev = self._evaluator(use_mp=use_mp)
        if not isinstance(ev, _Evaluator):
            ev = TrivialEvaluator(self, ev, use_mp)
        return ev

    def evaluate(self, x, use_mp=False):
        r"""Evaluate the expression at a single point.

        This creates a new evaluator on each call. Create one using
        evaluator() when evaluating at many points.
        """
        return self.evaluator(use_mp)(x)

    def sample(self, points, use_mp=False, forward=False):
        r"""Evaluate the expression at a sequence of points.

        Args:
            points: Array of shape ``(num, N)``. For one-dimensional
                expressions, a flat sequence of numbers is accepted too.
            use_mp: Evaluation mode, see evaluator().
            forward: If `True`, call forward() with the index of each point
                before evaluating at it. Use this if the rows of the data of
                all basics.DiscretizedField leaves correspond to `points`.

        @return Numpy array with the values at the points (stacked along the
            first axis for non-scalar expressions).
        """
        ev = self.evaluator(use_mp)
        points = np.asarray(points, dtype=object if use_mp else float)
        if points.ndim == 1 and ev.inner_size() == 1:
            points = points.reshape(-1, 1)
        if points.ndim != 2:
            raise DimensionMismatchError("Expected an array of points of "
                                         "shape (num, %d)." % ev.inner_size())
        values = []
        for i, p in enumerate(points):
            if forward:
                self.forward(i)
            values.append(ev(p))
        return np.array(values)

    @classmethod
    def math_module(cls, use_mp):
        r"""Return the module providing elementary functions for a mode.

        This is `mpmath.mp` for arbitrary precision evaluation and `numpy`
        otherwise. Both offer e.g. `sin`, `exp` and `log` under the same
        names.
        """
        return mp if use_mp else np

    @classmethod
    @contextmanager
    def context(cls, use_mp, dps=None):
        r"""Context manager yielding the math module of an evaluation mode.

        For `mpmath`, the working precision is set to `dps` decimal places
        (if given) for the duration of the block.

        @b Examples
        \code
            with FieldExpression.context(use_mp=True, dps=50) as ctx:
                value = expr.evaluate([ctx.mpf(1), 2], use_mp=True)
        \endcode
        """
        if not use_mp or dps is None:
            yield cls.math_module(use_mp)
            return
        with mp.workdps(dps):
            yield mp

    def str(self):
        """Formula of the whole subtree, e.g. ``(e1 + e2, where e1=...)``."""
        return "(%s)" % self._expr_str()

    @abstractmethod
    def _expr_str(self):
        """Formula of this node with its parameters.

        Children are inserted using their str() method. For a node computing
        ``a * x`` with a parameter ``a`` and child ``x``, the result would be
        e.g. ``"a x, where a=2, x=(...)"``.
        """
        pass

    @abstractmethod
    def _evaluator(self, use_mp):
        r"""Return an evaluator or a plain callable of the converted point."""
        pass

    def set_sub_exprs(self, **sub_exprs):
        r"""Add or replace children of this node.

        Each child becomes an attribute named after its keyword. Plain
        numbers are turned into basics.Constant leaves of this node's
        dimension; anything else that is not an expression raises a
        `TypeError`.
        """
        for key, child in sub_exprs.items():
            child = self.__as_child(child)
            setattr(self, key, child)
            self.__children[key] = child

    def __as_child(self, value):
        if isinstance(value, FieldExpression):
            return value
        if not _is_number(value):
            raise TypeError("Sub expression must be an expression or a "
                            "number (got %r)." % (value,))
        from .basics import Constant
        return Constant(value, dim=self.static_inner_size,
                        size=self._runtime_size())


class ScalarExpression(FieldExpression):
    r"""Base class for real valued field expressions.

    Scalar expressions can be combined using the operators ``+ - * /``, with
    each other and with plain numbers, and negated with unary ``-``. The
    elementary functions in basics (e.g. basics.sin()) wrap them into
    further scalar expressions.
    """

    # Let numpy scalars on the left defer to our reflected operators.
    __array_ufunc__ = None

    def negate(self):
        r"""Return an expression evaluating to minus this expression."""
        from .basics import NegationOp
        return NegationOp(self)

    def __neg__(self):
        return self.negate()

    def gradient(self, fd_order=2):
        r"""Finite difference gradient of this expression.

        The current step of this expression is used.

        @param fd_order
            Order of accuracy of the central differences. Default is `2`.
        """
        from .derivs import GradientOp
        return GradientOp(self, step=self.step, fd_order=fd_order)

    def hessian(self, fd_order=2):
        r"""Finite difference Hessian of this expression.

        See gradient() for the parameters.
        """
        from .derivs import HessianOp
        return HessianOp(self, step=self.step, fd_order=fd_order)

    def apply(self, func, name=None):
        r"""Compose this expression with a unary callable `func`."""
        from .basics import UnOp
        return UnOp(self, func, name=name)

    def _binop(self, other, op, reflected=False):
        r"""Combine with `other`, promoting numbers to constants."""
        from .basics import BinOp, Constant
        if _is_number(other):
            other = Constant(
                other, dim=self.static_inner_size,
                size=self._runtime_size(),
            )
        elif not isinstance(other, ScalarExpression):
            return NotImplemented
        if reflected:
            return BinOp(other, self, op)
        return BinOp(self, other, op)

    def __add__(self, other):
        return self._binop(other, '+')

    def __radd__(self, other):
        return self._binop(other, '+', reflected=True)

    def __sub__(self, other):
        return self._binop(other, '-')

    def __rsub__(self, other):
        return self._binop(other, '-', reflected=True)

    def __mul__(self, other):
        return self._binop(other, '*')

    def __rmul__(self, other):
        return self._binop(other, '*', reflected=True)

    def __truediv__(self, other):
        return self._binop(other, '/')

    def __rtruediv__(self, other):
        return self._binop(other, '/', reflected=True)
