r"""@package fdfields.fields

Expression system for composing scalar fields and evaluating them.

Each expression represents either a basic field (a constant, values taken
from a table of data, or a given Python/SymPy function of a point
\f$ x \in R^N \f$) or a composite of one or two other expressions, like
\f$ f_1(x) + f_2(x) \f$ or \f$ \sin(f(x)) \f$. Composite expressions are
built using the ordinary arithmetic operators and the elementary functions
exported here:

~~~.py
data = np.array([[1.0], [2.0], [3.0]])
u = DiscretizedField(data, dim=2)
f = SympyField("x**2 + y", "x y")
expr = exp(-f) * u + 1
ev = expr.evaluator()
for i, p in enumerate(points):
    expr.forward(i)
    print(ev(p))
~~~

NOTE: Expression objects themselves are descriptions only. Evaluation
      happens through *evaluators* (see scalarexpr.FieldExpression.evaluator())
      which are created once and may then be called for many points.

Derivatives are finite difference approximations (see the derivs module),
not exact derivatives.
"""

from .common import Dynamic, DimensionMismatchError
from .scalarexpr import FieldExpression, ScalarExpression, ExpressionWarning
from .scalarexpr import DEFAULT_STEP
from .basics import Constant, ScalarField, SympyField, DiscretizedField
from .basics import BinOp, UnOp, NegationOp
from .basics import sin, cos, tan, exp, log
from .derivs import GradientOp, HessianOp
