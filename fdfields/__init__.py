r"""@package fdfields

Composable scalar fields and affine subspace geometry for numerical
analysis of PDE problems.

Scalar field expressions (see fdfields.fields) are built from constants,
tabulated data and analytic functions using ordinary arithmetic syntax and
evaluated as one fused function of a point. Their derivatives are
approximated by central finite differences.

The fdfields.geometry package provides hyperplanes, i.e. affine subspaces of
arbitrary dimension embedded in \f$ R^m \f$, with projections and distances.
"""
