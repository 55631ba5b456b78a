r"""@package fdfields.numutils

Miscellaneous numerical utilities and helpers.


@b Examples

```
    >>> fd_weights(1, fd_order=2)
    ((-1, -1/2), (1, 1/2))
```
"""

import numbers

import numpy as np
import sympy as sp


__all__ = [
    "fd_weights",
    "gram_schmidt",
    "NumericalError",
]


class NumericalError(Exception):
    r"""Exception raised for problems with numerical evaluation.

    For example, geometric objects constructed from numerical data raise a
    subclass of this if the data does not define a valid object.
    """
    pass


def fd_weights(deriv, fd_order=2):
    r"""Central finite difference weights for the given derivative.

    The stencil consists of the integer offsets
    \f$ -p, \ldots, p \f$ with \f$ p = \f$ `fd_order/2`, which gives an
    accuracy of \f$ O(h^{\mathrm{fd\_order}}) \f$ for the first and second
    derivative. The derivative at `x` is then approximated by
    \f[
        f^{(n)}(x) \approx h^{-n} \sum_k w_k f(x + k h).
    \f]

    @param deriv
        Derivative order (`1` or `2`).
    @param fd_order
        Order of accuracy. Must be a positive even integer. Default is `2`.

    @return Tuple of pairs ``(k, w_k)`` with integer offsets `k` and exact
        `sympy.Rational` weights. Offsets with zero weight are omitted.
    """
    if deriv not in (1, 2):
        raise ValueError("Only first and second derivatives are supported.")
    if (isinstance(fd_order, bool) or not isinstance(fd_order, numbers.Integral)
            or fd_order <= 0 or fd_order % 2):
        raise ValueError("Finite difference order must be a positive even "
                         "integer (got %r)." % (fd_order,))
    return _FDWeights.weights(deriv, int(fd_order))


class _FDWeights():
    r"""Helper class to cache the computed stencils.

    This is used by fd_weights() to re-use once computed weights, since the
    symbolic computation is comparatively expensive.
    """

    __cache = dict()

    @classmethod
    def weights(cls, deriv, fd_order):
        r"""Generate and cache the results for fd_weights()."""
        key = (deriv, fd_order)
        if key not in cls.__cache:
            p = fd_order // 2
            offsets = list(range(-p, p+1))
            w = sp.finite_diff_weights(deriv, offsets, 0)[deriv][-1]
            cls.__cache[key] = tuple(
                (k, sp.Rational(wk)) for k, wk in zip(offsets, w) if wk != 0
            )
        return cls.__cache[key]


def gram_schmidt(vectors, rtol=1e-10):
    r"""Orthonormalize a list of vectors.

    Uses the modified Gram-Schmidt process, normalizing each vector right
    after removing its components along the previous ones.

    @param vectors
        Sequence of `k` vectors of equal length `m`.
    @param rtol
        A vector whose remaining norm (after removing the components along
        the previous vectors) is not larger than `rtol` times its original
        norm is considered linearly dependent on the previous ones.

    @return Array of shape ``(k, m)`` with orthonormal rows spanning the same
        space as `vectors`.

    @b Raises

    NumericalError if the vectors are linearly dependent (or one of them is
    zero), or if they contain non-finite values.
    """
    vectors = np.array(vectors, dtype=float, ndmin=2)
    if not np.isfinite(vectors).all():
        raise NumericalError("Vectors contain NaN or infinite values.")
    basis = np.empty_like(vectors)
    for i, v in enumerate(vectors):
        w = v.copy()
        for b in basis[:i]:
            w -= w.dot(b) * b
        nrm = np.linalg.norm(w)
        if nrm == 0.0 or nrm <= rtol * np.linalg.norm(v):
            raise NumericalError("Vector %d is linearly dependent on the "
                                 "previous ones." % i)
        basis[i] = w / nrm
    return basis
