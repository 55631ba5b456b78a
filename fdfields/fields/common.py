r"""@package fdfields.fields.common

Utils used by multiple modules in fdfields.fields.
"""

import numbers

import numpy as np
from mpmath import mp


__all__ = [
    "Dynamic",
    "DimensionMismatchError",
]


class _DynamicSize(object):
    r"""Type of the `Dynamic` sentinel."""
    # pylint: disable=too-few-public-methods
    __instance = None

    def __new__(cls):
        # Unpickling must yield the one sentinel so `is Dynamic` keeps working.
        if cls.__instance is None:
            cls.__instance = super(_DynamicSize, cls).__new__(cls)
        return cls.__instance

    def __reduce__(self):
        return (_DynamicSize, ())

    def __repr__(self):
        return "Dynamic"


## Sentinel for an arity only known at runtime.
Dynamic = _DynamicSize()


class DimensionMismatchError(ValueError):
    r"""Raised when fields or points of different dimensions are combined."""
    pass


def _check_static_size(dim):
    r"""Validate a `dim` argument (positive integer or `Dynamic`)."""
    if dim is Dynamic:
        return dim
    if (isinstance(dim, bool) or not isinstance(dim, numbers.Integral)
            or dim <= 0):
        raise ValueError("Dimension must be a positive integer or Dynamic "
                         "(got %r)." % (dim,))
    return int(dim)


def _check_runtime_size(size):
    r"""Validate a runtime dimension passed to e.g. `resize()`."""
    if (isinstance(size, bool) or not isinstance(size, numbers.Integral)
            or size <= 0):
        raise ValueError("Runtime dimension must be a positive integer "
                         "(got %r)." % (size,))
    return int(size)


def _as_point(x, n, use_mp):
    r"""Convert `x` to a 1-D array of length `n` for evaluation.

    In floating point mode, the result is a `float` array. For `mpmath`
    evaluation, the elements are converted to `mp.mpf` and stored in an
    object array.
    """
    x = np.asarray(x, dtype=object if use_mp else float)
    if x.ndim == 0:
        x = x.reshape(1)
    if x.ndim != 1:
        raise DimensionMismatchError("Expected a point (1-D array), got an "
                                     "array of shape %s." % (x.shape,))
    if x.shape[0] != n:
        raise DimensionMismatchError("Point has dimension %d, but the field "
                                     "is defined on R^%d." % (x.shape[0], n))
    if use_mp:
        x = np.array([mp.mpf(v) for v in x], dtype=object)
    return x
