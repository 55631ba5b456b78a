r"""@package fdfields.geometry.hyperplane

Affine subspaces of \f$ R^m \f$.

A HyperPlane of dimension \f$ k \le m \f$ is defined by \f$ k+1 \f$ points
\f$ p_0, \ldots, p_k \f$. The first point is used as offset and the
differences \f$ p_i - p_0 \f$ span the linear part, for which an
orthonormal basis \f$ b_1, \ldots, b_k \f$ is computed once at construction.
All further operations are then cheap (\f$ O(k m) \f$):

\f[
    \mathrm{eval}(c) = p_0 + \sum_i c_i b_i, \qquad
    \mathrm{proj}(p) = p_0 + \sum_i \langle p - p_0, b_i \rangle b_i.
\f]

The projection is the least squares solution of finding the closest point
of the subspace.

@b Examples

```
    # a plane through the origin embedded in 3D
    plane = HyperPlane([0, 0, 0], [1, 1, 0], [0, 1, 1])
    plane.project([7.1, 3.4, 2])        # -> array([5.2, 5.3, 0.1])
    plane.project_onto([7.1, 3.4, 2])   # local coordinates
    plane.distance([7.1, 3.4, 2])
```
"""

import numpy as np
from scipy import linalg

from ..numutils import NumericalError, gram_schmidt
from ..fields.common import DimensionMismatchError


__all__ = [
    "HyperPlane",
    "DegenerateSubspaceError",
]


class DegenerateSubspaceError(NumericalError):
    r"""Raised when the points do not define a subspace of the expected dimension."""
    pass


class HyperPlane(object):
    r"""A k-dimensional affine subspace of m-dimensional space.

    Objects of this class are immutable. The `offset` and `basis` arrays are
    read-only.
    """

    def __init__(self, *points, rtol=1e-10):
        r"""Create the subspace through the given points.

        @param *points
            Two or more points of the same dimension `m`. The first point is
            the offset, the others define the directions. Points must be
            affinely independent.
        @param rtol
            Relative tolerance for detecting dependent directions, see
            numutils.gram_schmidt(). Default is `1e-10`.

        @b Raises

        DegenerateSubspaceError if the points are affinely dependent or not
        finite,
        DimensionMismatchError if they differ in dimension.
        """
        if len(points) < 2:
            raise ValueError("At least two points are required.")
        points = [np.asarray(p, dtype=float) for p in points]
        offset = points[0]
        if offset.ndim != 1:
            raise DimensionMismatchError("Points must be 1-D arrays.")
        for p in points[1:]:
            if p.shape != offset.shape:
                raise DimensionMismatchError(
                    "Points of dimension %d and %s cannot be combined."
                    % (offset.shape[0], p.shape[0] if p.ndim == 1 else p.shape)
                )
        self._init(offset, [p - offset for p in points[1:]], rtol)

    @classmethod
    def from_directions(cls, offset, directions, rtol=1e-10):
        r"""Create the subspace through `offset` spanned by `directions`."""
        offset = np.asarray(offset, dtype=float)
        directions = [np.asarray(d, dtype=float) for d in directions]
        return cls(offset, *[offset + d for d in directions], rtol=rtol)

    def _init(self, offset, directions, rtol):
        k, m = len(directions), offset.shape[0]
        if not (np.isfinite(offset).all()
                and all(np.isfinite(d).all() for d in directions)):
            raise DegenerateSubspaceError("Points must be finite.")
        if k > m:
            raise DegenerateSubspaceError(
                "%d directions cannot be independent in %d dimensions."
                % (k, m)
            )
        try:
            basis = gram_schmidt(directions, rtol=rtol)
        except NumericalError as e:
            raise DegenerateSubspaceError(
                "Points are affinely dependent: %s" % e
            ) from e
        self._offset = offset.copy()
        self._offset.flags.writeable = False
        basis.flags.writeable = False
        self._basis = basis

    @property
    def offset(self):
        r"""Point in the subspace used as origin of the local coordinates."""
        return self._offset

    @property
    def basis(self):
        r"""Orthonormal basis of the linear part as rows of a (k, m) array."""
        return self._basis

    @property
    def dim(self):
        r"""Dimension k of the subspace."""
        return self._basis.shape[0]

    @property
    def ambient_dim(self):
        r"""Dimension m of the space the subspace is embedded in."""
        return self._offset.shape[0]

    def __repr__(self):
        return "<HyperPlane(dim=%d, ambient_dim=%d, offset=%s)>" % (
            self.dim, self.ambient_dim, self._offset.tolist()
        )

    def _ambient(self, p):
        p = np.asarray(p, dtype=float)
        if p.shape != self._offset.shape:
            raise DimensionMismatchError(
                "Expected a point in R^%d, got shape %s."
                % (self.ambient_dim, p.shape)
            )
        return p

    def evaluate(self, coords):
        r"""Map local coordinates (k numbers) to a point in R^m."""
        coords = np.atleast_1d(np.asarray(coords, dtype=float))
        if coords.shape != (self.dim,):
            raise DimensionMismatchError(
                "Expected %d local coordinates, got shape %s."
                % (self.dim, coords.shape)
            )
        return self._offset + coords.dot(self._basis)

    __call__ = evaluate

    def project_onto(self, p):
        r"""Local coordinates of the orthogonal projection of `p`."""
        return self._basis.dot(self._ambient(p) - self._offset)

    def project(self, p):
        r"""Closest point of the subspace to `p` (in R^m)."""
        return self._offset + self.project_onto(p).dot(self._basis)

    def distance(self, p):
        r"""Euclidean distance of `p` to the subspace."""
        p = self._ambient(p)
        return np.linalg.norm(p - self.project(p))

    def normal(self):
        r"""Unit normal of a hyperplane of codimension one.

        The sign is not specified. For other codimensions, a `ValueError`
        is raised since there is no unique normal direction.
        """
        if self.dim != self.ambient_dim - 1:
            raise ValueError("Normal only defined for codimension one "
                             "(dim=%d, ambient_dim=%d)."
                             % (self.dim, self.ambient_dim))
        return linalg.null_space(self._basis)[:, 0]

    def distance_field(self, name='dist'):
        r"""Scalar field on R^m evaluating to the distance to this subspace.

        The result is a fields.basics.ScalarField, so it can be used in
        expression trees. Only floating point evaluation is supported.
        """
        from ..fields.basics import ScalarField
        return ScalarField(self.distance, dim=self.ambient_dim, name=name)
