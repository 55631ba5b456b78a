r"""@package fdfields.geometry

Geometric objects sharing the point evaluation idiom of fdfields.fields.
"""

from .hyperplane import HyperPlane, DegenerateSubspaceError
