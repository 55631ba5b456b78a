r"""@package fdfields.pickle_helpers

Pickling support for expression trees holding `mpmath` constants.

Constants like `mp.pi` are lazily evaluated objects bound to the `mp`
context and do not survive a pickle round trip as the same object. Since
such values commonly end up in basics.Constant leaves, the state of every
expression is passed through freeze_state() before pickling, which swaps
them for named placeholders, and through thaw_state() after unpickling.

\code
def __getstate__(self):
    return freeze_state(self.__dict__)

def __setstate__(self, state):
    self.__dict__.update(thaw_state(state))
\endcode
"""

from mpmath import mp


__all__ = [
    "freeze",
    "thaw",
    "freeze_state",
    "thaw_state",
]


## Names of the `mp` constants replaced by placeholders.
_MP_CONSTANTS = ("pi", "e", "euler", "phi", "ln2", "ln10", "degree")


class _NamedMpConstant(object):
    r"""Stands in for one of the `mp` constants while pickled."""
    # pylint: disable=too-few-public-methods
    def __init__(self, name):
        self.name = name

    def resolve(self):
        r"""The constant in the `mp` context, e.g. `mp.pi`."""
        return getattr(mp, self.name)


def _mp_constant_name(value):
    if not isinstance(value, type(mp.pi)):
        return None
    for name in _MP_CONSTANTS:
        if value is getattr(mp, name):
            return name
    return None


def freeze(value):
    r"""Replace `mp` constants in `value` (also inside lists/tuples)."""
    if type(value) in (list, tuple):
        return type(value)(freeze(v) for v in value)
    name = _mp_constant_name(value)
    return value if name is None else _NamedMpConstant(name)


def thaw(value):
    r"""Inverse of freeze()."""
    if type(value) in (list, tuple):
        return type(value)(thaw(v) for v in value)
    if isinstance(value, _NamedMpConstant):
        return value.resolve()
    return value


def freeze_state(state):
    r"""Apply freeze() to all values of a state dictionary."""
    return {k: freeze(v) for k, v in state.items()}


def thaw_state(state):
    r"""Apply thaw() to all values of a state dictionary."""
    return {k: thaw(v) for k, v in state.items()}
