"""
Permission Hierarchy

Defines the ordering of rights and the two lattice operations the
authorizers merge grant paths with.
"""

from .types import Right


# Level hierarchy (higher number = more access)
LEVEL_HIERARCHY = {
    Right.NONE: 0,
    Right.READ: 1,
    Right.WRITE: 2,
    Right.ADMIN: 3,
}


def max_right(*rights: Right) -> Right:
    """Return the highest of the given rights, NONE if none are given"""
    best = Right.NONE
    for right in rights:
        if LEVEL_HIERARCHY[right] > LEVEL_HIERARCHY[best]:
            best = right
    return best


def satisfies(have: Right, need: Right) -> bool:
    """True when `have` is at least `need`"""
    return LEVEL_HIERARCHY[have] >= LEVEL_HIERARCHY[need]
