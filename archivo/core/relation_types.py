"""
Family relation vocabulary.

A relation type on an edge always describes the *target* user as seen from
the *source* user. Every type has exactly one inverse, which is how the
same edge reads from the other end.
"""

from archivo.core.errors import InvalidRelationType

PARENT = "parent"
CHILD = "child"
SIBLING = "sibling"
SPOUSE = "spouse"
GRANDPARENT = "grandparent"
GRANDCHILD = "grandchild"
AUNT_UNCLE = "aunt/uncle"
NIECE_NEPHEW = "niece/nephew"
COUSIN = "cousin"

INVERSE: dict[str, str] = {
    PARENT: CHILD,
    CHILD: PARENT,
    SPOUSE: SPOUSE,
    SIBLING: SIBLING,
    GRANDPARENT: GRANDCHILD,
    GRANDCHILD: GRANDPARENT,
    AUNT_UNCLE: NIECE_NEPHEW,
    NIECE_NEPHEW: AUNT_UNCLE,
    COUSIN: COUSIN,
}

RELATION_TYPES: tuple[str, ...] = tuple(INVERSE)

# Generation of the related user relative to the viewer (parents are one up)
GENERATION_OFFSET: dict[str, int] = {
    GRANDPARENT: -2,
    PARENT: -1,
    AUNT_UNCLE: -1,
    SPOUSE: 0,
    SIBLING: 0,
    COUSIN: 0,
    CHILD: 1,
    NIECE_NEPHEW: 1,
    GRANDCHILD: 2,
}


def is_valid(relation_type) -> bool:
    return isinstance(relation_type, str) and relation_type in INVERSE


def validate_relation_type(value) -> str:
    """
    Normalise user input ("  Parent ") to a vocabulary token.
    Raises InvalidRelationType for anything outside the vocabulary.
    """
    if not isinstance(value, str):
        raise InvalidRelationType(value)

    token = value.strip().lower()
    if token not in INVERSE:
        raise InvalidRelationType(value)
    return token


def inverse(relation_type: str) -> str:
    try:
        return INVERSE[relation_type]
    except (KeyError, TypeError):
        raise InvalidRelationType(relation_type) from None


def is_symmetric(relation_type: str) -> bool:
    return inverse(relation_type) == relation_type
