"""
Viewpoint labels and secondary-edge propagation.

Everything here is pure: functions take edges (anything with
``from_user_id``, ``to_user_id`` and ``relation_type``) and return values.
Persisting what they produce is the relation store's job.
"""

from collections import defaultdict
from typing import Iterable, NamedTuple

from archivo.core.relation_types import (
    inverse,
    PARENT,
    CHILD,
    SIBLING,
    GRANDPARENT,
    GRANDCHILD,
    AUNT_UNCLE,
    NIECE_NEPHEW,
)


class DerivedRelation(NamedTuple):
    from_user_id: int
    to_user_id: int
    relation_type: str


class PropagationRule(NamedTuple):
    # Which end of the new edge we look around: "from" or "to"
    anchor: str
    # Label (from the anchor's viewpoint) of the relatives to connect
    via: str
    # Type of the edge between the relative and the other end
    derived_type: str


# For a new edge X --T--> Y. Relatives found around X become the source of
# the derived edge (R --type--> Y); relatives found around Y become its
# target (X --type--> R).
PROPAGATION_RULES: dict[str, tuple[PropagationRule, ...]] = {
    PARENT: (
        # Y is also the parent of X's siblings
        PropagationRule("from", SIBLING, PARENT),
        # Y's parents are X's grandparents
        PropagationRule("to", PARENT, GRANDPARENT),
        # Y's siblings are X's aunts and uncles
        PropagationRule("to", SIBLING, AUNT_UNCLE),
    ),
    CHILD: (
        # Y's siblings are X's children too
        PropagationRule("to", SIBLING, CHILD),
        # Y's children are X's grandchildren
        PropagationRule("to", CHILD, GRANDCHILD),
        # Y is a niece/nephew of X's siblings
        PropagationRule("from", SIBLING, NIECE_NEPHEW),
    ),
}


def label_for(edge, viewpoint_user_id: int) -> str:
    """
    How the other end of ``edge`` relates to ``viewpoint_user_id``.

    The stored type already reads from the source's side; the target sees
    the inverse.
    """
    if edge.from_user_id == viewpoint_user_id:
        return edge.relation_type
    if edge.to_user_id == viewpoint_user_id:
        return inverse(edge.relation_type)
    raise ValueError(
        f"user {viewpoint_user_id} is not an endpoint of relation "
        f"{getattr(edge, 'id', None)}"
    )


def other_endpoint(edge, user_id: int) -> int:
    if edge.from_user_id == user_id:
        return edge.to_user_id
    if edge.to_user_id == user_id:
        return edge.from_user_id
    raise ValueError(f"user {user_id} is not an endpoint of this relation")


def index_by_user(edges: Iterable) -> dict[int, list]:
    """Adjacency list: user id -> incident edges, in input order."""
    index: dict[int, list] = defaultdict(list)
    for edge in edges:
        index[edge.from_user_id].append(edge)
        index[edge.to_user_id].append(edge)
    return index


def relatives_of(user_id: int, label: str, index: dict[int, list]) -> list[int]:
    """Ids of users that ``user_id`` sees as ``label``, first occurrence order."""
    found: list[int] = []
    for edge in index.get(user_id, ()):
        if label_for(edge, user_id) != label:
            continue
        other = other_endpoint(edge, user_id)
        if other not in found:
            found.append(other)
    return found


def pair_key(a: int, b: int) -> frozenset:
    return frozenset((a, b))


def derive_secondary_relations(new_edge, existing_edges: Iterable) -> list[DerivedRelation]:
    """
    Extra edges implied by adding ``new_edge``.

    Only parent and child edges propagate (see PROPAGATION_RULES); every
    other type yields nothing. Candidates never point a user at themself
    and never touch a pair of users that is already connected.
    """
    rules = PROPAGATION_RULES.get(new_edge.relation_type, ())
    if not rules:
        return []

    existing = [e for e in existing_edges if e is not new_edge]
    index = index_by_user(existing)

    x, y = new_edge.from_user_id, new_edge.to_user_id
    connected = {pair_key(e.from_user_id, e.to_user_id) for e in existing}
    connected.add(pair_key(x, y))

    derived: list[DerivedRelation] = []
    for rule in rules:
        anchor = x if rule.anchor == "from" else y

        for relative in relatives_of(anchor, rule.via, index):
            if relative in (x, y):
                continue

            if rule.anchor == "from":
                candidate = DerivedRelation(relative, y, rule.derived_type)
            else:
                candidate = DerivedRelation(x, relative, rule.derived_type)

            key = pair_key(candidate.from_user_id, candidate.to_user_id)
            if key in connected:
                continue

            connected.add(key)
            derived.append(candidate)

    return derived
