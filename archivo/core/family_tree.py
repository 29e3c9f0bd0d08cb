"""
Groups a root user's relatives into layout buckets for the tree view.

Single pass over the root's own edges, plus one extra hop through the
root's parents and children to pick up grandparents and grandchildren that
were never linked directly. Not a general ancestor search.
"""

from typing import Iterable, Mapping

from archivo.core.derivation import index_by_user, label_for, other_endpoint, relatives_of
from archivo.core.relation_types import (
    GENERATION_OFFSET,
    RELATION_TYPES,
    PARENT,
    CHILD,
    GRANDPARENT,
    GRANDCHILD,
)

# Oldest generation first; ties keep vocabulary order
BUCKETS: tuple[str, ...] = tuple(
    sorted(RELATION_TYPES, key=lambda t: (GENERATION_OFFSET[t], RELATION_TYPES.index(t)))
)


def user_summary(user, user_id: int | None = None) -> dict:
    if user is None:
        return {"id": user_id, "username": None, "display_name": None}
    return {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
    }


def classify_relatives(root_user_id: int, edges: Iterable) -> dict[str, list[int]]:
    """
    Bucket name -> ordered user ids. A user lands in one bucket only;
    direct edges win over the depth-2 lookup, earlier edges over later ones.
    """
    index = index_by_user(edges)
    buckets: dict[str, list[int]] = {name: [] for name in BUCKETS}
    placed = {root_user_id}

    for edge in index.get(root_user_id, ()):
        other = other_endpoint(edge, root_user_id)
        if other in placed:
            continue
        buckets[label_for(edge, root_user_id)].append(other)
        placed.add(other)

    # One hop further: a parent's parents, a child's children
    for via, bucket in ((PARENT, GRANDPARENT), (CHILD, GRANDCHILD)):
        for relative in list(buckets[via]):
            for other in relatives_of(relative, via, index):
                if other in placed:
                    continue
                buckets[bucket].append(other)
                placed.add(other)

    return buckets


def project_tree(root_user_id: int, edges: Iterable, users: Mapping[int, object]) -> dict:
    """
    Tree projection for ``root_user_id``.

    ``edges`` must contain the root's edges and, for the grandparent /
    grandchild lookup, the edges of the root's parents and children.
    ``users`` maps ids to objects with ``username`` and ``display_name``.
    """
    buckets = classify_relatives(root_user_id, edges)

    return {
        "root": user_summary(users.get(root_user_id), root_user_id),
        "buckets": {
            name: [user_summary(users.get(uid), uid) for uid in ids]
            for name, ids in buckets.items()
        },
        "generations": {name: GENERATION_OFFSET[name] for name in BUCKETS},
    }
