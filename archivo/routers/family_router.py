import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from archivo.auth import get_current_user, register_user
from archivo.core import relation_store
from archivo.core.derivation import label_for
from archivo.core.errors import ArchivoError, Forbidden, NotFound
from archivo.core.family_tree import project_tree
from archivo.core.relation_types import validate_relation_type
from archivo.database import get_db
from archivo.models.family_relation import FamilyRelation
from archivo.models.user import User
from archivo.schemas.ids import IdPath, IdQuery
from archivo.schemas.family_schema import (
    FamilyMemberCreate,
    FamilyMemberCreateOut,
    FamilyRelationCreate,
    FamilyRelationCreateOut,
    FamilyRelationOut,
    FamilyTreeOut,
)
from archivo.schemas.user_schema import UserSummary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/family", tags=["Family Relations"])


# --------------------------------------------------
# RELATION SERIALISER (MUST BE ABOVE ROUTES)
# --------------------------------------------------
def build_relation_out(rel: FamilyRelation, viewer_id: Optional[int]) -> dict:
    if viewer_id in (rel.from_user_id, rel.to_user_id):
        label = label_for(rel, viewer_id)  # ✅ viewer-specific
    else:
        label = None

    return {
        "id": rel.id,
        "from_user_id": rel.from_user_id,
        "to_user_id": rel.to_user_id,
        "relation_type": rel.relation_type,
        "label": label,
        "from_user": UserSummary.model_validate(rel.from_user),
        "to_user": UserSummary.model_validate(rel.to_user),
        "created_at": rel.created_at,
    }


def _require_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def _require_can_edit_family(db: Session, current_user: User, user_id: int):
    """
    You may edit your own relations, or those of someone you are
    directly related to (filling in a parent's side of the tree).
    """
    if user_id == current_user.id:
        return
    if relation_store.find_relation_between(db, current_user.id, user_id) is None:
        raise Forbidden("Not authorized to edit this user's family")


# --------------------------------------------------
# LIST RELATIONS
# --------------------------------------------------
@router.get("", response_model=list[FamilyRelationOut])
def list_family_relations(
    user_id: IdQuery = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    target_id = user_id or current_user.id
    if target_id != current_user.id:
        _require_user(db, target_id)

    return [
        build_relation_out(rel, target_id)
        for rel in relation_store.list_relations_for_user(db, target_id)
    ]


# --------------------------------------------------
# ADD RELATION
# --------------------------------------------------
@router.post("", response_model=FamilyRelationCreateOut)
def add_family_relation(
    payload: FamilyRelationCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    from_user_id = payload.target_user_id or current_user.id
    _require_can_edit_family(db, current_user, from_user_id)

    relation, derived = relation_store.add_relation_with_inheritance(
        db,
        from_user_id,
        payload.to_user_id,
        payload.relation_type,
        inherit=payload.inherit_relations,
    )

    return {
        **build_relation_out(relation, from_user_id),
        "derived": [build_relation_out(rel, from_user_id) for rel in derived],
    }


# --------------------------------------------------
# CREATE NEW FAMILY MEMBER
# --------------------------------------------------
@router.post("/members", response_model=FamilyMemberCreateOut)
def create_family_member(
    payload: FamilyMemberCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    # Reject a bad relation type before the account exists
    relation_type = None
    if payload.relation_type:
        relation_type = validate_relation_type(payload.relation_type)

    member = register_user(
        db,
        username=payload.username,
        password=payload.password,
        display_name=payload.display_name,
        email=payload.email,
        date_of_birth=payload.date_of_birth,
        # With a relation, account and edges land in one commit
        commit=relation_type is None,
    )

    if relation_type is None:
        logger.info("User %s created family member %s", current_user.id, member.id)
        return {
            "message": "Family member created successfully",
            "user": member,
        }

    try:
        relation, derived = relation_store.add_relation_with_inheritance(
            db,
            current_user.id,
            member.id,
            relation_type,
            inherit=payload.inherit_relations,
        )
    except ArchivoError:
        db.rollback()
        raise
    logger.info("User %s created family member %s", current_user.id, member.id)

    return {
        "message": "Family member created and related successfully",
        "user": member,
        "relation": build_relation_out(relation, current_user.id),
        "derived": [build_relation_out(rel, current_user.id) for rel in derived],
    }


# --------------------------------------------------
# TREE PROJECTION
# --------------------------------------------------
@router.get("/tree", response_model=FamilyTreeOut)
def get_family_tree(
    user_id: IdQuery = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    root_id = user_id or current_user.id
    _require_user(db, root_id)

    root_edges = relation_store.list_relations_for_user(db, root_id)

    # Pull in the relatives' own edges for the grandparent/grandchild hop
    neighbour_ids = {root_id}
    for rel in root_edges:
        neighbour_ids.update((rel.from_user_id, rel.to_user_id))
    edges = relation_store.list_relations_for_users(db, neighbour_ids)

    user_ids = set(neighbour_ids)
    for rel in edges:
        user_ids.update((rel.from_user_id, rel.to_user_id))
    users = {
        u.id: u
        for u in db.query(User).filter(User.id.in_(user_ids)).all()
    }

    return project_tree(root_id, edges, users)


# --------------------------------------------------
# DELETE RELATION
# --------------------------------------------------
@router.delete("/{relation_id}")
def delete_family_relation(
    relation_id: IdPath,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    relation = relation_store.get_relation(db, relation_id)

    # Only the people on either end may remove it
    if current_user.id not in (relation.from_user_id, relation.to_user_id):
        raise Forbidden("Not authorized to delete this relation")

    relation_store.delete_relation(db, relation_id)

    return {"message": "Relation deleted successfully"}
