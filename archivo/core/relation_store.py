import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from archivo.core.derivation import DerivedRelation, derive_secondary_relations
from archivo.core.errors import NotFound, StorageError, ValidationError
from archivo.core.relation_types import validate_relation_type
from archivo.database import is_db_id
from archivo.models.family_relation import FamilyRelation
from archivo.models.user import User

logger = logging.getLogger(__name__)


# ============================================================
# HELPERS
# ============================================================

def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise StorageError(f"Error trying to {action}") from exc


def _require_user(db: Session, user_id: int, role: str) -> User:
    user = None
    if is_db_id(user_id):
        user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise ValidationError(f"{role} user {user_id} does not exist")
    return user


def _validate_new_relation(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    relation_type: str,
) -> str:
    """
    Surface-level checks, all done before anything is written.
    Returns the normalised relation type.
    """
    relation_type = validate_relation_type(relation_type)

    if from_user_id == to_user_id:
        raise ValidationError("Cannot relate a user to themself")

    _require_user(db, from_user_id, "Source")
    _require_user(db, to_user_id, "Target")

    # One edge per pair of users: the inverse is derived, never stored
    if find_relation_between(db, from_user_id, to_user_id):
        raise ValidationError("Relation already exists")

    return relation_type


# ============================================================
# READS
# ============================================================

def get_relation(db: Session, relation_id: int) -> FamilyRelation:
    if not is_db_id(relation_id):
        raise NotFound("Relation not found")

    relation = (
        db.query(FamilyRelation)
        .filter(FamilyRelation.id == relation_id)
        .first()
    )
    if not relation:
        raise NotFound("Relation not found")
    return relation


def find_relation_between(db: Session, user_a: int, user_b: int) -> FamilyRelation | None:
    """The edge joining two users, whichever direction it was declared in."""
    return (
        db.query(FamilyRelation)
        .filter(
            (
                (FamilyRelation.from_user_id == user_a)
                & (FamilyRelation.to_user_id == user_b)
            )
            | (
                (FamilyRelation.from_user_id == user_b)
                & (FamilyRelation.to_user_id == user_a)
            )
        )
        .first()
    )


def list_relations_for_user(db: Session, user_id: int) -> list[FamilyRelation]:
    return (
        db.query(FamilyRelation)
        .filter(
            or_(
                FamilyRelation.from_user_id == user_id,
                FamilyRelation.to_user_id == user_id,
            )
        )
        .order_by(FamilyRelation.id)
        .all()
    )


def list_relations_for_users(db: Session, user_ids) -> list[FamilyRelation]:
    user_ids = list(set(user_ids))
    if not user_ids:
        return []

    return (
        db.query(FamilyRelation)
        .filter(
            or_(
                FamilyRelation.from_user_id.in_(user_ids),
                FamilyRelation.to_user_id.in_(user_ids),
            )
        )
        .order_by(FamilyRelation.id)
        .all()
    )


# ============================================================
# WRITES
# ============================================================

def add_relation(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    relation_type: str,
) -> FamilyRelation:
    relation, _ = add_relation_with_inheritance(
        db, from_user_id, to_user_id, relation_type, inherit=False
    )
    return relation


def add_relation_with_inheritance(
    db: Session,
    from_user_id: int,
    to_user_id: int,
    relation_type: str,
    inherit: bool = False,
) -> tuple[FamilyRelation, list[FamilyRelation]]:
    """
    Insert one directed edge and, when ``inherit`` is set, the secondary
    edges it implies. Everything lands in a single commit.
    """
    relation_type = _validate_new_relation(db, from_user_id, to_user_id, relation_type)

    relation = FamilyRelation(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        relation_type=relation_type,
    )

    derived: list[FamilyRelation] = []
    if inherit:
        # Every rule only looks at direct relatives of the two endpoints
        neighbourhood = list_relations_for_users(db, [from_user_id, to_user_id])
        candidates: list[DerivedRelation] = derive_secondary_relations(relation, neighbourhood)
        derived = [
            FamilyRelation(
                from_user_id=c.from_user_id,
                to_user_id=c.to_user_id,
                relation_type=c.relation_type,
            )
            for c in candidates
        ]

    db.add(relation)
    db.add_all(derived)
    _commit(db, "create family relation")

    db.refresh(relation)
    for edge in derived:
        db.refresh(edge)

    logger.info(
        "Created relation %s: %s --%s--> %s (%d derived)",
        relation.id, from_user_id, relation_type, to_user_id, len(derived),
    )
    return relation, derived


def delete_relation(db: Session, relation_id: int) -> None:
    relation = get_relation(db, relation_id)

    db.delete(relation)
    _commit(db, "delete family relation")

    logger.info("Deleted relation %s", relation_id)


def delete_relations_for_user(db: Session, user_id: int) -> int:
    """Drop every edge touching a user. Caller commits."""
    return (
        db.query(FamilyRelation)
        .filter(
            or_(
                FamilyRelation.from_user_id == user_id,
                FamilyRelation.to_user_id == user_id,
            )
        )
        .delete(synchronize_session=False)
    )
