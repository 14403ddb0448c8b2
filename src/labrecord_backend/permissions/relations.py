"""
Relation graph behind the policy evaluator.

Nodes are principals (profiles) and resources; typed edges are

- ``faculty_subject`` (Assignment): faculty -> subject
- ``student_subject`` (Enrollment): student -> subject
- ownership: subject -> experiment -> experiment_submission -> evaluation

Every predicate here is a fresh datastore lookup. Nothing is memoised, so an
edge added or removed in one request is visible to the next check.
"""

from typing import Any, Dict, Optional, Tuple
from sqlalchemy import select
from sqlalchemy.inspection import inspect
from sqlalchemy.orm import Session

from labrecord_backend.model.auth import Profile
from labrecord_backend.model.subject import Subject, Experiment, StudentSubject, FacultySubject
from labrecord_backend.model.submission import ExperimentSubmission, Evaluation

MODELS = {
    Profile.__tablename__: Profile,
    Subject.__tablename__: Subject,
    Experiment.__tablename__: Experiment,
    StudentSubject.__tablename__: StudentSubject,
    FacultySubject.__tablename__: FacultySubject,
    ExperimentSubmission.__tablename__: ExperimentSubmission,
    Evaluation.__tablename__: Evaluation,
}

# kind -> (foreign key column, parent kind) along the ownership chain towards the subject
HIERARCHY: Dict[str, Tuple[str, str]] = {
    Evaluation.__tablename__: ("submission_id", ExperimentSubmission.__tablename__),
    ExperimentSubmission.__tablename__: ("experiment_id", Experiment.__tablename__),
    Experiment.__tablename__: ("subject_id", Subject.__tablename__),
    StudentSubject.__tablename__: ("subject_id", Subject.__tablename__),
    FacultySubject.__tablename__: ("subject_id", Subject.__tablename__),
}


def row_facts(item: Any) -> Dict[str, Any]:
    """Column values of a mapped row as a plain dict."""
    mapper = inspect(type(item))
    return {column.key: getattr(item, column.key) for column in mapper.column_attrs}


def is_admin(db: Session, principal_id: Optional[str]) -> bool:
    if principal_id is None:
        return False
    stmt = select(Profile.id).where(Profile.id == principal_id, Profile.role == "admin").exists()
    return bool(db.scalar(select(stmt)))


def is_faculty_for(db: Session, principal_id: Optional[str], subject_id: Optional[str]) -> bool:
    if principal_id is None or subject_id is None:
        return False
    stmt = (
        select(FacultySubject.id)
        .where(FacultySubject.faculty_id == principal_id, FacultySubject.subject_id == subject_id)
        .exists()
    )
    return bool(db.scalar(select(stmt)))


def is_student_for(db: Session, principal_id: Optional[str], subject_id: Optional[str]) -> bool:
    if principal_id is None or subject_id is None:
        return False
    stmt = (
        select(StudentSubject.id)
        .where(StudentSubject.student_id == principal_id, StudentSubject.subject_id == subject_id)
        .exists()
    )
    return bool(db.scalar(select(stmt)))


def load_parent(db: Session, kind: str, facts: Dict[str, Any]) -> Optional[Tuple[str, Dict[str, Any]]]:
    """Follow one ownership edge upwards. Returns None when the link dangles."""
    if kind not in HIERARCHY:
        return None
    foreign_key, parent_kind = HIERARCHY[kind]
    parent_id = facts.get(foreign_key)
    if parent_id is None:
        return None
    parent = db.get(MODELS[parent_kind], parent_id)
    if parent is None:
        return None
    return parent_kind, row_facts(parent)


def resolve_subject_id(db: Session, kind: str, facts: Dict[str, Any]) -> Optional[str]:
    """Walk the ownership chain from ``kind`` up to its subject.

    Every hop is loaded, so a chain with any missing link resolves to None
    rather than to a stale subject id.
    """
    while kind != Subject.__tablename__:
        parent = load_parent(db, kind, facts)
        if parent is None:
            return None
        kind, facts = parent
    return facts.get("id")
