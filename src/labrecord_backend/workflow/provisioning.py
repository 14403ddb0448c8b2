"""
Provisioning of principals and of the edges only the system (or an admin
operator) creates outside the request path.
"""

import logging
from sqlalchemy import exc
from sqlalchemy.orm import Session

from labrecord_backend.api.crud import integrity_error_to_http
from labrecord_backend.api.exceptions import ConflictException, NotFoundException, ValidationException
from labrecord_backend.interface.identity import PrincipalCreatedEvent
from labrecord_backend.model.auth import DEPARTMENTS, ROLES, Profile
from labrecord_backend.model.subject import FacultySubject, StudentSubject, Subject
from labrecord_backend.settings import settings

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "student"


def _store(db: Session, item):
    try:
        db.add(item)
        db.commit()
        db.refresh(item)
    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)
    return item


def provision_principal(db: Session, event: PrincipalCreatedEvent) -> Profile:
    """Create the profile for a newly created identity.

    Missing metadata falls back to an empty name, the ``student`` role and the
    configured default department. A second event for the same identity is a
    conflict.
    """
    if db.get(Profile, event.id) is not None:
        raise ConflictException(detail=f"Profile [{event.id}] already exists")

    metadata = event.metadata

    role = metadata.role or DEFAULT_ROLE
    if role not in ROLES:
        raise ValidationException(detail=f"Unknown role: {metadata.role}")

    department = metadata.department or settings.DEFAULT_DEPARTMENT
    if department not in DEPARTMENTS:
        raise ValidationException(detail=f"Unknown department: {department}")

    profile = Profile(
        id=event.id,
        full_name=metadata.full_name or "",
        role=role,
        department=department,
    )
    profile = _store(db, profile)

    logger.info("Provisioned %s profile %s", role, event.id)
    return profile


def subject_by_code(db: Session, code: str) -> Subject:
    subject = db.query(Subject).filter(Subject.code == code).first()
    if subject is None:
        raise NotFoundException(detail=f"Subject with code [{code}] not found")
    return subject


def _profile_with_role(db: Session, profile_id: str, role: str) -> Profile:
    profile = db.get(Profile, profile_id)
    if profile is None:
        raise NotFoundException(detail=f"Profile [{profile_id}] not found")
    if profile.role != role:
        raise ValidationException(detail=f"Profile [{profile_id}] is not a {role}")
    return profile


def assign_faculty(db: Session, faculty_id: str, subject_code: str) -> FacultySubject:
    subject = subject_by_code(db, subject_code)
    _profile_with_role(db, faculty_id, "faculty")
    return _store(db, FacultySubject(faculty_id=faculty_id, subject_id=subject.id))


def enroll_student(db: Session, student_id: str, subject_code: str) -> StudentSubject:
    subject = subject_by_code(db, subject_code)
    _profile_with_role(db, student_id, "student")
    return _store(db, StudentSubject(student_id=student_id, subject_id=subject.id))
