"""
Submission workflow.

A student holds at most one submission per experiment. Its status moves

    (absent) -> draft | submitted
    draft -> draft | submitted
    submitted -> submitted
    submitted -> evaluated   (only by an evaluation being recorded)

The stored ``state`` only carries the student's intent (draft/submitted);
``evaluated`` is derived from the presence of an evaluation row.
"""

import logging
from typing import Optional
from sqlalchemy import exc, select
from sqlalchemy.orm import Session

from labrecord_backend.api.crud import integrity_error_to_http
from labrecord_backend.api.exceptions import (
    ConflictException,
    InternalServerException,
    NotFoundException,
    ValidationException,
)
from labrecord_backend.interface.execution import normalize_language
from labrecord_backend.model.subject import Experiment
from labrecord_backend.model.submission import ExperimentSubmission
from labrecord_backend.permissions.core import ResourceRef, authorize
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.permissions import relations

logger = logging.getLogger(__name__)

KIND = ExperimentSubmission.__tablename__


def _language(value: str) -> str:
    try:
        return normalize_language(value)
    except ValueError as e:
        raise ValidationException(detail=str(e))


def _code(value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationException(detail="code is required")
    return value


def find_submission(db: Session, experiment_id: str, student_id: str) -> Optional[ExperimentSubmission]:
    return (
        db.query(ExperimentSubmission)
        .filter(
            ExperimentSubmission.experiment_id == experiment_id,
            ExperimentSubmission.student_id == student_id,
        )
        .first()
    )


def submission_status(db: Session, submission_id: str) -> Optional[str]:
    """Current derived status, or None when the submission does not exist"""
    return db.scalar(select(ExperimentSubmission.status).where(ExperimentSubmission.id == submission_id))


def submit(
    db: Session,
    principal: Principal,
    experiment_id: str,
    code: str,
    language: str,
    file_url: Optional[str] = None,
    draft: bool = False,
) -> ExperimentSubmission:
    """Create the caller's submission for an experiment.

    Raises:
        NotFoundException: the caller may not submit, the experiment does not
            exist or the caller is not enrolled in its subject
        ConflictException: the caller already has a submission for the experiment
        ValidationException: empty code or unsupported language
    """
    student_id = principal.get_user_id_or_throw()
    code = _code(code)
    language = _language(language)
    state = "draft" if draft else "submitted"

    context = {
        "experiment_id": experiment_id,
        "student_id": student_id,
        "code": code,
        "language": language,
        "file_url": file_url,
        "state": state,
    }
    if not authorize(principal, "create", ResourceRef(kind=KIND, context=context), db):
        raise NotFoundException()

    experiment = db.get(Experiment, experiment_id)
    if experiment is None:
        raise NotFoundException(detail=f"Experiment with id [{experiment_id}] not found")

    if not relations.is_admin(db, student_id) and not relations.is_student_for(db, student_id, experiment.subject_id):
        logger.info("Student %s is not enrolled in subject %s", student_id, experiment.subject_id)
        raise NotFoundException()

    if find_submission(db, experiment_id, student_id) is not None:
        raise ConflictException(detail="A submission for this experiment already exists")

    submission = ExperimentSubmission(**context)

    try:
        db.add(submission)
        db.commit()
        db.refresh(submission)
    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not store submission for experiment %s: %s", experiment_id, e)
        raise InternalServerException()

    logger.info("Student %s %s experiment %s", student_id, "drafted" if draft else "submitted", experiment_id)
    return submission


def resubmit(
    db: Session,
    principal: Principal,
    submission_id: str,
    code: Optional[str] = None,
    language: Optional[str] = None,
    file_url: Optional[str] = None,
    final: bool = True,
) -> ExperimentSubmission:
    """Update an existing submission.

    ``final`` moves the submission to ``submitted``; otherwise it stays a draft.
    Evaluated submissions are frozen for everyone but admins, and only admins
    may move a submitted submission back to draft.
    """
    changes = {}
    if code is not None:
        changes["code"] = _code(code)
    if language is not None:
        changes["language"] = _language(language)
    if file_url is not None:
        changes["file_url"] = file_url
    changes["state"] = "submitted" if final else "draft"

    resource = ResourceRef(kind=KIND, id=submission_id, context=changes)
    if not authorize(principal, "update", resource, db):
        raise NotFoundException()

    submission = db.get(ExperimentSubmission, submission_id)
    if submission is None:
        raise NotFoundException()

    admin = relations.is_admin(db, principal.user_id)

    if not admin:
        if submission.status == "evaluated":
            raise ValidationException(detail="Submission has already been evaluated")
        if submission.state == "submitted" and changes["state"] == "draft":
            raise ValidationException(detail="A submitted submission cannot return to draft")

    try:
        for key, value in changes.items():
            setattr(submission, key, value)
        db.commit()
        db.refresh(submission)
    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not update submission %s: %s", submission_id, e)
        raise InternalServerException()

    return submission


def save_submission(
    db: Session,
    principal: Principal,
    experiment_id: str,
    code: str,
    language: str,
    file_url: Optional[str] = None,
    draft: bool = False,
) -> ExperimentSubmission:
    """Create the caller's submission, or update it when one already exists"""
    student_id = principal.get_user_id_or_throw()

    existing = find_submission(db, experiment_id, student_id)
    if existing is None:
        try:
            return submit(db, principal, experiment_id, code, language, file_url=file_url, draft=draft)
        except ConflictException:
            # Created by a concurrent request in the meantime
            existing = find_submission(db, experiment_id, student_id)
            if existing is None:
                raise

    return resubmit(db, principal, existing.id, code=code, language=language, file_url=file_url, final=not draft)
