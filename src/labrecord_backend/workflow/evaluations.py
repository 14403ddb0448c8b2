import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import exc
from sqlalchemy.orm import Session

from labrecord_backend.api.crud import integrity_error_to_http
from labrecord_backend.api.exceptions import (
    ConflictException,
    InternalServerException,
    NotFoundException,
    ValidationException,
)
from labrecord_backend.interface.evaluations import validate_marks
from labrecord_backend.model.submission import Evaluation, ExperimentSubmission
from labrecord_backend.permissions.core import ResourceRef, authorize
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.permissions import relations

logger = logging.getLogger(__name__)

KIND = Evaluation.__tablename__


def find_evaluation(db: Session, submission_id: str) -> Optional[Evaluation]:
    return db.query(Evaluation).filter(Evaluation.submission_id == submission_id).first()


def _commit(db: Session, evaluation: Evaluation, submission_id: str) -> Evaluation:
    try:
        db.commit()
        db.refresh(evaluation)
    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Could not store evaluation for submission %s: %s", submission_id, e)
        raise InternalServerException()
    return evaluation


def _update(db: Session, principal: Principal, evaluation: Evaluation, marks, feedback) -> Evaluation:
    changes = {"marks": marks, "feedback": feedback}

    resource = ResourceRef(kind=KIND, id=evaluation.id, context=changes)
    if not authorize(principal, "update", resource, db):
        raise NotFoundException()

    evaluation.marks = marks
    evaluation.feedback = feedback
    evaluation.evaluated_at = datetime.now(timezone.utc)

    return _commit(db, evaluation, evaluation.submission_id)


def _insert(db: Session, principal: Principal, submission_id: str, marks, feedback) -> Evaluation:
    context = {
        "submission_id": submission_id,
        "faculty_id": principal.get_user_id_or_throw(),
        "marks": marks,
        "feedback": feedback,
    }

    if not authorize(principal, "create", ResourceRef(kind=KIND, context=context), db):
        raise NotFoundException()

    # Drafts are evaluated only after the student submits them
    submission = db.get(ExperimentSubmission, submission_id)
    if submission is not None and submission.state == "draft" and not relations.is_admin(db, principal.user_id):
        raise ValidationException(detail="Draft submissions cannot be evaluated")

    evaluation = Evaluation(**context)
    db.add(evaluation)

    return _commit(db, evaluation, submission_id)


def evaluate(
    db: Session,
    principal: Principal,
    submission_id: str,
    marks: Optional[int] = None,
    feedback: Optional[str] = None,
) -> Evaluation:
    """Record the evaluation of a submission, overwriting an earlier one.

    Keyed by ``submission_id``: at most one evaluation row exists per
    submission no matter how often, or how concurrently, this is called.
    Recording an evaluation is what makes the submission's status ``evaluated``.
    """
    try:
        validate_marks(marks)
    except ValueError as e:
        raise ValidationException(detail=str(e))

    existing = find_evaluation(db, submission_id)
    if existing is not None:
        return _update(db, principal, existing, marks, feedback)

    try:
        return _insert(db, principal, submission_id, marks, feedback)
    except ConflictException as conflict:
        # Lost the race against a concurrent insert for the same submission
        existing = find_evaluation(db, submission_id)
        if existing is None:
            raise
        logger.info("Evaluation of submission %s created concurrently, updating instead", submission_id)
        try:
            return _update(db, principal, existing, marks, feedback)
        except NotFoundException:
            # The winning row belongs to another evaluator
            raise conflict from None
