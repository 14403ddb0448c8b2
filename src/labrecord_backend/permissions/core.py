"""
Policy evaluator: the single entry point answering whether a principal may
perform an action on a resource, built on the handler registry.
"""

import logging
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, Query

from labrecord_backend.permissions.handlers import permission_registry
from labrecord_backend.permissions.handlers_impl import (
    ProfilePermissionHandler,
    SubjectPermissionHandler,
    ExperimentPermissionHandler,
    EnrollmentPermissionHandler,
    AssignmentPermissionHandler,
    SubmissionPermissionHandler,
    EvaluationPermissionHandler,
)
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.permissions import relations

from labrecord_backend.model.auth import Profile
from labrecord_backend.model.subject import Subject, Experiment, StudentSubject, FacultySubject
from labrecord_backend.model.submission import ExperimentSubmission, Evaluation

logger = logging.getLogger(__name__)


class ResourceRef(BaseModel):
    """Target of an authorization check.

    ``id`` names an existing row. For creation ``id`` is omitted and ``context``
    carries the candidate row's columns (its foreign keys in particular); for
    updates ``context`` carries the new values.
    """

    kind: str
    id: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


def initialize_permission_handlers():
    """Initialize and register all permission handlers"""

    permission_registry.register(Profile, ProfilePermissionHandler(Profile))
    permission_registry.register(Subject, SubjectPermissionHandler(Subject))
    permission_registry.register(Experiment, ExperimentPermissionHandler(Experiment))
    permission_registry.register(StudentSubject, EnrollmentPermissionHandler(StudentSubject))
    permission_registry.register(FacultySubject, AssignmentPermissionHandler(FacultySubject))
    permission_registry.register(ExperimentSubmission, SubmissionPermissionHandler(ExperimentSubmission))
    permission_registry.register(Evaluation, EvaluationPermissionHandler(Evaluation))


def check_admin(principal: Principal, db: Session) -> bool:
    """Check if principal has admin privileges according to the profile registry"""
    return relations.is_admin(db, principal.user_id)


def authorize(principal: Optional[Principal], action: str, resource: ResourceRef, db: Session) -> bool:
    """Decide ``allow`` (True) or ``deny`` (False).

    Never raises: missing principals, unknown resource kinds, dangling
    references and storage errors all deny.
    """
    if principal is None or principal.user_id is None:
        return False

    handler = permission_registry.get_handler_by_name(resource.kind)
    if handler is None:
        logger.debug("No handler for resource kind %s", resource.kind)
        return False

    try:
        allowed = handler.can_perform_action(principal, action, db, resource.id, resource.context or None)
    except SQLAlchemyError:
        logger.exception("Authorization lookup failed for %s on %s", action, resource.kind)
        return False
    except (KeyError, ValueError, TypeError):
        logger.exception("Malformed resource reference for %s on %s", action, resource.kind)
        return False

    if not allowed:
        logger.debug("Denied %s on %s for principal %s", action, resource.kind, principal.user_id)

    return allowed


def check_permissions(principal: Principal, entity: Any, action: str, db: Session) -> Query:
    """
    Main entry point for list/get queries.
    Uses the registry to return a query restricted to permitted rows.
    """
    return permission_registry.check_permissions(principal, entity, action, db)


# Initialize handlers on module import
initialize_permission_handlers()
