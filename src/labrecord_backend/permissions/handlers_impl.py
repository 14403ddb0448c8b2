from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from labrecord_backend.permissions.handlers import PermissionHandler, normalize_action
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.permissions.rules import (
    AllOf,
    Anyone,
    FacultyForSubject,
    IsSelf,
    OwnsParent,
)
from labrecord_backend.permissions import relations

# Admins pass every handler before these tables are consulted, so the tables
# only list what non-admin callers may do.


class ProfilePermissionHandler(PermissionHandler):
    """Profiles are created by provisioning only and are never deleted through the API"""

    RULES = {
        "get": [Anyone()],
        "update": [IsSelf("id")],
    }

    def can_perform_action(self, principal: Principal, action: str, db: Session, resource_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> bool:
        # Only an admin may change a role, including their own
        if normalize_action(action) == "update" and context and "role" in context:
            if not relations.is_admin(db, principal.user_id):
                current = self.load_facts(db, resource_id) if resource_id else None
                if current is None or current.get("role") != context["role"]:
                    return False
        return super().can_perform_action(principal, action, db, resource_id, context)


class SubjectPermissionHandler(PermissionHandler):
    """Subjects are managed by admins only"""

    RULES = {
        "get": [Anyone()],
    }


class ExperimentPermissionHandler(PermissionHandler):

    RULES = {
        "get": [Anyone()],
        "create": [FacultyForSubject()],
        "update": [FacultyForSubject()],
    }


class EnrollmentPermissionHandler(PermissionHandler):
    """Student to subject edges"""

    RULES = {
        "get": [IsSelf("student_id"), FacultyForSubject()],
        "create": [IsSelf("student_id")],
    }


class AssignmentPermissionHandler(PermissionHandler):
    """Faculty to subject edges"""

    RULES = {
        "get": [IsSelf("faculty_id")],
    }


class SubmissionPermissionHandler(PermissionHandler):

    RULES = {
        "get": [IsSelf("student_id"), FacultyForSubject()],
        "create": [IsSelf("student_id")],
        "update": [IsSelf("student_id")],
    }


class EvaluationPermissionHandler(PermissionHandler):
    """Faculty reach is derived through submission -> experiment -> subject -> assignment"""

    RULES = {
        "get": [IsSelf("faculty_id"), OwnsParent("student_id"), FacultyForSubject()],
        "create": [AllOf(IsSelf("faculty_id"), FacultyForSubject())],
        "update": [IsSelf("faculty_id")],
    }
