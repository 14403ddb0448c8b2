from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict
from labrecord_backend.api.exceptions import NotFoundException


class Role(str, Enum):
    admin = "admin"
    faculty = "faculty"
    student = "student"


class Department(str, Enum):
    CSE = "CSE"
    IT = "IT"
    AIDS = "AIDS"


class Principal(BaseModel):
    """The authenticated caller, passed explicitly into every permission and workflow call.

    A principal is built from the profile row once per request and is never
    reused across requests, so role or relation changes are visible immediately.
    """

    user_id: str
    role: Role = Role.student
    department: Optional[Department] = None
    full_name: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin

    @property
    def is_faculty(self) -> bool:
        return self.role == Role.faculty

    @property
    def is_student(self) -> bool:
        return self.role == Role.student

    def get_user_id_or_throw(self) -> str:
        """Get user ID or raise exception"""
        if self.user_id is None:
            raise NotFoundException("User ID not found")
        return self.user_id


class PrincipalBuilder:

    @staticmethod
    def from_profile(profile) -> Principal:
        return Principal(
            user_id=profile.id,
            role=Role(profile.role),
            department=Department(profile.department) if profile.department else None,
            full_name=profile.full_name,
        )
