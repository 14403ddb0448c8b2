from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import BaseEntityGet, EntityInterface, ListQuery
from labrecord_backend.model.auth import Profile
from labrecord_backend.permissions.principal import Department, Role

class ProfileGet(BaseEntityGet):
    id: str = Field(description="Principal identifier issued by the identity provider")
    full_name: Optional[str] = Field(None, description="Display name")
    role: Role = Field(description="admin, faculty or student")
    department: Optional[Department] = Field(None, description="Department code")

    model_config = ConfigDict(from_attributes=True)

class ProfileList(BaseModel):
    id: str
    full_name: Optional[str] = None
    role: Role
    department: Optional[Department] = None

    model_config = ConfigDict(from_attributes=True)

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, max_length=255, description="Display name")
    role: Optional[Role] = Field(None, description="Only admins may change roles")
    department: Optional[Department] = None

    @field_validator('full_name')
    @classmethod
    def validate_full_name(cls, v):
        if v is not None:
            v = v.strip()
        return v

class ProfileQuery(ListQuery):
    id: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[Department] = None

def profile_search(db: Session, query, params: Optional[ProfileQuery]):
    if params.id is not None:
        query = query.filter(Profile.id == params.id)
    if params.full_name is not None:
        query = query.filter(Profile.full_name.ilike(f"%{params.full_name}%"))
    if params.role is not None:
        query = query.filter(Profile.role == params.role.value)
    if params.department is not None:
        query = query.filter(Profile.department == params.department.value)
    return query.order_by(Profile.full_name)

class ProfileInterface(EntityInterface):
    get = ProfileGet
    list = ProfileList
    update = ProfileUpdate
    query = ProfileQuery
    search = profile_search
    endpoint = "profiles"
    model = Profile
