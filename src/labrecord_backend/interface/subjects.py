from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import BaseEntityList, EntityInterface, ListQuery
from labrecord_backend.model.subject import Subject
from labrecord_backend.permissions.principal import Department

class SubjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=64)
    department: Optional[Department] = None
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Subject name cannot be empty')
        return v

    @field_validator('code', 'description')
    @classmethod
    def empty_to_none(cls, v):
        if v is not None:
            v = v.strip()
            if not v:
                return None
        return v

class SubjectGet(BaseEntityList):
    id: str
    name: str
    code: Optional[str] = None
    department: Optional[Department] = None
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class SubjectList(SubjectGet):
    pass

class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    code: Optional[str] = Field(None, max_length=64)
    department: Optional[Department] = None
    description: Optional[str] = None

class SubjectQuery(ListQuery):
    id: Optional[str] = None
    name: Optional[str] = None
    code: Optional[str] = None
    department: Optional[Department] = None

def subject_search(db: Session, query, params: Optional[SubjectQuery]):
    if params.id is not None:
        query = query.filter(Subject.id == params.id)
    if params.name is not None:
        query = query.filter(Subject.name.ilike(f"%{params.name}%"))
    if params.code is not None:
        query = query.filter(Subject.code == params.code)
    if params.department is not None:
        query = query.filter(Subject.department == params.department.value)
    return query.order_by(Subject.name)

class SubjectInterface(EntityInterface):
    create = SubjectCreate
    get = SubjectGet
    list = SubjectList
    update = SubjectUpdate
    query = SubjectQuery
    search = subject_search
    endpoint = "subjects"
    model = Subject
