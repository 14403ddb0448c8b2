from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import EntityInterface, ListQuery
from labrecord_backend.model.subject import FacultySubject

class AssignmentCreate(BaseModel):
    faculty_id: str
    subject_id: str

class AssignmentGet(BaseModel):
    id: str
    faculty_id: str
    subject_id: str
    assigned_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AssignmentList(AssignmentGet):
    pass

class AssignmentQuery(ListQuery):
    faculty_id: Optional[str] = None
    subject_id: Optional[str] = None

def assignment_search(db: Session, query, params: Optional[AssignmentQuery]):
    if params.faculty_id is not None:
        query = query.filter(FacultySubject.faculty_id == params.faculty_id)
    if params.subject_id is not None:
        query = query.filter(FacultySubject.subject_id == params.subject_id)
    return query.order_by(FacultySubject.assigned_at)

class AssignmentInterface(EntityInterface):
    create = AssignmentCreate
    get = AssignmentGet
    list = AssignmentList
    query = AssignmentQuery
    search = assignment_search
    endpoint = "assignments"
    model = FacultySubject
