from datetime import datetime
from pydantic import BaseModel, ConfigDict
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import EntityInterface, ListQuery
from labrecord_backend.model.subject import StudentSubject

class EnrollmentCreate(BaseModel):
    student_id: str
    subject_id: str

class EnrollmentGet(BaseModel):
    id: str
    student_id: str
    subject_id: str
    enrolled_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class EnrollmentList(EnrollmentGet):
    pass

class EnrollmentQuery(ListQuery):
    student_id: Optional[str] = None
    subject_id: Optional[str] = None

def enrollment_search(db: Session, query, params: Optional[EnrollmentQuery]):
    if params.student_id is not None:
        query = query.filter(StudentSubject.student_id == params.student_id)
    if params.subject_id is not None:
        query = query.filter(StudentSubject.subject_id == params.subject_id)
    return query.order_by(StudentSubject.enrolled_at)

class EnrollmentInterface(EntityInterface):
    create = EnrollmentCreate
    get = EnrollmentGet
    list = EnrollmentList
    query = EnrollmentQuery
    search = enrollment_search
    endpoint = "enrollments"
    model = StudentSubject
