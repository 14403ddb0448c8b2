from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import EntityInterface, ListQuery
from labrecord_backend.model.submission import Evaluation

MIN_MARKS = 0
MAX_MARKS = 100

def validate_marks(value: Optional[int]) -> Optional[int]:
    if value is not None and not (MIN_MARKS <= value <= MAX_MARKS):
        raise ValueError(f"marks must be between {MIN_MARKS} and {MAX_MARKS}")
    return value

class EvaluationUpsert(BaseModel):
    marks: Optional[int] = Field(None, description="Marks between 0 and 100")
    feedback: Optional[str] = None

    @field_validator('marks')
    @classmethod
    def validate_marks_range(cls, v):
        return validate_marks(v)

    @field_validator('feedback')
    @classmethod
    def strip_feedback(cls, v):
        if v is not None:
            v = v.strip()
        return v

class EvaluationGet(BaseModel):
    id: str
    submission_id: str
    faculty_id: str
    marks: Optional[int] = None
    feedback: Optional[str] = None
    evaluated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class EvaluationList(EvaluationGet):
    pass

class EvaluationQuery(ListQuery):
    submission_id: Optional[str] = None
    faculty_id: Optional[str] = None

def evaluation_search(db: Session, query, params: Optional[EvaluationQuery]):
    if params.submission_id is not None:
        query = query.filter(Evaluation.submission_id == params.submission_id)
    if params.faculty_id is not None:
        query = query.filter(Evaluation.faculty_id == params.faculty_id)
    return query.order_by(Evaluation.evaluated_at.desc())

class EvaluationInterface(EntityInterface):
    get = EvaluationGet
    list = EvaluationList
    query = EvaluationQuery
    search = evaluation_search
    endpoint = "evaluations"
    model = Evaluation
