from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import EntityInterface, ListQuery
from labrecord_backend.interface.execution import normalize_language
from labrecord_backend.model.submission import ExperimentSubmission

class SubmissionStatus(str, Enum):
    draft = "draft"
    submitted = "submitted"
    evaluated = "evaluated"

class SubmissionCreate(BaseModel):
    experiment_id: str
    code: str
    language: str
    file_url: Optional[str] = Field(None, max_length=2048)
    draft: bool = Field(False, description="Keep the submission as a draft instead of submitting it")

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError("code is required")
        return v

    @field_validator('language')
    @classmethod
    def validate_language(cls, v):
        return normalize_language(v)

class SubmissionUpdate(BaseModel):
    code: Optional[str] = None
    language: Optional[str] = None
    file_url: Optional[str] = Field(None, max_length=2048)
    draft: bool = Field(False, description="Keep (or put back, admins only) the submission in draft")

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        if v is not None and not v.strip():
            raise ValueError("code cannot be empty")
        return v

    @field_validator('language')
    @classmethod
    def validate_language(cls, v):
        if v is None:
            return v
        return normalize_language(v)

class SubmissionGet(BaseModel):
    id: str
    experiment_id: str
    student_id: str
    code: Optional[str] = None
    language: Optional[str] = None
    file_url: Optional[str] = None
    status: SubmissionStatus
    submitted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class SubmissionList(BaseModel):
    id: str
    experiment_id: str
    student_id: str
    language: Optional[str] = None
    status: SubmissionStatus
    submitted_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class SubmissionQuery(ListQuery):
    experiment_id: Optional[str] = None
    student_id: Optional[str] = None
    status: Optional[SubmissionStatus] = None

def submission_search(db: Session, query, params: Optional[SubmissionQuery]):
    if params.experiment_id is not None:
        query = query.filter(ExperimentSubmission.experiment_id == params.experiment_id)
    if params.student_id is not None:
        query = query.filter(ExperimentSubmission.student_id == params.student_id)
    if params.status is not None:
        query = query.filter(ExperimentSubmission.status == params.status.value)
    return query.order_by(ExperimentSubmission.submitted_at.desc())

class SubmissionInterface(EntityInterface):
    create = SubmissionCreate
    get = SubmissionGet
    list = SubmissionList
    update = SubmissionUpdate
    query = SubmissionQuery
    search = submission_search
    endpoint = "submissions"
    model = ExperimentSubmission
