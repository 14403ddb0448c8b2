from pydantic import BaseModel
from typing import List, Optional
from labrecord_backend.permissions.principal import Role

class SubjectProgress(BaseModel):
    subject_id: str
    name: str
    code: Optional[str] = None
    total_experiments: int = 0
    submitted: int = 0
    evaluated: int = 0
    pending: int = 0
    progress: int = 0

class SubjectReview(BaseModel):
    subject_id: str
    name: str
    code: Optional[str] = None
    total: int = 0
    pending: int = 0
    evaluated: int = 0

class AdminOverview(BaseModel):
    subjects: int = 0
    experiments: int = 0
    students: int = 0
    faculty: int = 0
    submissions: int = 0
    evaluations: int = 0

class DashboardGet(BaseModel):
    role: Role
    overview: Optional[AdminOverview] = None
    reviews: List[SubjectReview] = []
    progress: List[SubjectProgress] = []
