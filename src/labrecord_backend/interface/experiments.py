from datetime import date
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from sqlalchemy.orm import Session
from labrecord_backend.interface.base import BaseEntityList, EntityInterface, ListQuery
from labrecord_backend.model.subject import Experiment

class ExperimentCreate(BaseModel):
    subject_id: str
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    experiment_number: Optional[int] = Field(None, ge=0)
    due_date: Optional[date] = None

class ExperimentGet(BaseEntityList):
    id: str
    subject_id: str
    title: str
    description: Optional[str] = None
    experiment_number: Optional[int] = None
    due_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)

class ExperimentList(ExperimentGet):
    pass

class ExperimentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    experiment_number: Optional[int] = Field(None, ge=0)
    due_date: Optional[date] = None

class ExperimentQuery(ListQuery):
    id: Optional[str] = None
    subject_id: Optional[str] = None
    title: Optional[str] = None

def experiment_search(db: Session, query, params: Optional[ExperimentQuery]):
    if params.id is not None:
        query = query.filter(Experiment.id == params.id)
    if params.subject_id is not None:
        query = query.filter(Experiment.subject_id == params.subject_id)
    if params.title is not None:
        query = query.filter(Experiment.title.ilike(f"%{params.title}%"))
    return query.order_by(Experiment.experiment_number)

class ExperimentInterface(EntityInterface):
    create = ExperimentCreate
    get = ExperimentGet
    list = ExperimentList
    update = ExperimentUpdate
    query = ExperimentQuery
    search = experiment_search
    endpoint = "experiments"
    model = Experiment
