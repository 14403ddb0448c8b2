from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from labrecord_backend.database import get_db
from labrecord_backend.interface.evaluations import EvaluationGet, EvaluationUpsert
from labrecord_backend.permissions.auth import get_current_principal
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.workflow.evaluations import evaluate

evaluation_router = APIRouter()

@evaluation_router.put("/{submission_id}/evaluation", response_model=EvaluationGet)
def upsert_evaluation(submission_id: str, entity: EvaluationUpsert, permissions: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):

    evaluation = evaluate(db, permissions, submission_id, marks=entity.marks, feedback=entity.feedback)

    return EvaluationGet.model_validate(evaluation, from_attributes=True)
