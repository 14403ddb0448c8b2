from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from labrecord_backend.database import get_db
from labrecord_backend.interface.submissions import SubmissionCreate, SubmissionGet, SubmissionUpdate
from labrecord_backend.permissions.auth import get_current_principal
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.workflow.submissions import resubmit, save_submission, submit

submissions_router = APIRouter()
experiment_submission_router = APIRouter()

@submissions_router.post("", response_model=SubmissionGet, status_code=status.HTTP_201_CREATED)
def create_submission(entity: SubmissionCreate, permissions: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):

    submission = submit(db, permissions, entity.experiment_id, entity.code, entity.language,
                        file_url=entity.file_url, draft=entity.draft)

    return SubmissionGet.model_validate(submission, from_attributes=True)

@submissions_router.patch("/{submission_id}", response_model=SubmissionGet)
def update_submission(submission_id: str, entity: SubmissionUpdate, permissions: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):

    submission = resubmit(db, permissions, submission_id, code=entity.code, language=entity.language,
                          file_url=entity.file_url, final=not entity.draft)

    return SubmissionGet.model_validate(submission, from_attributes=True)

@experiment_submission_router.put("/{experiment_id}/submission", response_model=SubmissionGet)
def save_experiment_submission(experiment_id: str, entity: SubmissionUpdate, permissions: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):
    """Editor "submit" button: creates the caller's submission or updates the existing one"""

    submission = save_submission(db, permissions, experiment_id, entity.code, entity.language,
                                 file_url=entity.file_url, draft=entity.draft)

    return SubmissionGet.model_validate(submission, from_attributes=True)
