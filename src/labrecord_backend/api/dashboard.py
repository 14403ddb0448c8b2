from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from labrecord_backend.database import get_db
from labrecord_backend.interface.dashboard import DashboardGet
from labrecord_backend.permissions.auth import get_current_principal
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.services.dashboard import build_dashboard

dashboard_router = APIRouter()

@dashboard_router.get("", response_model=DashboardGet)
def get_dashboard(permissions: Annotated[Principal, Depends(get_current_principal)], db: Session = Depends(get_db)):
    return build_dashboard(db, permissions)
