import hmac
import logging
from typing import Annotated, Optional
from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session
from labrecord_backend.api.exceptions import UnauthorizedException
from labrecord_backend.database import get_db
from labrecord_backend.interface.identity import PrincipalCreatedEvent
from labrecord_backend.interface.profiles import ProfileGet
from labrecord_backend.settings import settings
from labrecord_backend.workflow.provisioning import provision_principal

logger = logging.getLogger(__name__)

hooks_router = APIRouter()

def verify_webhook_secret(x_webhook_secret: Annotated[Optional[str], Header()] = None):
    expected = settings.IDENTITY_WEBHOOK_SECRET
    if not expected:
        if settings.DEBUG_MODE == "production":
            logger.error("IDENTITY_WEBHOOK_SECRET is not set; rejecting identity webhook")
            raise UnauthorizedException()
        return
    if x_webhook_secret is None or not hmac.compare_digest(x_webhook_secret, expected):
        logger.warning("Rejected identity webhook with invalid secret")
        raise UnauthorizedException()

@hooks_router.post("/identity/principal-created", response_model=ProfileGet, status_code=status.HTTP_201_CREATED,
                   dependencies=[Depends(verify_webhook_secret)])
def principal_created(event: PrincipalCreatedEvent, db: Session = Depends(get_db)):
    profile = provision_principal(db, event)
    return ProfileGet.model_validate(profile, from_attributes=True)
