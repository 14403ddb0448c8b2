import logging
from typing import Annotated, Optional
from fastapi import Depends, Header
from sqlalchemy.orm import Session

from labrecord_backend.api.exceptions import UnauthorizedException
from labrecord_backend.database import get_db
from labrecord_backend.model.auth import Profile
from labrecord_backend.permissions.principal import Principal, PrincipalBuilder

logger = logging.getLogger(__name__)

# Sign-up, login and sessions live in the external identity provider. Its
# gateway authenticates the request and forwards the identity id in this header.
USER_ID_HEADER = "X-User-Id"


class AuthenticationService:

    @staticmethod
    def principal_for(user_id: Optional[str], db: Session) -> Principal:
        if not user_id:
            raise UnauthorizedException()

        profile = db.get(Profile, user_id)

        if profile is None:
            logger.info("Unknown principal %s", user_id)
            raise UnauthorizedException()

        return PrincipalBuilder.from_profile(profile)


def get_current_principal(
    db: Annotated[Session, Depends(get_db)],
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> Principal:
    """Resolve the caller for this request from the profile registry"""
    return AuthenticationService.principal_for(x_user_id, db)
