from datetime import datetime, timedelta, timezone
from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import ValidationError

from shared.core.config import settings
from shared.core.schemas import UserToken
from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode
from shared.utils.enums import UserRole

security = HTTPBearer()


def create_access_token(data: dict, expires_minutes: int = None):
    """Mint a token the way the auth collaborator does. Used by tooling and tests."""
    payload = data.copy()
    minutes = expires_minutes or settings.JWT_EXPIRE_MINUTES
    payload["exp"] = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    if payload.get("org_id") is not None:
        payload["org_id"] = str(payload["org_id"])

    return jwt.encode(payload, settings.JWT_SECRET,
                      algorithm=settings.JWT_ALGORITHM)


def verify_token(token: str) -> UserToken:
    """Verify and decode a JWT token."""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        return UserToken(**payload)
    except (JWTError, ValidationError):
        return error_response(
            message="Invalid or expired token",
            status_code=AppStatusCode.AUTHENTICATION_TOKEN_EXPIRED,
            http_status=status.HTTP_401_UNAUTHORIZED
        )


def validate_current_token(
    credentials: HTTPAuthorizationCredentials = Depends(security),
):
    return verify_token(credentials.credentials)


def allow_staff(current_user: UserToken = Depends(validate_current_token)):
    if current_user.role not in (UserRole.WATCHMAN.value, UserRole.ORG_ADMIN.value):
        return error_response(
            message="Access forbidden: organization staff only",
            status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
            http_status=403
        )

    return current_user


def allow_admin(current_user: UserToken = Depends(validate_current_token)):
    if current_user.role != UserRole.ORG_ADMIN.value:
        return error_response(
            message="Access forbidden: Admins only",
            status_code=AppStatusCode.AUTHENTICATION_FORBIDDEN,
            http_status=403
        )

    return current_user
