"""API dependencies: auth, db session, media storage."""
from uuid import UUID

from fastapi import Depends, HTTPException, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from inkwell.core.security import decode_token
from inkwell.db.session import get_db
from inkwell.models.user import User
from inkwell.services.auth_service import get_user_by_id
from inkwell.services.storage_service import MediaUpload, get_storage

__all__ = ["get_db", "get_storage", "get_current_user_id", "get_current_user", "read_upload"]

security = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UUID:
    """Resolve the bearer token to the caller's id. The user row is not loaded."""
    if not credentials:
        raise _unauthorized()
    payload = decode_token(credentials.credentials)
    if not payload or payload.get("type") != "access":
        raise _unauthorized()
    try:
        return UUID(payload.get("sub") or "")
    except ValueError:
        raise _unauthorized() from None


async def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> User:
    user = await get_user_by_id(db, user_id)
    if user is None:
        raise _unauthorized()
    return user


async def read_upload(file: UploadFile | None) -> MediaUpload | None:
    if file is None or not file.filename:
        return None
    data = await file.read()
    return MediaUpload(filename=file.filename, data=data, content_type=file.content_type)
