from inkwell.schemas.user import (
    UserCreate,
    UserResponse,
    UserPublic,
    Token,
    LoginRequest,
)
from inkwell.schemas.post import PostResponse, PostDeleted
