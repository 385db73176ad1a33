from packtrack.schemas.common import ApiResponse, ErrorResponse, HealthResponse
from packtrack.schemas.packaging import (
    PackagingComponentCreate,
    PackagingComponentResponse,
    PackagingDocumentResponse,
    PackagingItemCreate,
    PackagingItemResponse,
)
from packtrack.schemas.user import (
    AuthResponse,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "ApiResponse",
    "ErrorResponse",
    "HealthResponse",
    "PackagingComponentCreate",
    "PackagingComponentResponse",
    "PackagingDocumentResponse",
    "PackagingItemCreate",
    "PackagingItemResponse",
    "AuthResponse",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "UserUpdate",
]
