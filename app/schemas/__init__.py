# Schemas package
from .common.common import ErrorResponse, MessageResponse
from .auth.auth import (
    SignUpRequest, LoginRequest, UserResponse, AuthResponse, EmailAvailabilityResponse
)
from .analysis.analysis import (
    AnalysisStatus, AnalysisResponse
)

__all__ = [
    "ErrorResponse",
    "MessageResponse",
    "SignUpRequest",
    "LoginRequest",
    "UserResponse",
    "AuthResponse",
    "EmailAvailabilityResponse",
    "AnalysisStatus",
    "AnalysisResponse",
]
