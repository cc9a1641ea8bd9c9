import logging
from fastapi import APIRouter, Depends, Request

from ..dependencies import get_current_user, get_auth_service
from ..application.services.auth_service import AuthService
from ..schemas import (
    SignUpRequest, LoginRequest, UserResponse, AuthResponse,
    EmailAvailabilityResponse, ErrorResponse, MessageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _client_ip(request: Request):
    return request.client.host if request.client else None


@router.post("/signup", status_code=201, response_model=AuthResponse, responses={409: {"model": ErrorResponse}})
def signup(payload: SignUpRequest, request: Request, auth: AuthService = Depends(get_auth_service)):
    """Register a new account. It starts in ``pending`` state and cannot log in until approved."""
    result = auth.signup(payload.email, payload.password, payload.name, payload.age, ip_address=_client_ip(request))
    return AuthResponse(user=UserResponse.from_dto(result["user"]), access_token=result["access_token"])


@router.post("/login", response_model=AuthResponse, responses={401: {"model": ErrorResponse}})
def login(payload: LoginRequest, request: Request, auth: AuthService = Depends(get_auth_service)):
    result = auth.login(payload.email, payload.password, ip_address=_client_ip(request))
    return AuthResponse(user=UserResponse.from_dto(result["user"]), access_token=result["access_token"])


@router.get("/check-email/{email}", response_model=EmailAvailabilityResponse)
def check_email(email: str, auth: AuthService = Depends(get_auth_service)):
    return EmailAvailabilityResponse(available=auth.check_email_availability(email))


@router.post("/logout", response_model=MessageResponse)
def logout(current_user: str = Depends(get_current_user)):
    # Tokens are stateless; the client discards its copy
    return MessageResponse(message="Logged out")


@router.delete("/account", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
def delete_account(current_user: str = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    auth.delete_account(current_user)
    return MessageResponse(message="Account deleted")
