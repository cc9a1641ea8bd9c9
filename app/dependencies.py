import logging
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from .core.security import decode_jwt_token
from .application.services.analysis_service import AnalysisService
from .application.services.auth_service import AuthService

logger = logging.getLogger(__name__)

oauth2_scheme = HTTPBearer(auto_error=False)


def get_current_user(request: Request, credentials: HTTPAuthorizationCredentials = Depends(oauth2_scheme)) -> str:
    token = None
    if credentials and credentials.credentials:
        token = credentials.credentials
    else:
        # Fallback to cookie
        token = request.cookies.get("access_token")
    if not token:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    payload = decode_jwt_token(token)
    if not payload:
        logger.warning("JWT token decode failed - invalid or expired token")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user_id = payload.get("sub")
    if not user_id:
        logger.warning("JWT token missing user ID")
        raise HTTPException(status_code=401, detail="Invalid token: missing user ID")
    return user_id


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service
