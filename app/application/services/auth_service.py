from typing import Any, Dict, Optional
from dataclasses import dataclass
import logging

from fastapi import HTTPException

from ..ports.user_repo import UserRepository, UserDto
from ..ports.audit_logger import AuditLogger
from ...core.security import hash_password, verify_password, create_jwt_token

logger = logging.getLogger(__name__)

STATUS_APPROVED = "approved"
INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class AuthService:
    user_repo: UserRepository
    audit_logger: AuditLogger

    def signup(self, email: str, password: str, name: str, age: Optional[int] = None,
               ip_address: Optional[str] = None) -> Dict[str, Any]:
        email = email.strip().lower()
        if self.user_repo.get_by_email(email):
            self.audit_logger.log("signup", email, ip_address=ip_address, success=False,
                                  details={"error": "EMAIL_TAKEN"})
            raise HTTPException(status_code=409, detail="Email is already in use")

        user = self.user_repo.create(email=email, name=name, password_hash=hash_password(password), age=age)
        self.audit_logger.log("signup", email, user_id=user.id, ip_address=ip_address)

        # Accounts start out pending; the token only becomes useful for login once approved.
        return {"user": user, "access_token": self._issue_token(user)}

    def login(self, email: str, password: str, ip_address: Optional[str] = None) -> Dict[str, Any]:
        email = email.strip().lower()
        user = self.user_repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            self.audit_logger.log("login", email, ip_address=ip_address, success=False,
                                  details={"error": "INVALID_CREDENTIALS"})
            raise HTTPException(status_code=401, detail=INVALID_CREDENTIALS)

        if user.status != STATUS_APPROVED:
            self.audit_logger.log("login", email, user_id=user.id, ip_address=ip_address, success=False,
                                  details={"error": "NOT_APPROVED", "status": user.status})
            raise HTTPException(status_code=401, detail="Account is pending approval. Please contact an administrator.")

        self.audit_logger.log("login", email, user_id=user.id, ip_address=ip_address)
        return {"user": user, "access_token": self._issue_token(user)}

    def check_email_availability(self, email: str) -> bool:
        return self.user_repo.get_by_email(email.strip().lower()) is None

    def delete_account(self, user_id: str) -> None:
        user = self.user_repo.get_by_id(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        self.user_repo.delete(user.id)
        self.audit_logger.log("delete_account", user.email, user_id=user.id)

    def _issue_token(self, user: UserDto) -> str:
        return create_jwt_token({"sub": user.id, "email": user.email})
