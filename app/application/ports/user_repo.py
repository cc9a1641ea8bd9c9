from typing import Protocol, Optional
from datetime import datetime

class UserDto:
    def __init__(self, id: str, email: str, name: str, password_hash: str, age: Optional[int],
                 status: str, created_at: datetime, updated_at: datetime):
        self.id = id
        self.email = email
        self.name = name
        self.password_hash = password_hash
        self.age = age
        self.status = status
        self.created_at = created_at
        self.updated_at = updated_at

class UserRepository(Protocol):
    def get_by_email(self, email: str) -> Optional[UserDto]:
        ...

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        ...

    def create(self, email: str, name: str, password_hash: str, age: Optional[int]) -> UserDto:
        ...

    def delete(self, user_id: str) -> None:
        ...
