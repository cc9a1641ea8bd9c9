from typing import Optional
from datetime import datetime, timezone
from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from .....db.models import Analysis, User
from .....application.ports.user_repo import UserRepository, UserDto

class SqlUserRepository(UserRepository):
    def __init__(self, engine: Engine):
        self.engine = engine

    def _to_dto(self, user: User) -> UserDto:
        return UserDto(
            id=user.id,
            email=user.email,
            name=user.name,
            password_hash=user.password_hash,
            age=user.age,
            status=user.status,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    def get_by_email(self, email: str) -> Optional[UserDto]:
        with Session(self.engine) as session:
            user = session.exec(select(User).where(User.email == email)).first()
            return self._to_dto(user) if user else None

    def get_by_id(self, user_id: str) -> Optional[UserDto]:
        with Session(self.engine) as session:
            user = session.get(User, user_id)
            return self._to_dto(user) if user else None

    def create(self, email: str, name: str, password_hash: str, age: Optional[int]) -> UserDto:
        with Session(self.engine) as session:
            user = User(email=email, name=name, password_hash=password_hash, age=age, status="pending")
            session.add(user)
            session.commit()
            session.refresh(user)
            return self._to_dto(user)

    def set_status(self, user_id: str, status: str) -> None:
        with Session(self.engine) as session:
            user = session.get(User, user_id)
            if not user:
                return
            user.status = status
            user.updated_at = datetime.now(timezone.utc)
            session.add(user)
            session.commit()

    def delete(self, user_id: str) -> None:
        # SQLite does not enforce ON DELETE CASCADE by default, so owned analyses go first
        with Session(self.engine) as session:
            user = session.get(User, user_id)
            if not user:
                return
            for analysis in session.exec(select(Analysis).where(Analysis.user_id == user_id)).all():
                session.delete(analysis)
            session.flush()
            session.delete(user)
            session.commit()
