"""SQLModel implementation of the user repository."""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from taskmanager.errors import ConflictError
from taskmanager.models.user import User
from taskmanager.repositories.base import UserRepository
from taskmanager.utils.datetime import utcnow


class SqlUserRepository(UserRepository):

    def __init__(self, session: Session):
        self.session = session

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email)
        return self.session.exec(statement).first()

    def create(self, email: str, password_hash: str) -> User:
        user = User(email=email, password_hash=password_hash)
        self.session.add(user)
        try:
            self.session.commit()
        except IntegrityError:
            # Lost a race against a concurrent registration
            self.session.rollback()
            raise ConflictError("User already exists")
        self.session.refresh(user)
        return user

    def save(self, user: User) -> User:
        user.updated_at = utcnow()
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user
