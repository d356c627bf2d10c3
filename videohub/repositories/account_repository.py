"""
Account persistence. Email uniqueness is enforced by the users.email unique
constraint; the lookup before insert only gives a friendlier error.
"""
import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from videohub.errors import DatastoreError, DuplicateEmailError
from videohub.models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_by_email(db: Session, email: str) -> User | None:
    try:
        return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()
    except SQLAlchemyError as e:
        raise DatastoreError("Server error: account lookup failed") from e


def get_by_id(db: Session, user_id: str) -> User | None:
    try:
        return db.query(User).filter(User.id == user_id).first()
    except SQLAlchemyError as e:
        raise DatastoreError("Server error: account lookup failed") from e


def create_account(db: Session, *, name: str, email: str, password_hash: str) -> User:
    """Insert a new account. Raises DuplicateEmailError if the email is taken."""
    email = normalize_email(email)
    if get_by_email(db, email) is not None:
        raise DuplicateEmailError()
    user = User(name=name.strip(), email=email, password=password_hash)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as e:
        # Lost a race with a concurrent registration for the same email
        db.rollback()
        raise DuplicateEmailError() from e
    except SQLAlchemyError as e:
        db.rollback()
        raise DatastoreError("Server error: could not create account") from e
    db.refresh(user)
    logger.info("Account created: %s", user.id)
    return user
