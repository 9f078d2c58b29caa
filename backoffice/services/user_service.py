from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional
from backoffice.models.user import User
from backoffice.core.security import get_password_hash, verify_password
from backoffice.logger_config import logger


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by database ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email."""
    return db.query(User).filter(User.email == email).first()


def count_users(db: Session) -> int:
    return db.query(User).count()


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
) -> User:
    """Create a new back-office user."""
    if get_user_by_email(db, email):
        raise ValueError("User with this email already exists")

    user = User(
        email=email,
        password_hash=get_password_hash(password),
        name=name,
        is_active=True,
    )
    db.add(user)

    try:
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating user: {str(e)}")
        raise ValueError("Failed to create user. Email may already exist.")


def change_password(
    db: Session,
    user_id: int,
    old_password: str,
    new_password: str
) -> bool:
    """Change user password."""
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    if not verify_password(old_password, user.password_hash):
        raise ValueError("Invalid old password")

    user.password_hash = get_password_hash(new_password)

    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error changing password: {str(e)}")
        raise ValueError("Failed to change password.")


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate a user by email and password."""
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user
