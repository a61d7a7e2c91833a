import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..database import get_db, store_operation
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import User
from ..ownership import require_owner
from ..schemas.user import UserRegister, UserUpdate, public_user, user_payload
from ..security import get_password_hash
from ..validation import check_password, clean_email, clean_name, parse_resource_id
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()

USER_NOT_FOUND = "User not found"
EMAIL_TAKEN = "Email already registered"


def _email_taken(db: Session, email: str, exclude_id: Optional[str] = None) -> bool:
    query = db.query(User).filter(User.email == email)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    return query.first() is not None


def create_user(db: Session, settings: Settings, name: str, email: str, password: str) -> User:
    """Validate, hash and store a new user.

    Shared by the register route and the seeding script.
    """
    if not name or not email or not password:
        raise ValidationError("All fields are required")

    name = clean_name(name)
    email = clean_email(email)
    check_password(password)

    with store_operation(db, "registering user"):
        if _email_taken(db, email):
            raise ConflictError(EMAIL_TAKEN)

        db_user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password, rounds=settings.bcrypt_rounds),
        )
        db.add(db_user)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(EMAIL_TAKEN)
        db.refresh(db_user)

    logger.info(f"Registered user {db_user.id}")
    return db_user


@router.post("/users/register", status_code=status.HTTP_201_CREATED)
def register(
    user: Optional[UserRegister] = None,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Create a new user account. Logging in is a separate step."""
    if user is None:
        user = UserRegister()
    create_user(db, settings, user.name, user.email, user.password)
    return {"message": "User registered successfully"}


@router.put("/users/{user_id}")
def update_user(
    user_id: str,
    user_update: UserUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    """Change any of name, email or password on the caller's own account."""
    user_id = parse_resource_id(user_id, "user")

    changes = {}
    if user_update.name is not None:
        changes["name"] = clean_name(user_update.name)
    if user_update.email is not None:
        changes["email"] = clean_email(user_update.email)
    if user_update.password is not None:
        changes["hashed_password"] = get_password_hash(
            check_password(user_update.password),
            rounds=settings.bcrypt_rounds,
        )
    if not changes:
        raise ValidationError("No fields provided for update")

    with store_operation(db, "reading user for update"):
        user = db.get(User, user_id)
    user = require_owner(
        user,
        current_user.id,
        not_found=USER_NOT_FOUND,
        forbidden="Unauthorized action",
        owner_of=lambda user: user.id,
    )

    with store_operation(db, "updating user"):
        if "email" in changes and _email_taken(db, changes["email"], exclude_id=user.id):
            raise ConflictError(EMAIL_TAKEN)
        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = datetime.now(timezone.utc)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError(EMAIL_TAKEN)
        db.refresh(user)

    logger.info(f"User {user.id} updated fields {sorted(changes)}")
    return {"message": "User updated successfully", "user": public_user(user)}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete the caller's own account together with its tasks."""
    user_id = parse_resource_id(user_id, "user")

    with store_operation(db, "reading user for delete"):
        user = db.get(User, user_id)
    user = require_owner(
        user,
        current_user.id,
        not_found=USER_NOT_FOUND,
        forbidden="Unauthorized action",
        owner_of=lambda user: user.id,
    )

    with store_operation(db, "deleting user"):
        db.delete(user)
        db.commit()

    logger.info(f"User {user_id} deleted")
    return {"message": "User deleted successfully"}


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db)):
    user_id = parse_resource_id(user_id, "user")

    with store_operation(db, "reading user"):
        user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return user_payload(user)


@router.get("/users")
def get_users(db: Session = Depends(get_db)):
    """List every user, sorted by name."""
    with store_operation(db, "listing users"):
        users = db.query(User).order_by(User.name.asc()).all()
    return [user_payload(user) for user in users]
