"""User account routes and JWT logic for User Service."""

import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, HTTPException, Response, status
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from services.users.config import Settings
from services.users.dependencies import AppSettings, DBSession, EventPublisher
from services.users.models import User
from services.users.schemas import (
    MessageResponse,
    SignedInUser,
    SigninRequest,
    SigninResponse,
    SignupRequest,
    SignupResponse,
    UserResponse,
)
from shared.events.publisher import PublishError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["Users"])

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

INTERNAL_ERROR_DETAIL = "Something went wrong"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(user: User, settings: Settings) -> str:
    """
    Create a JWT access token.

    Args:
        user: The user to encode in the token
        settings: Application settings

    Returns:
        str: Encoded JWT access token
    """
    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": user.id,
        "email": user.email,
        "exp": now + timedelta(minutes=settings.users_access_token_expire_minutes),
        "type": "access",
        "iat": now,
    }
    return jwt.encode(
        to_encode,
        settings.users_jwt_secret_key,
        algorithm=settings.users_jwt_algorithm,
    )


def get_user_or_404(db: Session, user_id: str) -> User:
    """Load a user by id or raise a 404."""
    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


def create_user(db: Session, user_data: SignupRequest) -> User:
    """Check for conflicts, then hash the password and store the user.

    Runs in the threadpool: bcrypt and the database calls are blocking.
    """
    # Check if email already exists
    if db.query(User).filter(User.email == user_data.email).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    # Check if name already exists
    if db.query(User).filter(User.name == user_data.name).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this name already exists",
        )

    user = User(
        email=user_data.email,
        name=user_data.name,
        hashed_password=get_password_hash(user_data.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def remove_user(db: Session, user_id: str) -> None:
    """Delete a user or raise a 404."""
    user = get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()


@router.post("/signup", response_model=SignupResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    user_data: SignupRequest,
    db: DBSession,
    event_publisher: EventPublisher,
) -> SignupResponse:
    """
    Create a new user and publish a user_signup event.

    The event is published only after the user has been committed. If
    publishing fails the user is kept and the caller gets a 500.

    Args:
        user_data: Validated signup data
        db: Database session
        event_publisher: User event publisher

    Returns:
        SignupResponse: Created user data
    """
    user = await run_in_threadpool(create_user, db, user_data)

    try:
        await event_publisher.publish_user_signup(
            user_id=user.id,
            email=user.email,
            name=user.name,
        )
    except PublishError as e:
        logger.error(f"User {user.id} created but user_signup was not published: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        )

    return SignupResponse(result=UserResponse.model_validate(user))


@router.post("/signin", response_model=SigninResponse)
def signin(
    credentials: SigninRequest,
    response: Response,
    db: DBSession,
    settings: AppSettings,
) -> SigninResponse:
    """
    Check credentials and issue an access token.

    The token is returned in the body and set as an httpOnly cookie.

    Args:
        credentials: Email and password
        response: Outgoing response, used to set the cookie
        db: Database session
        settings: Application settings

    Returns:
        SigninResponse: Signed-in user with token
    """
    user = db.query(User).filter(User.email == credentials.email).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User doesn't exist",
        )

    if not verify_password(credentials.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid credentials",
        )

    token = create_access_token(user, settings)
    response.set_cookie(
        key=settings.users_token_cookie_name,
        value=token,
        httponly=True,
        max_age=settings.users_access_token_expire_minutes * 60,
    )

    return SigninResponse(
        message="User signed in successfully",
        user=SignedInUser(
            **UserResponse.model_validate(user).model_dump(),
            token=token,
        ),
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: AppSettings) -> MessageResponse:
    """Clear the token cookie."""
    response.delete_cookie(key=settings.users_token_cookie_name, httponly=True)
    return MessageResponse(message="User logged out")


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: DBSession) -> User:
    """
    Get a user by id.

    Args:
        user_id: The user's ID
        db: Database session

    Returns:
        UserResponse: User data
    """
    return get_user_or_404(db, user_id)


@router.post("/delete/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    db: DBSession,
    event_publisher: EventPublisher,
) -> MessageResponse:
    """
    Delete a user and publish a user_delete event.

    Args:
        user_id: The user's ID
        db: Database session
        event_publisher: User event publisher

    Returns:
        MessageResponse: Deletion message
    """
    await run_in_threadpool(remove_user, db, user_id)

    try:
        await event_publisher.publish_user_delete(user_id=user_id)
    except PublishError as e:
        logger.error(f"User {user_id} deleted but user_delete was not published: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_DETAIL,
        )

    logger.info(f"User {user_id} deleted")
    return MessageResponse(message="User deleted successfully")
