import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from videohub.auth import TokenService, get_current_account_id, get_token_service, hash_password, verify_password
from videohub.database import get_db
from videohub.errors import ValidationError
from videohub.repositories import account_repository
from videohub.schemas.user import LoginRequest, LoginResponse, MessageResponse, RegisterRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

# Same message for unknown email and wrong password
INVALID_CREDENTIALS = "Invalid credentials"


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    """Create an account. Email must be unused."""
    name = (body.name or "").strip()
    email = (body.email or "").strip()
    if not name or not email or not body.password:
        raise ValidationError("All fields are required")
    account_repository.create_account(
        db,
        name=name,
        email=email,
        password_hash=hash_password(body.password),
    )
    logger.info("Registered %s", account_repository.normalize_email(email))
    return MessageResponse(message="Registered successfully")


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Login with email and password."""
    if not (body.email or "").strip() or not body.password:
        raise ValidationError("Missing credentials")
    user = account_repository.get_by_email(db, body.email)
    if not user or not verify_password(body.password, user.password):
        logger.info("Failed login for %s", account_repository.normalize_email(body.email))
        raise ValidationError(INVALID_CREDENTIALS)
    return LoginResponse(
        token=tokens.issue(user.id),
        user=UserResponse(id=user.id, name=user.name, email=user.email),
    )


@router.get("/me", response_model=UserResponse)
def get_me(
    account_id: str = Depends(get_current_account_id),
    db: Session = Depends(get_db),
):
    user = account_repository.get_by_id(db, account_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)
    return UserResponse(id=user.id, name=user.name, email=user.email)
