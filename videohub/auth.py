from datetime import datetime, timedelta, timezone
from functools import lru_cache
import logging
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from videohub.config import get_settings
from videohub.errors import InvalidTokenError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# Use Argon2 for password hashing
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return pwd_context.verify(plain, hashed)


class TokenService:
    """Issues and verifies stateless HS256 access tokens. No revocation list."""

    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60 * 24):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, account_id: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "sub": account_id,
            "iat": issued_at,
            "exp": issued_at + timedelta(minutes=self.expire_minutes),
            "type": "access",
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """Return the account id, or raise InvalidTokenError (bad signature, malformed, expired)."""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise InvalidTokenError() from e
        sub = payload.get("sub")
        if not isinstance(sub, str) or not sub or payload.get("type") != "access":
            raise InvalidTokenError()
        return sub


@lru_cache
def get_token_service() -> TokenService:
    settings = get_settings()
    return TokenService(
        secret_key=settings.jwt_secret,
        algorithm=settings.algorithm,
        expire_minutes=settings.access_token_expire_minutes,
    )


def get_current_account_id(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """Reject with 401 unless a valid bearer token is present; attach the account id to request.state."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        account_id = tokens.verify(credentials.credentials)
    except InvalidTokenError:
        logger.info("Rejected bearer token on %s %s", request.method, request.url.path)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    request.state.account_id = account_id
    return account_id
