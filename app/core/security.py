from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
import bcrypt
import secrets

from app.core.config import settings
from app.core.exceptions import AuthenticationError, BadRequestError

PASSWORD_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz~!@-#$"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify password"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = plain_password.encode('utf-8')[:72]
    return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))


def get_password_hash(password: str) -> str:
    """Hash password with configurable rounds (BCRYPT_ROUNDS in .env)"""
    # Bcrypt has a 72 byte limit - truncate password if necessary
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')


def generate_random_password(length: Optional[int] = None) -> str:
    """Random password for accounts created without one"""
    length = length or settings.GENERATED_PASSWORD_LENGTH
    return "".join(secrets.choice(PASSWORD_ALPHABET) for _ in range(length))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    return encoded_jwt


def decode_token(token: str) -> Dict[str, Any]:
    """Decode JWT token"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
        return payload
    except JWTError:
        raise AuthenticationError("Could not validate credentials")


# ==================== Password reset tokens ====================

def _reset_secret(password_hash: str) -> str:
    # Keyed on the current hash so a token dies once the password changes
    return f"{settings.JWT_SECRET_KEY}{password_hash}"


def create_password_reset_token(user_id: int, password_hash: str) -> str:
    expiry = datetime.utcnow() + timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    payload = {"id": user_id, "expiryDate": expiry.isoformat()}
    return jwt.encode(payload, _reset_secret(password_hash), algorithm=settings.JWT_ALGORITHM)


def verify_password_reset_token(token: str, user_id: int, password_hash: str) -> None:
    """Raise unless the token was issued for this user, against this hash, and is unexpired"""
    try:
        payload = jwt.decode(token, _reset_secret(password_hash), algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise BadRequestError("Invalid token")

    if payload.get("id") != user_id:
        raise BadRequestError("Invalid token")

    expiry = datetime.fromisoformat(payload.get("expiryDate", "1970-01-01T00:00:00"))
    if expiry < datetime.utcnow():
        raise BadRequestError("Token has expired")
