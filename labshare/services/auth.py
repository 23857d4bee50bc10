from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from ..config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from .errors import Unauthenticated

# auto_error=False so guests reach the handlers instead of a bare 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


@dataclass(frozen=True)
class Viewer:
    """Resolved identity of whoever is making the request."""
    student_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return self.student_id is not None


GUEST = Viewer()


# Function to create JWT token
def create_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def create_access_token(student_id: int, expires_delta: timedelta = None) -> str:
    return create_token({"sub": str(student_id), "type": "access"}, expires_delta)


# Function to verify JWT token
def verify_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise Unauthenticated()


def _student_id_from_token(token: Optional[str]) -> Optional[int]:
    if not token:
        return None
    try:
        payload = verify_token(token)
    except Unauthenticated:
        return None
    if payload.get("type") != "access" or payload.get("sub") is None:
        return None
    try:
        return int(payload["sub"])
    except (TypeError, ValueError):
        return None


# Identity resolver: never raises for "not logged in"
def get_viewer(token: Annotated[Optional[str], Depends(oauth2_scheme)]) -> Viewer:
    student_id = _student_id_from_token(token)
    if student_id is None:
        return GUEST
    return Viewer(student_id=student_id)


# Function to get current student_id from token
def get_current_student_id(token: Annotated[Optional[str], Depends(oauth2_scheme)]) -> int:
    student_id = _student_id_from_token(token)
    if student_id is None:
        raise Unauthenticated()
    return student_id


def get_authenticated_viewer(student_id: Annotated[int, Depends(get_current_student_id)]) -> Viewer:
    return Viewer(student_id=student_id)
