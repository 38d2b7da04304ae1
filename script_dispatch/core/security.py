"""Operator authentication and JWT helpers."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from script_dispatch.core.config import Settings
from script_dispatch.core.container import ApplicationContainer, get_app_container
from script_dispatch.core.crypto import verify_password
from script_dispatch.schemas import TokenData

security = HTTPBearer()


def authenticate_operator(settings: Settings, username: str, password: str) -> bool:
    password_hash = settings.security.operators.get(username)
    if not password_hash:
        return False
    return verify_password(password, password_hash)


def create_access_token(settings: Settings, username: str, expires_delta: Optional[timedelta] = None) -> str:
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": username,
        "role": "operator",
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(settings: Settings, token: str) -> TokenData:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    username = payload.get("sub")
    role = payload.get("role")
    if not all([username, role]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(username=username, role=role)


async def get_current_operator(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    container: ApplicationContainer = Depends(get_app_container),
) -> TokenData:
    token_data = decode_access_token(container.settings, credentials.credentials)
    if token_data.username not in container.settings.security.operators:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Operator is not configured")
    return token_data
