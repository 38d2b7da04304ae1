"""Operator authentication endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from script_dispatch.core.container import ApplicationContainer
from script_dispatch.core.security import authenticate_operator, create_access_token
from script_dispatch.interfaces.http.deps import get_app_container
from script_dispatch.schemas import LoginRequest, Token

router = APIRouter()


@router.post("/login", response_model=Token, summary="Operator login")
async def login(
    payload: LoginRequest,
    container: ApplicationContainer = Depends(get_app_container),
) -> Token:
    if not authenticate_operator(container.settings, payload.username, payload.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid username or password")
    return Token(access_token=create_access_token(container.settings, payload.username))
