"""User login route."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from bookstore.adapters.identity.sqlalchemy import SqlAlchemyIdentityAdapter
from bookstore.api.controllers import describe_exception, internal_error
from bookstore.api.middleware.auth import TokenIssuer, get_token_issuer
from bookstore.api.schemas import ErrorResponse, LoginRequest, TokenResponse
from bookstore.database import get_session
from bookstore.services.auth import AuthService

logger = logging.getLogger("bookstore.api.users")

router = APIRouter(prefix="/api/users", tags=["Users"])


def get_auth_service(
    session: AsyncSession = Depends(get_session),
    issuer: TokenIssuer = Depends(get_token_issuer),
) -> AuthService:
    return AuthService(SqlAlchemyIdentityAdapter(session), issuer, logger)


@router.post(
    "",
    response_model=TokenResponse,
    responses={401: {"description": "Credentials rejected"}, 500: {"model": ErrorResponse}},
)
async def login(
    data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Exchange a username and password for a bearer token."""
    location = "Users - login"
    try:
        token = await service.login(data.username, data.password)
    except HTTPException:
        raise
    except Exception as exc:
        raise internal_error(logger, f"{location}: {describe_exception(exc)}") from exc

    if token is None:
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content=data.model_dump(exclude={"password"}),
        )
    return TokenResponse(token=token)
