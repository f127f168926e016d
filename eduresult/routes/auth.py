"""
Auth API routes
Admin session flag (login/logout)
"""
from fastapi import APIRouter, Depends

from eduresult.core import Messages, UnauthorizedException
from eduresult.routes.deps import get_session
from eduresult.schemas import LoginRequest, SessionResponse
from eduresult.services import SessionService

router = APIRouter()


@router.post("/login", response_model=SessionResponse)
async def login(request: LoginRequest, session: SessionService = Depends(get_session)):
    """
    Start an admin session
    """
    if not session.login(request.username, request.password):
        raise UnauthorizedException(Messages.INVALID_CREDENTIALS)
    return SessionResponse(is_admin=True, message=Messages.LOGIN_SUCCESS)


@router.post("/logout", response_model=SessionResponse)
async def logout(session: SessionService = Depends(get_session)):
    """
    End the admin session
    """
    session.logout()
    return SessionResponse(is_admin=False, message=Messages.LOGOUT_SUCCESS)


@router.get("/session", response_model=SessionResponse)
async def get_session_state(session: SessionService = Depends(get_session)):
    return SessionResponse(is_admin=session.is_admin)
