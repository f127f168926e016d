"""
Shared route dependencies
Hands the per-process store, session and extraction client to handlers
"""
import logging

from fastapi import Depends, Request

from eduresult.core import ServiceUnavailableException, UnauthorizedException
from eduresult.modules.sheet_extraction import ExtractionClient, ProviderFactory
from eduresult.services import RecordStore, SessionService

logger = logging.getLogger(__name__)


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_session(request: Request) -> SessionService:
    return request.app.state.session


def get_extraction_client(request: Request) -> ExtractionClient:
    """Built on first use; the app starts without a configured provider"""
    client = request.app.state.extraction_client
    if client is None:
        try:
            client = ExtractionClient(ProviderFactory.create())
        except ValueError as e:
            logger.error(f"Extraction provider not configured: {e}")
            raise ServiceUnavailableException("extraction", str(e))
        request.app.state.extraction_client = client
    return client


def require_admin(session: SessionService = Depends(get_session)) -> SessionService:
    if not session.is_admin:
        raise UnauthorizedException()
    return session
