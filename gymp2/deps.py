# gymp2/deps.py
from typing import Any, Dict, Optional

from fastapi import Header, Request

from gymp2.broadcaster import Broadcaster
from gymp2.sessions import InvalidSession, resolve_session
from gymp2.store import DualBackendStore


def get_store(request: Request) -> DualBackendStore:
    return request.app.state.store


def get_broadcaster(request: Request) -> Broadcaster:
    return request.app.state.broadcaster


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "localhost"


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> Optional[Dict[str, Any]]:
    """Usuário do token Bearer, se houver; token inválido conta como anônimo."""
    if not authorization or not authorization.lower().startswith("bearer "):
        return None
    token = authorization[7:].strip()
    if not token:
        return None
    try:
        return await resolve_session(get_store(request), token)
    except InvalidSession:
        return None
