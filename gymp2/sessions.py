# gymp2/sessions.py
import logging
from typing import Any, Dict, Optional

from gymp2 import security
from gymp2.store import DualBackendStore

logger = logging.getLogger(__name__)


class InvalidSession(Exception):
    """Token desconhecido, expirado ou sem usuário associado."""


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": user.get("name"),
        "email": user.get("email"),
        "role": user.get("role") or "user",
    }


async def open_session(store: DualBackendStore, email: str, ip: Optional[str]) -> str:
    token = security.issue_token()
    # o token precisa valer já na próxima requisição: aguarda a gravação
    await store.write(
        "sessoes",
        {"token": token, "email": email, "criado_em": security.now_millis(), "ip": ip or "localhost"},
        token,
        wait=True,
    )
    return token


async def resolve_session(store: DualBackendStore, token: str) -> Dict[str, Any]:
    """Valida o token (expiração verificada só aqui, na leitura) e devolve o usuário."""
    session = await store.lookup("sessoes", token)
    if not session:
        raise InvalidSession("Sessão inválida")

    if security.is_expired(session.get("criado_em"), security.now_millis()):
        await store.delete("sessoes", token)
        logger.info("Sessão expirada removida para %s", session.get("email"))
        raise InvalidSession("Sessão expirada")

    user = await store.lookup("usuarios", session.get("email"))
    if not user:
        raise InvalidSession("Usuário não encontrado")
    return public_user(user)


async def close_session(store: DualBackendStore, token: str) -> Optional[Dict[str, Any]]:
    session = await store.lookup("sessoes", token)
    await store.delete("sessoes", token)
    return session
