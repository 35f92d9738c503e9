"""
Router de administradores.

Regras de proteção: super admins só são alterados por super admins e nunca
excluídos; ninguém exclui o próprio registro; sempre resta ao menos um
administrador ativo.
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from gymp2.broadcaster import Broadcaster
from gymp2.deps import get_broadcaster, get_current_user, get_store
from gymp2.legacy import strip_credentials
from gymp2.schemas import AdminCreate, AdminUpdate
from gymp2.security import hash_password
from gymp2.store import DualBackendStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/administradores")

MIN_PASSWORD = 6


def _same_id(a, b) -> bool:
    return str(a) == str(b)


def _active_others(admins: List[Dict[str, Any]], admin_id: int, nivel: Optional[str] = None) -> int:
    return sum(
        1
        for a in admins
        if a.get("status") == "ativo"
        and not _same_id(a.get("id"), admin_id)
        and (nivel is None or a.get("nivel") == nivel)
    )


def _is_super_admin(requester: Optional[Dict[str, Any]], admins: List[Dict[str, Any]]) -> bool:
    if not requester:
        return False
    if requester.get("role") == "super_admin":
        return True
    return any(a.get("email") == requester.get("email") and a.get("nivel") == "super_admin" for a in admins)


def _find(admins: List[Dict[str, Any]], admin_id: int) -> Dict[str, Any]:
    for admin in admins:
        if _same_id(admin.get("id"), admin_id):
            return admin
    raise HTTPException(status_code=404, detail="Administrador não encontrado")


def _author(requester: Optional[Dict[str, Any]]) -> str:
    return requester.get("email") if requester else "sistema"


@router.get("")
async def list_admins(store: DualBackendStore = Depends(get_store)):
    return [strip_credentials(a) for a in await store.read("administradores")]


@router.get("/{admin_id}")
async def get_admin(admin_id: int, store: DualBackendStore = Depends(get_store)):
    admin = await store.read("administradores", admin_id)
    if not admin:
        raise HTTPException(status_code=404, detail="Administrador não encontrado")
    return strip_credentials(admin)


@router.post("", status_code=201)
async def create_admin(
    payload: AdminCreate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    requester: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    if len(payload.senha) < MIN_PASSWORD:
        raise HTTPException(status_code=400, detail="Senha deve ter no mínimo 6 caracteres")

    admins = await store.read("administradores")
    if any(a.get("email") == payload.email for a in admins):
        raise HTTPException(status_code=400, detail="Este e-mail já está cadastrado")

    pw_hash, pw_salt = hash_password(payload.senha)
    data = payload.model_dump(exclude_none=True, exclude={"senha"})
    data.update(password_hash=pw_hash, password_salt=pw_salt, criado_por=_author(requester))

    result = await store.write("administradores", data)
    novo = strip_credentials({**result.record, "id": result.key})

    await broadcaster.publish("admin-criado", {"id": result.key, "nome": novo["nome"], "email": novo["email"]})
    await store.log_activity(
        "admin_criado",
        {"admin_email": payload.email, "criado_por": _author(requester), "nivel": payload.nivel},
    )
    return novo


@router.put("/{admin_id}")
async def update_admin(
    admin_id: int,
    payload: AdminUpdate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    requester: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    admins = await store.read("administradores")
    atual = _find(admins, admin_id)

    if atual.get("nivel") == "super_admin" and not _is_super_admin(requester, admins):
        raise HTTPException(
            status_code=403,
            detail="Apenas super administradores podem modificar outros super admins",
        )

    changes = payload.model_dump(exclude_unset=True, exclude={"senha"})
    # campos obrigatórios vazios mantêm o valor atual
    for name in ("nome", "email", "nivel", "status"):
        if name in changes and not changes[name]:
            del changes[name]

    email = changes.get("email")
    if email and email != atual.get("email"):
        if any(a.get("email") == email and not _same_id(a.get("id"), admin_id) for a in admins):
            raise HTTPException(status_code=400, detail="Este e-mail já está em uso por outro administrador")

    if payload.senha:
        if len(payload.senha) < MIN_PASSWORD:
            raise HTTPException(status_code=400, detail="Senha deve ter no mínimo 6 caracteres")
        changes["password_hash"], changes["password_salt"] = hash_password(payload.senha)

    if atual.get("status") == "ativo":
        if changes.get("status", "ativo") != "ativo" and _active_others(admins, admin_id) == 0:
            raise HTTPException(status_code=403, detail="Não é possível desativar o último administrador ativo")
        demoting = atual.get("nivel") == "super_admin" and changes.get("nivel", "super_admin") != "super_admin"
        if demoting and _active_others(admins, admin_id, nivel="super_admin") == 0:
            raise HTTPException(status_code=403, detail="Não é possível rebaixar o último super administrador ativo")

    result = await store.write("administradores", changes, admin_id)
    atualizado = strip_credentials({**atual, **result.record, "id": atual["id"]})

    await broadcaster.publish("admin-atualizado", {"id": atual["id"], "nome": atualizado.get("nome")})
    await store.log_activity("admin_atualizado", {"admin_id": atual["id"], "atualizado_por": _author(requester)})
    return atualizado


@router.delete("/{admin_id}")
async def delete_admin(
    admin_id: int,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
    requester: Optional[Dict[str, Any]] = Depends(get_current_user),
):
    admins = await store.read("administradores")
    admin = _find(admins, admin_id)

    if admin.get("nivel") == "super_admin":
        raise HTTPException(status_code=403, detail="Não é possível excluir um Super Administrador")
    if requester and requester.get("email") == admin.get("email"):
        raise HTTPException(status_code=403, detail="Você não pode excluir sua própria conta")
    if _active_others(admins, admin_id) == 0:
        raise HTTPException(status_code=403, detail="Não é possível excluir o último administrador ativo")

    await store.delete("administradores", admin["id"])

    logger.info("Administrador excluído: %s", admin.get("email"))
    await broadcaster.publish("admin-excluido", {"id": admin["id"]})
    await store.log_activity("admin_excluido", {"admin_email": admin.get("email"), "excluido_por": _author(requester)})
    return {
        "success": True,
        "message": "Administrador excluído com sucesso",
        "admin": {"id": admin["id"], "nome": admin.get("nome"), "email": admin.get("email")},
    }
