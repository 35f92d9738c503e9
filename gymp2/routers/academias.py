"""
Router de academias: CRUD do painel e rotas públicas.
"""
import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from gymp2.broadcaster import Broadcaster
from gymp2.deps import get_broadcaster, get_store
from gymp2.schemas import AcademiaCreate, AcademiaUpdate, StatusUpdate
from gymp2.store import DualBackendStore

logger = logging.getLogger(__name__)

router = APIRouter()

DEFAULT_IMAGES = {
    "musculacao": "https://images.unsplash.com/photo-1534438327276-14e5300c3a48?w=600&h=330&fit=crop&q=80",
    "artes-marciais": "https://images.unsplash.com/photo-1549060279-7e168fce7090?w=600&h=330&fit=crop&q=80",
    "crossfit": "https://images.unsplash.com/photo-1574680178050-55c6a6a96e0a?w=600&h=330&fit=crop&q=80",
    "yoga": "https://images.unsplash.com/photo-1544367567-0f2fcb009e0b?w=600&h=330&fit=crop&q=80",
    "pilates": "https://images.unsplash.com/photo-1599901860904-17e6ed7083a0?w=600&h=330&fit=crop&q=80",
    "danca": "https://images.unsplash.com/photo-1518693800412-ad92111a1d46?w=600&h=330&fit=crop&q=80",
    "outros": "https://images.unsplash.com/photo-1534367507877-0edd93bd013b?w=600&h=330&fit=crop&q=80",
}


def default_image(tipo):
    return DEFAULT_IMAGES.get(tipo or "", DEFAULT_IMAGES["outros"])


def _owner_names(proprietarios):
    return {str(p.get("id")): p.get("nome") for p in proprietarios}


def _with_owner(academia, owners):
    nome = owners.get(str(academia.get("proprietario_id")))
    return {**academia, "proprietario_nome": nome or "Não informado"}


def _public_view(a):
    preco = a.get("preco")
    return {
        "id": a.get("id"),
        "nome": a.get("nome") or "Academia",
        "tipo": a.get("tipo") or "musculacao",
        "preco": f"{float(preco):.2f}" if preco else "0.00",
        "endereco": a.get("endereco") or "Endereço não informado",
        "cidade": a.get("cidade") or "",
        "estado": a.get("estado") or "",
        "telefone": a.get("telefone") or "",
        "email": a.get("email") or "",
        "descricao": a.get("descricao") or "",
        "abertura": a.get("abertura") or "06:00",
        "fechamento": a.get("fechamento") or "22:00",
        "facilidades": a.get("facilidades") or [],
        "foto": a.get("foto") or default_image(a.get("tipo")),
        "status": a.get("status") or "ativo",
    }


async def _require(store: DualBackendStore, academia_id: int):
    academia = await store.read("academias", academia_id)
    if not academia:
        raise HTTPException(status_code=404, detail="Academia não encontrada")
    return academia


# -----------------------
# Painel
# -----------------------
@router.get("/api/academias")
async def list_academias(store: DualBackendStore = Depends(get_store)):
    academias = await store.read("academias")
    owners = _owner_names(await store.read("proprietarios"))
    return [_with_owner(a, owners) for a in academias]


@router.get("/api/academias/stats")
async def academias_stats(store: DualBackendStore = Depends(get_store)):
    academias = await store.read("academias")
    return {
        "ativas": sum(1 for a in academias if a.get("status") == "ativo"),
        "inativas": sum(1 for a in academias if a.get("status") == "inativo"),
        "pendentes": sum(1 for a in academias if a.get("status") == "pendente"),
        "total": len(academias),
    }


@router.get("/api/academias/{academia_id}")
async def get_academia(academia_id: int, store: DualBackendStore = Depends(get_store)):
    academia = await _require(store, academia_id)
    owners = _owner_names(await store.read("proprietarios"))
    return _with_owner(academia, owners)


@router.post("/api/academias", status_code=201)
async def create_academia(
    payload: AcademiaCreate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    data = payload.model_dump(exclude_none=True)
    result = await store.write("academias", data)
    nova = {**result.record, "id": result.key}

    logger.info("Academia criada: %s (id=%s)", nova["nome"], result.key)
    await broadcaster.publish("academia-criada", nova)
    if nova["status"] == "ativo":
        await broadcaster.publish_public("academia-ativada", _public_view(nova))
    return nova


@router.put("/api/academias/{academia_id}")
async def update_academia(
    academia_id: int,
    payload: AcademiaUpdate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    atual = await _require(store, academia_id)
    changes = payload.model_dump(exclude_unset=True)
    result = await store.write("academias", changes, academia_id)

    atualizada = {**atual, **result.record, "id": academia_id}
    await broadcaster.publish("academia-atualizada", atualizada)
    if atual.get("status") != "ativo" and atualizada.get("status") == "ativo":
        await broadcaster.publish_public("academia-ativada", _public_view(atualizada))
    return atualizada


@router.patch("/api/academias/{academia_id}/status")
async def update_academia_status(
    academia_id: int,
    payload: StatusUpdate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    atual = await _require(store, academia_id)
    await store.write("academias", {"status": payload.status}, academia_id)

    await broadcaster.publish("academia-status-alterado", {"id": academia_id, "status": payload.status})
    if atual.get("status") != "ativo" and payload.status == "ativo":
        await broadcaster.publish_public("academia-ativada", _public_view({**atual, "status": "ativo"}))
    return {"success": True, "message": "Status atualizado", "id": academia_id, "status": payload.status}


@router.delete("/api/academias/{academia_id}")
async def delete_academia(
    academia_id: int,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    academia = await _require(store, academia_id)
    await store.delete("academias", academia_id)

    logger.info("Academia excluída: id=%s", academia_id)
    await broadcaster.publish("academia-excluida", {"id": academia_id})
    return {"success": True, "message": "Academia excluída com sucesso", "academia": academia}


# -----------------------
# Página pública
# -----------------------
@router.get("/api/academias-publicas")
async def list_public_academias(store: DualBackendStore = Depends(get_store)):
    academias = [a for a in await store.read("academias") if a.get("status") == "ativo"]
    academias.sort(key=lambda a: (a.get("nome") or "").lower())
    result = [_public_view(a) for a in academias]
    return {
        "success": True,
        "academias": result,
        "total": len(result),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/api/academia-publica/{academia_id}")
async def get_public_academia(academia_id: int, store: DualBackendStore = Depends(get_store)):
    academia = await store.read("academias", academia_id)
    if not academia or academia.get("status") != "ativo":
        raise HTTPException(status_code=404, detail="Academia não encontrada ou inativa")
    return {"success": True, "academia": academia}
