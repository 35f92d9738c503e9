import logging

from fastapi import APIRouter, Depends, HTTPException

from gymp2.broadcaster import Broadcaster
from gymp2.deps import get_broadcaster, get_store
from gymp2.schemas import ProprietarioCreate, ProprietarioUpdate
from gymp2.store import DualBackendStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/proprietarios")


async def _require(store: DualBackendStore, proprietario_id: int):
    proprietario = await store.read("proprietarios", proprietario_id)
    if not proprietario:
        raise HTTPException(status_code=404, detail="Proprietário não encontrado")
    return proprietario


@router.get("")
async def list_proprietarios(store: DualBackendStore = Depends(get_store)):
    return await store.read("proprietarios")


@router.get("/{proprietario_id}")
async def get_proprietario(proprietario_id: int, store: DualBackendStore = Depends(get_store)):
    return await _require(store, proprietario_id)


@router.post("", status_code=201)
async def create_proprietario(
    payload: ProprietarioCreate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    result = await store.write("proprietarios", payload.model_dump(exclude_none=True))
    novo = {**result.record, "id": result.key}
    logger.info("Proprietário criado: %s (id=%s)", novo["nome"], result.key)
    await broadcaster.publish("proprietario-criado", novo)
    return novo


@router.put("/{proprietario_id}")
async def update_proprietario(
    proprietario_id: int,
    payload: ProprietarioUpdate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    atual = await _require(store, proprietario_id)
    result = await store.write("proprietarios", payload.model_dump(exclude_unset=True), proprietario_id)
    atualizado = {**atual, **result.record, "id": proprietario_id}
    await broadcaster.publish("proprietario-atualizado", atualizado)
    return atualizado


@router.delete("/{proprietario_id}")
async def delete_proprietario(
    proprietario_id: int,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    proprietario = await _require(store, proprietario_id)
    await store.delete("proprietarios", proprietario_id)
    await broadcaster.publish("proprietario-excluido", {"id": proprietario_id})
    return {"success": True, "message": "Proprietário excluído com sucesso", "proprietario": proprietario}
