"""
Router de personais: CRUD do painel, lista pública de ativos, aprovação em
massa e o formulário público de cadastro.
"""
import logging
from collections import Counter

from fastapi import APIRouter, Depends, HTTPException

from gymp2.broadcaster import Broadcaster
from gymp2.deps import get_broadcaster, get_store
from gymp2.schemas import PersonalCreate, PersonalSignup, PersonalUpdate
from gymp2.shaping import utc_now_iso
from gymp2.store import DualBackendStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/personais")


def _gyms_by_id(academias):
    return {str(a.get("id")): a for a in academias}


def _gym_of(personal, gyms):
    if not personal.get("academia_id"):
        return None
    return gyms.get(str(personal["academia_id"]))


def _public_view(p, gyms):
    """Formato usado pelo filtro público de personais."""
    gym = _gym_of(p, gyms)
    return {
        "id": p.get("id"),
        "nome": p.get("nome"),
        "email": p.get("email"),
        "telefone": p.get("telefone"),
        "foto": p.get("foto") or "",
        "especialidade": p.get("especialidade"),
        "anos_experiencia": p.get("anos_experiencia") or 0,
        "status": p.get("status"),
        "descricao": p.get("descricao") or p.get("sobre") or "",
        "cidade": p.get("cidade") or "",
        "bairros": p.get("bairros") or [],
        "academia_id": p.get("academia_id"),
        "academia": gym.get("nome") if gym else "Independente",
        "academia_cidade": gym.get("cidade") if gym else None,
        "especializacoes": [p["especialidade"]] if p.get("especialidade") else [],
        "avaliacao": p.get("avaliacao") or 0,
        "total_avaliacoes": p.get("total_avaliacoes") or 0,
        "criado_em": p.get("criado_em"),
        "data_atualizacao": p.get("data_atualizacao") or p.get("criado_em"),
    }


async def _require(store: DualBackendStore, personal_id: int):
    personal = await store.read("personais", personal_id)
    if not personal:
        raise HTTPException(status_code=404, detail="Personal não encontrado")
    return personal


async def _announce_approval(broadcaster: Broadcaster, personal, gyms):
    await broadcaster.publish("personal-aprovado", personal)
    await broadcaster.publish_public("personal-aprovado", _public_view(personal, gyms))


@router.get("")
async def list_personais(store: DualBackendStore = Depends(get_store)):
    personais = await store.read("personais")
    gyms = _gyms_by_id(await store.read("academias"))
    result = []
    for p in personais:
        gym = _gym_of(p, gyms)
        result.append({**p, "academia": gym.get("nome") if gym else "Independente"})
    return result


@router.get("/ativos")
async def list_active_personais(store: DualBackendStore = Depends(get_store)):
    personais = await store.read("personais")
    gyms = _gyms_by_id(await store.read("academias"))
    return [_public_view(p, gyms) for p in personais if p.get("status") == "ativo"]


@router.get("/stats")
async def personais_stats(store: DualBackendStore = Depends(get_store)):
    personais = await store.read("personais")
    status = Counter(p.get("status") for p in personais)
    total_exp = sum(int(p.get("anos_experiencia") or 0) for p in personais)
    return {
        "total": len(personais),
        "ativos": status["ativo"],
        "pendentes": status["pendente"],
        "inativos": status["inativo"],
        "especialidades": dict(Counter(p["especialidade"] for p in personais if p.get("especialidade"))),
        "cidades": dict(Counter(p["cidade"] for p in personais if p.get("cidade"))),
        "media_experiencia": round(total_exp / len(personais), 1) if personais else 0,
    }


@router.post("/aprovar-pendentes")
async def approve_pending(
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    pendentes = [p for p in await store.read("personais") if p.get("status") == "pendente"]
    if not pendentes:
        return {"success": True, "message": "Não há personais pendentes", "aprovados": 0}

    gyms = _gyms_by_id(await store.read("academias"))
    for p in pendentes:
        result = await store.write("personais", {"status": "ativo", "data_aprovacao": utc_now_iso()}, p["id"])
        await _announce_approval(broadcaster, {**p, **result.record}, gyms)

    logger.info("%s personais aprovados em massa", len(pendentes))
    return {
        "success": True,
        "message": f"{len(pendentes)} personais aprovados com sucesso",
        "aprovados": len(pendentes),
    }


@router.post("/cadastro", status_code=201)
async def signup_personal(
    payload: PersonalSignup,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    """Cadastro vindo do formulário público; sempre entra como pendente."""
    data = payload.model_dump()
    data.update(status="pendente", tipo="independente", avaliacao=0)
    result = await store.write("personais", data)
    novo = {**result.record, "id": result.key}

    await store.log_activity(
        "personal_cadastrado",
        {"id": novo["id"], "nome": novo["nome"], "email": novo["email"], "cidade": novo["cidade"]},
    )
    await broadcaster.publish("personal-cadastrado", novo)
    return {"success": True, "message": "Cadastro realizado com sucesso! Aguarde aprovação.", "data": novo}


@router.get("/{personal_id}")
async def get_personal(personal_id: int, store: DualBackendStore = Depends(get_store)):
    personal = await _require(store, personal_id)
    gym = _gym_of(personal, _gyms_by_id(await store.read("academias")))
    return {
        **personal,
        "academia": gym.get("nome") if gym else "Independente",
        "academia_info": gym,
    }


@router.post("", status_code=201)
async def create_personal(
    payload: PersonalCreate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    result = await store.write("personais", payload.model_dump(exclude_none=True))
    novo = {**result.record, "id": result.key}

    logger.info("Personal criado: %s (status=%s)", novo["nome"], novo["status"])
    await broadcaster.publish("personal-criado", novo)
    if novo["status"] == "ativo":
        gyms = _gyms_by_id(await store.read("academias"))
        await broadcaster.publish_public("personal-aprovado", _public_view(novo, gyms))
    return novo


@router.put("/{personal_id}")
async def update_personal(
    personal_id: int,
    payload: PersonalUpdate,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    atual = await _require(store, personal_id)
    changes = payload.model_dump(exclude_unset=True)
    approving = atual.get("status") != "ativo" and changes.get("status") == "ativo"
    if approving:
        changes["data_aprovacao"] = utc_now_iso()

    result = await store.write("personais", changes, personal_id)
    atualizado = {**atual, **result.record, "id": personal_id}

    await broadcaster.publish("personal-atualizado", atualizado)
    if approving:
        logger.info("Personal aprovado: %s", atualizado.get("nome"))
        await _announce_approval(broadcaster, atualizado, _gyms_by_id(await store.read("academias")))
    return atualizado


@router.delete("/{personal_id}")
async def delete_personal(
    personal_id: int,
    store: DualBackendStore = Depends(get_store),
    broadcaster: Broadcaster = Depends(get_broadcaster),
):
    personal = await _require(store, personal_id)
    await store.delete("personais", personal_id)

    logger.info("Personal excluído: %s", personal.get("nome"))
    await broadcaster.publish("personal-excluido", {"id": personal_id})
    return {"success": True, "message": "Personal excluído com sucesso", "personal": personal}
