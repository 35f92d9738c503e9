# gymp2/shaping.py
"""
Mapeia os campos genéricos recebidos para o formato gravado em cada tipo.

Na inclusão, campos opcionais recebem valores padrão e `criado_em` é carimbado
no servidor. Na atualização só entram os campos informados, mais
`data_atualizacao`.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return list(value)


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _to_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _to_id(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# campo -> (valor padrão na inclusão, conversor)
Fields = Dict[str, tuple]

ACADEMIA_FIELDS: Fields = {
    "nome": (None, str),
    "cnpj": (None, str),
    "tipo": (None, str),
    "preco": (None, _to_float),
    "endereco": (None, str),
    "cidade": (None, str),
    "estado": (None, str),
    "telefone": (None, str),
    "email": (None, str),
    "descricao": (None, str),
    "facilidades": ([], _to_list),
    "abertura": (None, str),
    "fechamento": (None, str),
    "foto": (None, str),
    "status": ("ativo", str),
    "proprietario_id": (None, _to_id),
}

PROPRIETARIO_FIELDS: Fields = {
    "nome": (None, str),
    "email": (None, str),
    "telefone": (None, str),
    "cpf": (None, str),
    "endereco": (None, str),
    "cidade": (None, str),
    "estado": (None, str),
    "descricao": (None, str),
    "status": ("ativo", str),
}

PERSONAL_FIELDS: Fields = {
    "nome": (None, str),
    "email": (None, str),
    "telefone": (None, str),
    "cidade": (None, str),
    "bairros": ([], _to_list),
    "especialidade": (None, str),
    "anos_experiencia": (0, _to_int),
    "cref": (None, str),
    "sobre": (None, str),
    "descricao": (None, str),
    "expectativas": (None, str),
    "academia_id": (None, _to_id),
    "status": ("pendente", str),
    "tipo": ("independente", str),
    "avaliacao": (0, _to_float),
    "total_avaliacoes": (0, _to_int),
    "experiencia": (None, str),
    "foto": (None, str),
    "data_aprovacao": (None, str),
}

ADMIN_FIELDS: Fields = {
    "nome": (None, str),
    "email": (None, str),
    "password_hash": (None, str),
    "password_salt": (None, str),
    "nivel": ("admin", str),
    "status": ("ativo", str),
    "telefone": (None, str),
    "observacoes": (None, str),
    "criado_por": ("sistema", str),
    "ultimo_acesso": (None, str),
}

USUARIO_FIELDS: Fields = {
    "name": (None, str),
    "email": (None, str),
    "password_hash": (None, str),
    "password_salt": (None, str),
    "role": ("user", str),
    "status": ("ativo", str),
    "ultimo_login": (None, str),
}

SESSAO_FIELDS: Fields = {
    "token": (None, str),
    "email": (None, str),
    "criado_em": (None, _to_int),
    "ip": (None, str),
}


def _shape(fields: Fields, data: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    shaped: Dict[str, Any] = {}
    for name, (default, convert) in fields.items():
        if name in data and data[name] is not None:
            shaped[name] = convert(data[name])
        elif name in data:
            shaped[name] = None
        elif not partial:
            shaped[name] = list(default) if isinstance(default, list) else default
    return shaped


def _stamp(shaped: Dict[str, Any], partial: bool) -> Dict[str, Any]:
    if partial:
        shaped["data_atualizacao"] = utc_now_iso()
    else:
        shaped["criado_em"] = utc_now_iso()
    return shaped


def shape_academia(data, partial=False):
    return _stamp(_shape(ACADEMIA_FIELDS, data, partial), partial)


def shape_proprietario(data, partial=False):
    return _stamp(_shape(PROPRIETARIO_FIELDS, data, partial), partial)


def shape_personal(data, partial=False):
    shaped = _shape(PERSONAL_FIELDS, data, partial)
    if not partial and not shaped.get("experiencia"):
        shaped["experiencia"] = f"{shaped.get('anos_experiencia') or 0} ano(s)"
    return _stamp(shaped, partial)


def shape_admin(data, partial=False):
    return _stamp(_shape(ADMIN_FIELDS, data, partial), partial)


def shape_usuario(data, partial=False):
    shaped = _shape(USUARIO_FIELDS, data, partial)
    if not partial:
        shaped["criado_em"] = utc_now_iso()
    return shaped


def shape_sessao(data, partial=False):
    # sessões guardam criado_em em epoch ms, informado pelo emissor
    return _shape(SESSAO_FIELDS, data, partial)


SHAPERS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "usuarios": shape_usuario,
    "sessoes": shape_sessao,
    "academias": shape_academia,
    "proprietarios": shape_proprietario,
    "personais": shape_personal,
    "administradores": shape_admin,
}


def shape(kind: str, data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    try:
        shaper = SHAPERS[kind]
    except KeyError:
        raise ValueError(f"tipo desconhecido: {kind}")
    return shaper(data, partial)
