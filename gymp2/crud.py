# gymp2/crud.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Session

from gymp2.models import ENTITIES


def _model(kind: str):
    try:
        return ENTITIES[kind]
    except KeyError:
        raise ValueError(f"tipo desconhecido: {kind}")


def _coerce_key(kind: str, key: Any) -> Any:
    _, key_field = _model(kind)
    if key_field == "id":
        return int(key)
    return str(key)


def _serialize(obj) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.name)
        if isinstance(value, datetime):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = float(value)
        data[column.name] = value
    return data


def _column_values(model, record: Dict[str, Any]) -> Dict[str, Any]:
    """Filtra o registro para as colunas da tabela, convertendo datas ISO."""
    columns = model.__table__.columns
    values: Dict[str, Any] = {}
    for name, value in record.items():
        if name not in columns:
            continue
        if isinstance(columns[name].type, DateTime) and isinstance(value, str):
            value = datetime.fromisoformat(value)
        values[name] = value
    return values


def list_records(db: Session, kind: str) -> List[Dict[str, Any]]:
    model, key_field = _model(kind)
    rows = db.query(model).order_by(getattr(model, key_field).asc()).all()
    return [_serialize(r) for r in rows]


def get_record(db: Session, kind: str, key: Any) -> Optional[Dict[str, Any]]:
    model, key_field = _model(kind)
    obj = db.query(model).filter(getattr(model, key_field) == _coerce_key(kind, key)).first()
    return _serialize(obj) if obj else None


def upsert_record(db: Session, kind: str, record: Dict[str, Any], key: Any) -> Any:
    model, key_field = _model(kind)
    key = _coerce_key(kind, key)
    values = _column_values(model, record)
    values[key_field] = key

    obj = db.query(model).filter(getattr(model, key_field) == key).first()
    if obj is None:
        obj = model(**values)
        db.add(obj)
    else:
        for k, v in values.items():
            setattr(obj, k, v)

    db.commit()
    return key


def delete_record(db: Session, kind: str, key: Any) -> bool:
    model, key_field = _model(kind)
    obj = db.query(model).filter(getattr(model, key_field) == _coerce_key(kind, key)).first()
    if not obj:
        return False
    db.delete(obj)
    db.commit()
    return True


def probe(db: Session) -> None:
    # mesma ideia do "select * from usuarios limit 1" para testar a conexão
    model, _ = _model("usuarios")
    db.query(model).limit(1).all()
