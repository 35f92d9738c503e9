# gymp2/file_store.py
"""
Backup local em arquivos JSON, um documento por tipo de entidade.

- usuarios.json: {"usuarios": {email: registro}, "total_usuarios": n, "logs": [...]}
- sessoes.json:  {"sessoes": {token: registro}}
- demais:        [registro, ...] com campo numérico "id"
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from gymp2.legacy import normalize_credentials

logger = logging.getLogger(__name__)

FILES = {
    "usuarios": "usuarios.json",
    "sessoes": "sessoes.json",
    "academias": "academias.json",
    "proprietarios": "proprietarios.json",
    "personais": "personais.json",
    "administradores": "admins.json",
}

MAX_LOGS = 1000

Document = Union[Dict[str, Any], List[Dict[str, Any]]]


class StorageError(Exception):
    """Falha de leitura/escrita no backup local."""


def _initial_document(kind: str) -> Document:
    if kind == "usuarios":
        return {
            "sistema": "Gymp2",
            "versao": "3.0",
            "total_usuarios": 0,
            "usuarios": {},
            "logs": [],
        }
    if kind == "sessoes":
        return {"sessoes": {}}
    return []


def _same_key(a: Any, b: Any) -> bool:
    return str(a) == str(b)


class FileStore:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self._locks = {kind: threading.Lock() for kind in FILES}

    def path(self, kind: str) -> Path:
        try:
            return self.data_dir / FILES[kind]
        except KeyError:
            raise ValueError(f"tipo desconhecido: {kind}")

    def initialize(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"não foi possível criar {self.data_dir}: {e}") from e

        for kind in FILES:
            path = self.path(kind)
            if not path.exists():
                self._dump(kind, _initial_document(kind))
                logger.info("Backup %s criado", path.name)

    # -----------------------
    # Documento bruto
    # -----------------------
    def _load(self, kind: str) -> Document:
        path = self.path(kind)
        try:
            with path.open("r", encoding="utf-8") as fh:
                doc = json.load(fh)
        except FileNotFoundError:
            return _initial_document(kind)
        except (OSError, ValueError) as e:
            raise StorageError(f"erro ao ler {path.name}: {e}") from e

        if kind in ("usuarios", "sessoes"):
            if not isinstance(doc, dict):
                raise StorageError(f"{path.name} com formato inválido")
            doc.setdefault(kind, {})
        elif not isinstance(doc, list):
            raise StorageError(f"{path.name} com formato inválido")
        return doc

    def _dump(self, kind: str, doc: Document) -> None:
        path = self.path(kind)
        try:
            fd, tmp = tempfile.mkstemp(dir=str(self.data_dir), prefix=f".{path.stem}-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, ensure_ascii=False, indent=2)
            os.replace(tmp, path)
        except OSError as e:
            raise StorageError(f"erro ao salvar {path.name}: {e}") from e

    # -----------------------
    # Registros
    # -----------------------
    def read_all(self, kind: str) -> List[Dict[str, Any]]:
        doc = self._load(kind)
        if kind == "usuarios":
            return [normalize_credentials(dict(u, email=email)) for email, u in doc["usuarios"].items()]
        if kind == "sessoes":
            return [dict(s, token=token) for token, s in doc["sessoes"].items()]
        if kind == "administradores":
            return [normalize_credentials(a) for a in doc]
        return list(doc)

    def read_one(self, kind: str, key: Any) -> Optional[Dict[str, Any]]:
        doc = self._load(kind)
        if kind in ("usuarios", "sessoes"):
            found = doc[kind].get(str(key))
            if found is None:
                return None
            field = "email" if kind == "usuarios" else "token"
            record = dict(found, **{field: str(key)})
            return normalize_credentials(record) if kind == "usuarios" else record

        for item in doc:
            if _same_key(item.get("id"), key):
                return normalize_credentials(item) if kind == "administradores" else item
        return None

    def save(self, kind: str, record: Dict[str, Any], key: Any) -> Any:
        """Upsert por chave (email, token ou id); faz merge com o registro existente."""
        with self._locks[kind]:
            doc = self._load(kind)

            if kind in ("usuarios", "sessoes"):
                bucket = doc[kind]
                merged = dict(bucket.get(str(key)) or {})
                if kind == "usuarios":
                    merged = normalize_credentials(merged)
                    merged.update(record)
                    merged["email"] = str(key)
                    doc["total_usuarios"] = len(bucket) + (0 if str(key) in bucket else 1)
                else:
                    merged.update(record)
                    merged["token"] = str(key)
                bucket[str(key)] = merged
            else:
                for index, item in enumerate(doc):
                    if _same_key(item.get("id"), key):
                        merged = normalize_credentials(item) if kind == "administradores" else dict(item)
                        merged.update(record)
                        merged["id"] = item["id"]
                        doc[index] = merged
                        break
                else:
                    doc.append({**record, "id": key})

            self._dump(kind, doc)
        return key

    def delete(self, kind: str, key: Any) -> bool:
        with self._locks[kind]:
            doc = self._load(kind)
            if kind in ("usuarios", "sessoes"):
                if doc[kind].pop(str(key), None) is None:
                    return False
                if kind == "usuarios":
                    doc["total_usuarios"] = len(doc["usuarios"])
            else:
                remaining = [item for item in doc if not _same_key(item.get("id"), key)]
                if len(remaining) == len(doc):
                    return False
                doc = remaining
            self._dump(kind, doc)
        return True

    # -----------------------
    # Logs de atividade
    # -----------------------
    def append_log(self, kind: str, data: Dict[str, Any]) -> None:
        with self._locks["usuarios"]:
            doc = self._load("usuarios")
            logs = doc.setdefault("logs", [])
            now = datetime.now(timezone.utc)
            logs.append(
                {
                    "id": int(now.timestamp() * 1000),
                    "timestamp": now.isoformat(),
                    "tipo": kind,
                    "dados": data,
                    "ip": data.get("ip") or "localhost",
                }
            )
            doc["logs"] = logs[-MAX_LOGS:]
            self._dump("usuarios", doc)

    def read_logs(self) -> List[Dict[str, Any]]:
        return list(self._load("usuarios").get("logs", []))
