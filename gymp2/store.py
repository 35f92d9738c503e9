# gymp2/store.py
"""
Armazenamento duplo: banco remoto (Supabase/Postgres via SQLAlchemy) com
backup local em JSON.

Leitura: tenta o remoto primeiro. Zero linhas é resposta válida; só uma falha
de conexão/consulta faz cair para o arquivo.

Escrita: duas tarefas independentes (arquivo e remoto). Por padrão a chamada
retorna sem esperar nenhuma delas; `WriteResult.wait()` permite aguardar
quando a durabilidade importa.
"""
from __future__ import annotations

import asyncio
import logging
import threading
import time
from typing import Any, Dict, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError

from gymp2 import crud
from gymp2.config import StoreConfig
from gymp2.database import Base, create_remote_engine, create_session_factory
from gymp2.file_store import FileStore, StorageError
from gymp2.models import ENTITIES, KEYED_TYPES
from gymp2.security import hash_password
from gymp2.shaping import shape

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_EMAIL = "admin@ifpi.edu.br"
DEFAULT_ADMIN_PASSWORD = "123456"

REMOTE_ERRORS = (SQLAlchemyError, OSError)


class IdGenerator:
    """Ids numéricos baseados no relógio (epoch ms), sempre crescentes."""

    def __init__(self):
        self._last = 0
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            candidate = int(time.time() * 1000)
            self._last = max(candidate, self._last + 1)
            return self._last


class WriteResult:
    """Resultado de uma escrita dupla, com o desfecho de cada backend."""

    def __init__(
        self,
        key: Any,
        local: asyncio.Task,
        remote: Optional[asyncio.Task] = None,
        record: Optional[Dict[str, Any]] = None,
    ):
        self.key = key
        self.record = record
        self.local = local
        self.remote = remote

    async def wait(self) -> "WriteResult":
        tasks = [t for t in (self.local, self.remote) if t is not None]
        await asyncio.gather(*tasks, return_exceptions=True)
        return self

    @staticmethod
    def _state(task: Optional[asyncio.Task]) -> Optional[bool]:
        if task is None or not task.done() or task.cancelled():
            return None
        if task.exception() is not None:
            return False
        return bool(task.result())

    def outcome(self) -> Dict[str, Optional[bool]]:
        # None = não iniciado ou ainda em andamento
        return {"local": self._state(self.local), "remote": self._state(self.remote)}

    def local_error(self) -> Optional[BaseException]:
        if self.local.done() and not self.local.cancelled():
            return self.local.exception()
        return None


class DualBackendStore:
    def __init__(self, config: StoreConfig):
        self.config = config
        self.files = FileStore(config.data_dir)
        self.engine = None
        self.SessionLocal = None
        self.ids = IdGenerator()
        self._pending: Set[asyncio.Task] = set()

    # -----------------------
    # Inicialização
    # -----------------------
    def start(self) -> None:
        self.files.initialize()

        if self.config.enabled:
            try:
                self.engine = create_remote_engine(self.config)
                Base.metadata.create_all(bind=self.engine)
                self.SessionLocal = create_session_factory(self.engine)
                with self.SessionLocal() as db:
                    crud.probe(db)
                logger.info("Banco remoto conectado")
            except REMOTE_ERRORS as e:
                logger.error("Erro ao conectar no banco remoto: %s | usando apenas arquivos JSON", e)
                self.config.enabled = False
                self.SessionLocal = None
        else:
            logger.warning("SUPABASE_DB_URL/SUPABASE_SERVICE_KEY ausentes: usando apenas arquivos JSON")

        self._seed_defaults()

    def _seed_defaults(self) -> None:
        """Garante o usuário admin padrão e ao menos um administrador."""
        pw_hash, pw_salt = hash_password(DEFAULT_ADMIN_PASSWORD)

        if self._lookup_sync("usuarios", DEFAULT_ADMIN_EMAIL) is None:
            user = shape(
                "usuarios",
                {
                    "name": "Administrador",
                    "email": DEFAULT_ADMIN_EMAIL,
                    "password_hash": pw_hash,
                    "password_salt": pw_salt,
                    "role": "admin",
                },
            )
            self._write_sync("usuarios", user, DEFAULT_ADMIN_EMAIL)
            logger.info("Usuário admin padrão criado: %s", DEFAULT_ADMIN_EMAIL)

        if not self._read_sync("administradores"):
            admin = shape(
                "administradores",
                {
                    "nome": "Admin Master",
                    "email": DEFAULT_ADMIN_EMAIL,
                    "password_hash": pw_hash,
                    "password_salt": pw_salt,
                    "nivel": "super_admin",
                },
            )
            self._write_sync("administradores", admin, self.ids.next())
            logger.info("Super administrador padrão criado")

    # -----------------------
    # Operações síncronas (rodam em thread)
    # -----------------------
    def _remote_read(self, kind: str, key: Any = None):
        with self.SessionLocal() as db:
            if key is None:
                return crud.list_records(db, kind)
            return crud.get_record(db, kind, key)

    def _read_sync(self, kind: str, key: Any = None):
        if self.config.enabled and self.SessionLocal is not None:
            try:
                return self._remote_read(kind, key)
            except REMOTE_ERRORS as e:
                logger.warning("Falha ao ler %s do banco remoto, usando arquivo: %s", kind, e)

        if key is None:
            return self.files.read_all(kind)
        return self.files.read_one(kind, key)

    def _lookup_sync(self, kind: str, key: Any) -> Optional[Dict[str, Any]]:
        if self.config.enabled and self.SessionLocal is not None:
            try:
                found = self._remote_read(kind, key)
                if found is not None:
                    return found
            except REMOTE_ERRORS as e:
                logger.warning("Falha ao buscar %s no banco remoto: %s", kind, e)
        return self.files.read_one(kind, key)

    def _remote_save(self, kind: str, record: Dict[str, Any], key: Any) -> bool:
        try:
            with self.SessionLocal() as db:
                crud.upsert_record(db, kind, record, key)
            return True
        except REMOTE_ERRORS as e:
            logger.error("Erro ao salvar %s no banco remoto: %s", kind, e)
            return False

    def _remote_delete(self, kind: str, key: Any) -> bool:
        try:
            with self.SessionLocal() as db:
                crud.delete_record(db, kind, key)
            return True
        except REMOTE_ERRORS as e:
            logger.error("Erro ao remover %s do banco remoto: %s", kind, e)
            return False

    def _local_save(self, kind: str, record: Dict[str, Any], key: Any) -> bool:
        self.files.save(kind, record, key)
        return True

    def _local_delete(self, kind: str, key: Any) -> bool:
        self.files.delete(kind, key)
        return True

    def _write_sync(self, kind: str, record: Dict[str, Any], key: Any) -> None:
        self.files.save(kind, record, key)
        if self.config.enabled and self.SessionLocal is not None:
            self._remote_save(kind, record, key)

    # -----------------------
    # API assíncrona
    # -----------------------
    async def read(self, kind: str, key: Any = None):
        """Coleção (lista) quando key é None, senão o registro ou None."""
        return await asyncio.to_thread(self._read_sync, kind, key)

    async def lookup(self, kind: str, key: Any) -> Optional[Dict[str, Any]]:
        """Busca pela chave no remoto e, não achando, no arquivo."""
        return await asyncio.to_thread(self._lookup_sync, kind, key)

    def _spawn(self, func, *args) -> asyncio.Task:
        task = asyncio.create_task(asyncio.to_thread(func, *args))
        self._pending.add(task)
        task.add_done_callback(self._finished)
        return task

    def _finished(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Erro em escrita de backend: %s", task.exception())

    def _key_for(self, kind: str, record: Dict[str, Any], key: Any) -> Any:
        if key is not None:
            return key
        if kind == "usuarios":
            return record.get("email")
        if kind == "sessoes":
            return record.get("token")
        return self.ids.next()

    def _should_wait(self, wait: Optional[bool]) -> bool:
        return self.config.await_writes if wait is None else wait

    async def _finish(self, result: WriteResult, wait: Optional[bool]) -> WriteResult:
        if self._should_wait(wait):
            await result.wait()
            error = result.local_error()
            if error is not None:
                raise error
        return result

    async def write(
        self,
        kind: str,
        data: Dict[str, Any],
        key: Any = None,
        *,
        partial: Optional[bool] = None,
        wait: Optional[bool] = None,
    ) -> WriteResult:
        """Grava nos dois backends.

        Tipos numéricos inserem quando key é None e atualizam (parcialmente)
        quando key é informada. Usuários e sessões são sempre upsert pela
        chave natural; `partial=True` atualiza só os campos enviados.
        """
        if kind not in ENTITIES:
            raise ValueError(f"tipo desconhecido: {kind}")

        if partial is None:
            partial = key is not None and kind not in KEYED_TYPES
        record = shape(kind, data, partial=partial)
        key = self._key_for(kind, record, key)
        if key in (None, ""):
            raise ValueError(f"chave ausente para {kind}")

        local = self._spawn(self._local_save, kind, record, key)
        remote = None
        if self.config.enabled and self.SessionLocal is not None:
            remote = self._spawn(self._remote_save, kind, record, key)

        return await self._finish(WriteResult(key, local, remote, record), wait)

    async def delete(self, kind: str, key: Any, *, wait: Optional[bool] = None) -> WriteResult:
        local = self._spawn(self._local_delete, kind, key)
        remote = None
        if self.config.enabled and self.SessionLocal is not None:
            remote = self._spawn(self._remote_delete, kind, key)

        return await self._finish(WriteResult(key, local, remote), wait)

    async def drain(self) -> None:
        """Aguarda todas as escritas em andamento."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    # -----------------------
    # Logs de atividade (apenas arquivo)
    # -----------------------
    async def log_activity(self, kind: str, data: Dict[str, Any]) -> None:
        try:
            await asyncio.to_thread(self.files.append_log, kind, data)
        except StorageError as e:
            logger.warning("Não foi possível registrar log %s: %s", kind, e)

    async def read_logs(self) -> List[Dict[str, Any]]:
        return await asyncio.to_thread(self.files.read_logs)

    def dispose(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
            self.engine = None
