import asyncio
import time

import pytest
from sqlalchemy.exc import SQLAlchemyError

from conftest import make_config
from gymp2 import crud
from gymp2.config import StoreConfig
from gymp2.file_store import StorageError
from gymp2.security import verify_password
from gymp2.store import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD, DualBackendStore, IdGenerator


@pytest.fixture
def started(tmp_path):
    store = DualBackendStore(make_config(tmp_path, await_writes=False))
    store.start()
    yield store
    store.dispose()


def test_id_generator_is_monotonic():
    ids = IdGenerator()
    values = [ids.next() for _ in range(50)]
    assert values == sorted(values)
    assert len(set(values)) == 50


def test_start_seeds_default_admin(started):
    user = started.files.read_one("usuarios", DEFAULT_ADMIN_EMAIL)
    assert user["role"] == "admin"
    assert verify_password(DEFAULT_ADMIN_PASSWORD, user["password_hash"], user["password_salt"])

    admins = asyncio.run(started.read("administradores"))
    assert [a["nivel"] for a in admins] == ["super_admin"]
    assert admins[0]["email"] == DEFAULT_ADMIN_EMAIL


def test_start_without_remote_credentials_uses_files(tmp_path):
    store = DualBackendStore(StoreConfig(data_dir=tmp_path, remote_url="sqlite:///x.db"))
    store.start()
    assert not store.config.enabled
    assert store.config.describe() == "arquivos"
    assert store.engine is None


def test_unreachable_remote_disables_it(tmp_path):
    config = StoreConfig(
        data_dir=tmp_path / "data",
        remote_url=f"sqlite:///{tmp_path / 'nao' / 'existe' / 'remote.db'}",
        remote_key="chave",
    )
    store = DualBackendStore(config)
    store.start()
    assert not config.enabled

    async def scenario():
        result = await store.write("academias", {"nome": "Fit", "endereco": "Rua 1", "tipo": "yoga"}, wait=True)
        assert result.outcome() == {"local": True, "remote": None}
        return await store.read("academias")

    assert [a["nome"] for a in asyncio.run(scenario())] == ["Fit"]


def test_remote_zero_rows_is_trusted(started):
    # registro que só existe no arquivo
    started.files.save("academias", {"nome": "Só no arquivo", "status": "ativo"}, 1)

    assert asyncio.run(started.read("academias")) == []
    assert asyncio.run(started.read("academias", 1)) is None
    # lookup (usado no login/cadastro) continua procurando no arquivo
    assert asyncio.run(started.lookup("academias", 1))["nome"] == "Só no arquivo"


def test_remote_failure_falls_back_to_file(started, monkeypatch):
    started.files.save("academias", {"nome": "Backup", "status": "ativo"}, 7)

    def broken(kind, key=None):
        raise SQLAlchemyError("conexão perdida")

    monkeypatch.setattr(started, "_remote_read", broken)
    assert [a["nome"] for a in asyncio.run(started.read("academias"))] == ["Backup"]


def test_write_returns_before_backends_finish(started):
    async def scenario():
        result = await started.write("proprietarios", {"nome": "Carlos"})
        pending = result.outcome()
        await result.wait()
        return result, pending

    result, pending = asyncio.run(scenario())
    assert pending == {"local": None, "remote": None}
    assert result.outcome() == {"local": True, "remote": True}

    with started.SessionLocal() as db:
        assert crud.get_record(db, "proprietarios", result.key)["nome"] == "Carlos"
    assert started.files.read_one("proprietarios", result.key)["nome"] == "Carlos"


def test_remote_write_failure_keeps_local_copy(started, monkeypatch):
    def broken(db, kind, record, key):
        raise SQLAlchemyError("timeout")

    monkeypatch.setattr(crud, "upsert_record", broken)

    async def scenario():
        return await started.write("personais", {"nome": "Ana"}, wait=True)

    result = asyncio.run(scenario())
    assert result.outcome() == {"local": True, "remote": False}
    assert started.files.read_one("personais", result.key)["nome"] == "Ana"


def test_durable_write_surfaces_file_errors(started, monkeypatch):
    def broken(kind, record, key):
        raise StorageError("disco cheio")

    monkeypatch.setattr(started.files, "save", broken)

    async def scenario():
        await started.write("academias", {"nome": "X"}, wait=True)

    with pytest.raises(StorageError):
        asyncio.run(scenario())


def test_partial_update_only_touches_given_fields(started):
    async def scenario():
        created = await started.write("academias", {"nome": "Fit", "tipo": "yoga", "endereco": "Rua 1"}, wait=True)
        await started.write("academias", {"status": "inativo"}, created.key, wait=True)
        return await started.read("academias", created.key)

    academia = asyncio.run(scenario())
    assert academia["nome"] == "Fit"
    assert academia["tipo"] == "yoga"
    assert academia["status"] == "inativo"
    assert academia["data_atualizacao"]


def test_concurrent_personal_status_writes_last_completed_wins(started, monkeypatch):
    started.files.save("personais", {"nome": "Ana", "status": "pendente"}, 5)
    original = started.files.save

    def slow_save(kind, record, key):
        if record.get("status") == "ativo":
            time.sleep(0.3)
        return original(kind, record, key)

    monkeypatch.setattr(started.files, "save", slow_save)

    async def scenario():
        first = await started.write("personais", {"status": "ativo"}, 5)
        second = await started.write("personais", {"status": "inativo"}, 5)
        await second.wait()
        assert started.files.read_one("personais", 5)["status"] == "inativo"
        await first.wait()

    asyncio.run(scenario())
    assert started.files.read_one("personais", 5)["status"] == "ativo"
    assert started.files.read_one("personais", 5)["nome"] == "Ana"


def test_drain_waits_for_pending_writes(started):
    async def scenario():
        for i in range(3):
            await started.write("proprietarios", {"nome": f"P{i}"})
        await started.drain()

    asyncio.run(scenario())
    assert len(started.files.read_all("proprietarios")) == 3


def test_activity_log_is_file_only(started):
    asyncio.run(started.log_activity("login_sucesso", {"email": "a@b.c"}))
    logs = asyncio.run(started.read_logs())
    assert logs[-1]["tipo"] == "login_sucesso"
    assert logs[-1]["ip"] == "localhost"
