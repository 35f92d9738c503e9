import pytest
from fastapi.testclient import TestClient

from gymp2.config import StoreConfig
from gymp2.main import create_app
from gymp2.store import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD


def make_config(tmp_path, *, remote=True, await_writes=True):
    # "banco remoto" de teste: SQLite em arquivo, pelo mesmo caminho do SQLAlchemy
    return StoreConfig(
        data_dir=tmp_path / "data",
        remote_url=f"sqlite:///{tmp_path / 'remote.db'}" if remote else None,
        remote_key="chave-de-teste" if remote else None,
        await_writes=await_writes,
    )


@pytest.fixture
def config(tmp_path):
    return make_config(tmp_path)


@pytest.fixture
def app(config):
    return create_app(config)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def store(app, client):
    return app.state.store


@pytest.fixture
def admin_token(client):
    r = client.post("/login", json={"email": DEFAULT_ADMIN_EMAIL, "password": DEFAULT_ADMIN_PASSWORD})
    assert r.status_code == 200
    return r.json()["token"]


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}
