from gymp2.store import DEFAULT_ADMIN_EMAIL


def new_admin(client, headers=None, **extra):
    payload = {"nome": "Beatriz", "email": "bia@gymp2.com", "senha": "segredo1", "nivel": "admin"}
    payload.update(extra)
    r = client.post("/api/administradores", json=payload, headers=headers or {})
    assert r.status_code == 201, r.text
    return r.json()


def super_admin(client):
    return next(a for a in client.get("/api/administradores").json() if a["nivel"] == "super_admin")


def admin_ids(client):
    return sorted(a["id"] for a in client.get("/api/administradores").json())


def test_credentials_never_returned(client):
    created = new_admin(client)
    assert "password_hash" not in created
    assert "senha" not in created

    for admin in client.get("/api/administradores").json():
        assert "password_hash" not in admin
        assert "password_salt" not in admin

    detail = client.get(f"/api/administradores/{created['id']}").json()
    assert detail["email"] == "bia@gymp2.com"
    assert "password_salt" not in detail
    assert client.get("/api/administradores/1").status_code == 404


def test_create_validation(client):
    assert client.post("/api/administradores", json={"nome": "X", "email": "x@y.z", "senha": "123456"}).status_code == 400
    r = client.post(
        "/api/administradores", json={"nome": "X", "email": "x@y.z", "senha": "123", "nivel": "admin"}
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Senha deve ter no mínimo 6 caracteres"
    assert client.post(
        "/api/administradores", json={"nome": "X", "email": "x@y.z", "senha": "123456", "nivel": "dono"}
    ).status_code == 400

    new_admin(client)
    r = client.post(
        "/api/administradores", json={"nome": "Y", "email": "bia@gymp2.com", "senha": "123456", "nivel": "admin"}
    )
    assert r.status_code == 400


def test_created_by_requester(client, admin_headers):
    created = new_admin(client, headers=admin_headers)
    assert created["criado_por"] == DEFAULT_ADMIN_EMAIL
    assert new_admin(client, email="outro@gymp2.com")["criado_por"] == "sistema"


def test_update_admin(client):
    created = new_admin(client)
    r = client.put(f"/api/administradores/{created['id']}", json={"telefone": "(86) 1234-5678", "senha": "novasenha"})
    assert r.status_code == 200
    assert r.json()["telefone"] == "(86) 1234-5678"
    assert r.json()["nome"] == "Beatriz"
    assert "password_hash" not in r.json()

    assert client.put("/api/administradores/1", json={"nome": "X"}).status_code == 404
    r = client.put(f"/api/administradores/{created['id']}", json={"senha": "123"})
    assert r.status_code == 400


def test_update_rejects_email_in_use(client):
    created = new_admin(client)
    r = client.put(f"/api/administradores/{created['id']}", json={"email": DEFAULT_ADMIN_EMAIL})
    assert r.status_code == 400


def test_only_super_admin_edits_super_admin(client, admin_headers):
    target = super_admin(client)
    url = f"/api/administradores/{target['id']}"

    assert client.put(url, json={"nome": "Outro"}).status_code == 403
    r = client.put(url, json={"nome": "Chefe"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["nome"] == "Chefe"


def test_cannot_demote_or_deactivate_last_super_admin(client, admin_headers):
    target = super_admin(client)
    url = f"/api/administradores/{target['id']}"

    assert client.put(url, json={"status": "inativo"}, headers=admin_headers).status_code == 403
    assert client.put(url, json={"nivel": "admin"}, headers=admin_headers).status_code == 403
    assert super_admin(client)["status"] == "ativo"


def test_delete_super_admin_is_forbidden(client, admin_headers):
    new_admin(client)
    before = admin_ids(client)
    target = super_admin(client)

    r = client.delete(f"/api/administradores/{target['id']}", headers=admin_headers)
    assert r.status_code == 403
    assert r.json()["message"] == "Não é possível excluir um Super Administrador"
    assert admin_ids(client) == before


def test_delete_own_record_is_forbidden(client):
    created = new_admin(client, email="eu@gymp2.com")
    client.post("/cadastro", json={"name": "Eu", "email": "eu@gymp2.com", "password": "segredo1"})
    token = client.post("/login", json={"email": "eu@gymp2.com", "password": "segredo1"}).json()["token"]
    before = admin_ids(client)

    r = client.delete(f"/api/administradores/{created['id']}", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 403
    assert admin_ids(client) == before


def test_delete_last_active_admin_is_forbidden(client, admin_headers):
    only = new_admin(client)
    target = super_admin(client)
    # super admin inativo deixa "only" como único ativo
    assert client.put(
        f"/api/administradores/{target['id']}", json={"status": "inativo"}, headers=admin_headers
    ).status_code == 200
    before = admin_ids(client)

    r = client.delete(f"/api/administradores/{only['id']}")
    assert r.status_code == 403
    assert r.json()["message"] == "Não é possível excluir o último administrador ativo"
    assert admin_ids(client) == before


def test_delete_admin(client):
    created = new_admin(client)
    r = client.delete(f"/api/administradores/{created['id']}")
    assert r.status_code == 200
    assert r.json()["admin"]["email"] == "bia@gymp2.com"
    assert client.delete(f"/api/administradores/{created['id']}").status_code == 404
