from gymp2 import security
from gymp2.store import DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_PASSWORD


def signup(client, email="ana@gymp2.com", password="segredo1", name="Ana"):
    return client.post("/cadastro", json={"name": name, "email": email, "password": password})


def login(client, email="ana@gymp2.com", password="segredo1"):
    return client.post("/login", json={"email": email, "password": password})


def test_signup_and_login(client):
    r = signup(client)
    assert r.status_code == 200
    assert r.json()["user"] == {"name": "Ana", "email": "ana@gymp2.com", "role": "user"}

    r = login(client)
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert len(body["token"]) == 64
    assert body["user"]["email"] == "ana@gymp2.com"
    assert body["redirect"] == "index.html"


def test_signup_validation(client):
    assert signup(client, name="").status_code == 400
    r = signup(client, password="123")
    assert r.status_code == 400
    assert r.json()["message"] == "Senha deve ter no mínimo 6 caracteres"
    assert signup(client, email="sem-arroba").json()["message"] == "Email inválido"


def test_signup_rejects_duplicate_email(client):
    assert signup(client).status_code == 200
    r = signup(client, name="Outra Ana")
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Email já cadastrado", "error": "Email já cadastrado"}


def test_signup_rejects_email_present_only_in_file(client, store):
    store.files.save("usuarios", {"name": "Antigo", "password_hash": "h", "password_salt": "s"}, "antigo@x.com")
    assert signup(client, email="antigo@x.com").status_code == 400


def test_login_failures(client):
    signup(client)
    assert client.post("/login", json={"email": "ana@gymp2.com"}).status_code == 400

    r = login(client, email="ninguem@x.com")
    assert r.status_code == 401
    assert r.json()["message"] == "Email não encontrado"

    r = login(client, password="errada1")
    assert r.status_code == 401
    assert r.json()["message"] == "Senha incorreta"


def test_login_with_legacy_credentials(client, store):
    pw_hash, salt = security.hash_password("antiga123")
    store.files.save("usuarios", {"name": "Legado", "passwordHash": pw_hash, "passwordSalt": salt}, "legado@x.com")

    r = login(client, email="legado@x.com", password="antiga123")
    assert r.status_code == 200
    assert r.json()["user"]["name"] == "Legado"


def test_login_without_any_credentials(client, store):
    store.files.save("usuarios", {"name": "Sem senha"}, "vazio@x.com")
    r = login(client, email="vazio@x.com", password="qualquer1")
    assert r.status_code == 401
    assert r.json()["message"] == "Credenciais inválidas"


def test_default_admin_can_login(client):
    r = login(client, email=DEFAULT_ADMIN_EMAIL, password=DEFAULT_ADMIN_PASSWORD)
    assert r.status_code == 200
    assert r.json()["user"]["role"] == "admin"


def test_session_check_and_logout(client):
    signup(client)
    token = login(client).json()["token"]

    r = client.post("/verificar-sessao", json={"token": token})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "ana@gymp2.com"

    assert client.post("/logout", json={"token": token}).status_code == 200
    assert client.post("/verificar-sessao", json={"token": token}).status_code == 401


def test_session_check_requires_token(client):
    assert client.post("/verificar-sessao", json={}).status_code == 400
    assert client.post("/logout", json={}).status_code == 400
    assert client.post("/verificar-sessao", json={"token": "nao-existe"}).status_code == 401


def test_expired_session_is_removed_on_read(client, store, monkeypatch):
    signup(client)
    token = login(client).json()["token"]
    issued = store.files.read_one("sessoes", token)["criado_em"]

    monkeypatch.setattr(security, "now_millis", lambda: issued + security.SESSION_MAX_AGE_MS + 1)
    r = client.post("/verificar-sessao", json={"token": token})
    assert r.status_code == 401
    assert store.files.read_one("sessoes", token) is None


def test_session_still_valid_just_before_expiry(client, store, monkeypatch):
    signup(client)
    token = login(client).json()["token"]
    issued = store.files.read_one("sessoes", token)["criado_em"]

    monkeypatch.setattr(security, "now_millis", lambda: issued + security.SESSION_MAX_AGE_MS)
    assert client.post("/verificar-sessao", json={"token": token}).status_code == 200


def test_activity_is_logged(client, store):
    signup(client)
    login(client)
    login(client, password="errada1")
    tipos = [log["tipo"] for log in store.files.read_logs()]
    assert tipos == ["cadastro_sucesso", "login_sucesso", "login_falha"]

    stats = client.get("/stats").json()
    assert stats["logins_hoje"] == 1
    assert stats["total_logs"] == 3
