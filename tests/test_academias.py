from gymp2.routers.academias import DEFAULT_IMAGES


def create_gym(client, **extra):
    payload = {"nome": "Fit Center", "endereco": "Rua 1, 100", "tipo": "musculacao"}
    payload.update(extra)
    r = client.post("/api/academias", json=payload)
    assert r.status_code == 201, r.text
    return r.json()


def test_create_requires_fields(client):
    r = client.post("/api/academias", json={"nome": "Sem endereço"})
    assert r.status_code == 400
    assert r.json()["message"] == "Dados inválidos"


def test_create_and_get(client):
    owner = client.post("/api/proprietarios", json={"nome": "Carlos"}).json()
    gym = create_gym(client, proprietario_id=owner["id"], preco=89.9)

    assert isinstance(gym["id"], int)
    assert gym["status"] == "ativo"
    assert gym["facilidades"] == []
    assert gym["criado_em"]

    r = client.get(f"/api/academias/{gym['id']}")
    assert r.status_code == 200
    assert r.json()["proprietario_nome"] == "Carlos"
    assert r.json()["preco"] == 89.9


def test_list_joins_owner_name_with_fallback(client):
    create_gym(client, nome="Sem Dono")
    gyms = client.get("/api/academias").json()
    assert gyms[0]["proprietario_nome"] == "Não informado"


def test_get_missing_returns_404(client):
    r = client.get("/api/academias/123")
    assert r.status_code == 404
    assert r.json()["message"] == "Academia não encontrada"


def test_update_and_delete(client):
    gym = create_gym(client)

    r = client.put(f"/api/academias/{gym['id']}", json={"preco": 120, "cidade": "Teresina"})
    assert r.status_code == 200
    assert r.json()["nome"] == "Fit Center"
    assert r.json()["cidade"] == "Teresina"
    assert client.get(f"/api/academias/{gym['id']}").json()["preco"] == 120

    assert client.put("/api/academias/1", json={"preco": 1}).status_code == 404

    assert client.delete(f"/api/academias/{gym['id']}").status_code == 200
    assert client.delete(f"/api/academias/{gym['id']}").status_code == 404
    assert client.get("/api/academias").json() == []


def test_status_patch_is_restricted(client):
    gym = create_gym(client)
    url = f"/api/academias/{gym['id']}/status"

    assert client.patch(url, json={"status": "fechada"}).status_code == 400
    assert client.patch(url, json={}).status_code == 400
    assert client.patch("/api/academias/1/status", json={"status": "ativo"}).status_code == 404

    r = client.patch(url, json={"status": "pendente"})
    assert r.json() == {"success": True, "message": "Status atualizado", "id": gym["id"], "status": "pendente"}
    assert client.get(f"/api/academias/{gym['id']}").json()["status"] == "pendente"


def test_stats(client):
    create_gym(client, nome="A")
    create_gym(client, nome="B", status="inativo")
    create_gym(client, nome="C", status="pendente")
    assert client.get("/api/academias/stats").json() == {"ativas": 1, "inativas": 1, "pendentes": 1, "total": 3}


def test_public_listing_only_active_sorted(client):
    create_gym(client, nome="Zeta Gym", tipo="crossfit")
    create_gym(client, nome="Alpha Gym", tipo="yoga", preco=60)
    create_gym(client, nome="Beta Gym", status="inativo")

    body = client.get("/api/academias-publicas").json()
    assert body["success"] is True
    assert body["total"] == 2
    nomes = [a["nome"] for a in body["academias"]]
    assert nomes == ["Alpha Gym", "Zeta Gym"]

    alpha = body["academias"][0]
    assert alpha["preco"] == "60.00"
    assert alpha["abertura"] == "06:00"
    assert alpha["foto"] == DEFAULT_IMAGES["yoga"]


def test_public_detail_hides_inactive(client):
    ativa = create_gym(client)
    inativa = create_gym(client, nome="Fechada", status="inativo")

    r = client.get(f"/api/academia-publica/{ativa['id']}")
    assert r.status_code == 200
    assert r.json()["academia"]["nome"] == "Fit Center"

    assert client.get(f"/api/academia-publica/{inativa['id']}").status_code == 404
    assert client.get("/api/academia-publica/999").status_code == 404


def test_proprietarios_crud(client):
    assert client.post("/api/proprietarios", json={"email": "x@y.z"}).status_code == 400

    owner = client.post("/api/proprietarios", json={"nome": "Marina", "cidade": "Teresina"}).json()
    assert owner["status"] == "ativo"

    r = client.put(f"/api/proprietarios/{owner['id']}", json={"telefone": "(86) 9999-0000"})
    assert r.json()["telefone"] == "(86) 9999-0000"
    assert r.json()["nome"] == "Marina"

    assert [p["nome"] for p in client.get("/api/proprietarios").json()] == ["Marina"]
    assert client.delete(f"/api/proprietarios/{owner['id']}").status_code == 200
    assert client.get(f"/api/proprietarios/{owner['id']}").status_code == 404
    assert client.delete(f"/api/proprietarios/{owner['id']}").status_code == 404


def test_update_rejects_null_on_required_fields(client, store):
    gym = create_gym(client, status="ativo")
    url = f"/api/academias/{gym['id']}"

    for body in ({"nome": None}, {"status": None}, {"endereco": None, "tipo": None}):
        r = client.put(url, json=body)
        assert r.status_code == 400, body
        assert r.json()["message"] == "Dados inválidos"

    # campos opcionais ainda podem ser limpos
    assert client.put(url, json={"telefone": None}).status_code == 200

    local = store.files.read_one("academias", gym["id"])
    remote = client.get(url).json()
    assert (local["nome"], local["status"]) == ("Fit Center", "ativo")
    assert (remote["nome"], remote["status"]) == ("Fit Center", "ativo")


def test_proprietario_update_rejects_null_name(client, store):
    owner = client.post("/api/proprietarios", json={"nome": "Marina"}).json()
    url = f"/api/proprietarios/{owner['id']}"

    assert client.put(url, json={"nome": None}).status_code == 400
    assert client.put(url, json={"status": None}).status_code == 400

    assert store.files.read_one("proprietarios", owner["id"])["nome"] == "Marina"
    assert client.get(url).json()["status"] == "ativo"
