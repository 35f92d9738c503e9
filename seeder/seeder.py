# seeder/seeder.py
import os
import time

import requests

API_URL = os.getenv("GYMP2_API_URL", "http://localhost:3000")


def wait_for_service(url: str, timeout: int = 60):
    print(f"[seeder] Aguardando API em {url} ...")
    start = time.time()
    while True:
        try:
            r = requests.get(url, timeout=3)
            if r.status_code < 500:
                print("[seeder] API está pronta!")
                return
        except requests.RequestException:
            pass

        if time.time() - start > timeout:
            raise TimeoutError(f"API não respondeu em {timeout} segundos")
        time.sleep(3)


def list_existing(resource: str):
    r = requests.get(f"{API_URL}/api/{resource}", timeout=10)
    r.raise_for_status()
    return r.json()


def create_many(resource: str, payloads, key: str = "nome"):
    """Cria os registros que ainda não existem (comparando pelo campo `key`)."""
    existing = {item.get(key): item for item in list_existing(resource)}

    created = []
    for p in payloads:
        if p[key] in existing:
            print(f"[seeder] {resource}: já existe, reutilizando:", p[key])
            created.append(existing[p[key]])
            continue

        r = requests.post(f"{API_URL}/api/{resource}", json=p, timeout=10)
        if r.status_code >= 400:
            print(f"[seeder] Erro ao criar {resource}", p[key], "status:", r.status_code, r.text)
            r.raise_for_status()

        item = r.json()
        print(f"[seeder] {resource}: criado", item["nome"], f"(id={item['id']})")
        created.append(item)

    return created


def create_proprietarios():
    print("[seeder] Criando proprietários ...")
    return create_many(
        "proprietarios",
        [
            {"nome": "Carlos Andrade", "email": "carlos@gymp2.com", "telefone": "(86) 99999-0001", "cidade": "Teresina", "estado": "PI"},
            {"nome": "Marina Lopes", "email": "marina@gymp2.com", "telefone": "(86) 99999-0002", "cidade": "Teresina", "estado": "PI"},
        ],
    )


def create_academias(proprietarios):
    print("[seeder] Criando academias ...")
    if len(proprietarios) < 2:
        print("[seeder] Proprietários insuficientes para criar academias.")
        return []

    return create_many(
        "academias",
        [
            {
                "nome": "Academia Força Total",
                "endereco": "Av. Frei Serafim, 1200",
                "tipo": "musculacao",
                "preco": 89.9,
                "cidade": "Teresina",
                "estado": "PI",
                "facilidades": ["Estacionamento", "Vestiário"],
                "status": "ativo",
                "proprietario_id": proprietarios[0]["id"],
            },
            {
                "nome": "Studio Equilíbrio",
                "endereco": "Rua Areolino de Abreu, 450",
                "tipo": "pilates",
                "preco": 150.0,
                "cidade": "Teresina",
                "estado": "PI",
                "status": "pendente",
                "proprietario_id": proprietarios[1]["id"],
            },
        ],
    )


def create_personais(academias):
    print("[seeder] Criando personais ...")
    academia_id = academias[0]["id"] if academias else None
    return create_many(
        "personais",
        [
            {
                "nome": "João Ribeiro",
                "email": "joao@gymp2.com",
                "telefone": "(86) 98888-0001",
                "cidade": "Teresina",
                "bairros": ["Centro", "Jóquei"],
                "especialidade": "Hipertrofia",
                "anos_experiencia": 5,
                "academia_id": academia_id,
                "status": "ativo",
            },
            {
                "nome": "Ana Sousa",
                "email": "ana@gymp2.com",
                "telefone": "(86) 98888-0002",
                "cidade": "Teresina",
                "bairros": ["Fátima"],
                "especialidade": "Funcional",
                "anos_experiencia": 2,
            },
        ],
    )


def main():
    # 1) Espera a API subir
    wait_for_service(f"{API_URL}/health")

    # 2) Cria proprietários, academias e personais (idempotente)
    proprietarios = create_proprietarios()
    academias = create_academias(proprietarios)
    personais = create_personais(academias)

    print("\n[seeder] Resumo:")
    print("Proprietários:", len(proprietarios))
    print("Academias:", len(academias))
    print("Personais:", len(personais))

    # 3) Confere o que ficou visível na página pública
    r = requests.get(f"{API_URL}/api/academias-publicas", timeout=10)
    if r.status_code == 200:
        print("[seeder] Academias públicas:", [a["nome"] for a in r.json()["academias"]])
    else:
        print("[seeder] Erro ao buscar academias públicas, status:", r.status_code, r.text)

    print("\n[seeder] Seed finalizado com sucesso.")


if __name__ == "__main__":
    main()
