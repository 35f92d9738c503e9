"""
Compatibilidade de leitura com os nomes antigos dos campos de senha.

Os registros acumularam três convenções para hash/salt de usuários
(`passwordhash`, `password_hash`, `passwordHash`) e os administradores usavam
`senha`/`salt`. Tudo que é gravado hoje usa apenas `password_hash` e
`password_salt`; este módulo só é usado na leitura.
"""
from typing import Any, Dict, Optional, Tuple

CANONICAL_HASH = "password_hash"
CANONICAL_SALT = "password_salt"

# ordem de prioridade ao procurar credenciais
CREDENTIAL_CONVENTIONS = (
    ("passwordhash", "passwordsalt"),
    ("password_hash", "password_salt"),
    ("passwordHash", "passwordSalt"),
    ("senha", "salt"),
)

_LEGACY_FIELDS = {name for pair in CREDENTIAL_CONVENTIONS for name in pair} - {
    CANONICAL_HASH,
    CANONICAL_SALT,
}


def extract_credentials(record: Optional[Dict[str, Any]]) -> Optional[Tuple[str, str]]:
    if not record:
        return None
    for hash_field, salt_field in CREDENTIAL_CONVENTIONS:
        if record.get(hash_field) and record.get(salt_field):
            return record[hash_field], record[salt_field]
    return None


def normalize_credentials(record: Dict[str, Any]) -> Dict[str, Any]:
    """Devolve uma cópia do registro apenas com os campos canônicos."""
    if not any(name in record for name in _LEGACY_FIELDS):
        return record

    found = extract_credentials(record)
    clean = {k: v for k, v in record.items() if k not in _LEGACY_FIELDS}
    if found:
        clean[CANONICAL_HASH], clean[CANONICAL_SALT] = found
    return clean


def strip_credentials(record: Dict[str, Any]) -> Dict[str, Any]:
    hidden = _LEGACY_FIELDS | {CANONICAL_HASH, CANONICAL_SALT}
    return {k: v for k, v in record.items() if k not in hidden}
