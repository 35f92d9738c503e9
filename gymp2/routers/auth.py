"""
Router de autenticação: cadastro, login, verificação de sessão e logout.
"""
import logging
import re

from fastapi import APIRouter, Depends, HTTPException, Request

from gymp2.deps import client_ip, get_store
from gymp2.legacy import extract_credentials
from gymp2.schemas import LoginIn, SignupIn, TokenIn
from gymp2.security import hash_password, verify_password
from gymp2.sessions import InvalidSession, close_session, open_session, public_user, resolve_session
from gymp2.shaping import utc_now_iso
from gymp2.store import DualBackendStore

logger = logging.getLogger(__name__)

router = APIRouter()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD = 6


@router.post("/cadastro")
async def signup(payload: SignupIn, request: Request, store: DualBackendStore = Depends(get_store)):
    """Cria a conta de um usuário comum."""
    if not payload.name or not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Todos os campos são obrigatórios")
    if len(payload.password) < MIN_PASSWORD:
        raise HTTPException(status_code=400, detail="Senha deve ter no mínimo 6 caracteres")
    if not EMAIL_RE.match(payload.email):
        raise HTTPException(status_code=400, detail="Email inválido")

    # procura nos dois backends
    if await store.lookup("usuarios", payload.email):
        await store.log_activity(
            "cadastro_falha", {"email": payload.email, "motivo": "email_existente", "ip": client_ip(request)}
        )
        raise HTTPException(status_code=400, detail="Email já cadastrado")

    pw_hash, pw_salt = hash_password(payload.password)
    user = {
        "name": payload.name,
        "email": payload.email,
        "password_hash": pw_hash,
        "password_salt": pw_salt,
        "role": "user",
    }
    await store.write("usuarios", user, payload.email)
    await store.log_activity("cadastro_sucesso", {"email": payload.email, "name": payload.name})
    logger.info("Novo usuário cadastrado: %s", payload.email)

    return {"success": True, "message": "Conta criada com sucesso!", "user": public_user(user)}


@router.post("/login")
async def login(payload: LoginIn, request: Request, store: DualBackendStore = Depends(get_store)):
    """Processa login."""
    if not payload.email or not payload.password:
        raise HTTPException(status_code=400, detail="Email e senha são obrigatórios")

    ip = client_ip(request)
    user = await store.lookup("usuarios", payload.email)
    if not user:
        await store.log_activity("login_falha", {"email": payload.email, "motivo": "email_nao_encontrado", "ip": ip})
        raise HTTPException(status_code=401, detail="Email não encontrado")

    credentials = extract_credentials(user)
    if credentials is None:
        raise HTTPException(status_code=401, detail="Credenciais inválidas")

    if not verify_password(payload.password, *credentials):
        await store.log_activity("login_falha", {"email": payload.email, "motivo": "senha_incorreta", "ip": ip})
        raise HTTPException(status_code=401, detail="Senha incorreta")

    # último login: não segura a resposta
    await store.write("usuarios", {"ultimo_login": utc_now_iso()}, payload.email, partial=True, wait=False)
    token = await open_session(store, payload.email, ip)
    await store.log_activity("login_sucesso", {"email": payload.email, "name": user.get("name"), "ip": ip})
    logger.info("Login bem-sucedido: %s", payload.email)

    return {
        "success": True,
        "message": "Login realizado com sucesso!",
        "token": token,
        "user": public_user(user),
        "redirect": "index.html",
    }


@router.post("/verificar-sessao")
async def check_session(payload: TokenIn, store: DualBackendStore = Depends(get_store)):
    if not payload.token:
        raise HTTPException(status_code=400, detail="Token não fornecido")
    try:
        user = await resolve_session(store, payload.token)
    except InvalidSession as e:
        raise HTTPException(status_code=401, detail="Sessão inválida ou expirada") from e
    return {"success": True, "user": user}


@router.post("/logout")
async def logout(payload: TokenIn, store: DualBackendStore = Depends(get_store)):
    """Realiza logout."""
    if not payload.token:
        raise HTTPException(status_code=400, detail="Token não fornecido")

    session = await close_session(store, payload.token)
    if session:
        await store.log_activity("logout", {"email": session.get("email")})
    return {"success": True, "message": "Logout realizado com sucesso"}
