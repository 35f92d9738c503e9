import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from gymp2 import __version__, security
from gymp2.broadcaster import PUBLIC_CHANNEL, Broadcaster
from gymp2.config import LOG_LEVEL, StoreConfig
from gymp2.deps import get_store
from gymp2.routers import academias, administradores, auth, personais, proprietarios
from gymp2.schemas import HealthOut
from gymp2.store import DualBackendStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"
QUIET_PATHS = {"/health", "/favicon.ico"}


async def dashboard_stats(store: DualBackendStore):
    agora = security.now_millis()
    academias_ = await store.read("academias")
    personais_ = await store.read("personais")
    sessoes_ = await store.read("sessoes")
    return {
        "total_academias": len(academias_),
        "academias_ativas": sum(1 for a in academias_ if a.get("status") == "ativo"),
        "total_proprietarios": len(await store.read("proprietarios")),
        "total_personais": len(personais_),
        "personais_ativos": sum(1 for p in personais_ if p.get("status") == "ativo"),
        "personais_pendentes": sum(1 for p in personais_ if p.get("status") == "pendente"),
        "total_usuarios": len(await store.read("usuarios")),
        "sessoes_ativas": sum(1 for s in sessoes_ if not security.is_expired(s.get("criado_em"), agora)),
    }


def create_app(config: Optional[StoreConfig] = None) -> FastAPI:
    store = DualBackendStore(config or StoreConfig.from_env())
    broadcaster = Broadcaster()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.start()
        logger.info("Servidor iniciado | armazenamento: %s | dados em %s", store.config.describe(), store.config.data_dir)
        try:
            yield
        finally:
            await store.drain()
            store.dispose()

    app = FastAPI(title="gymp2", version=__version__, lifespan=lifespan)
    app.state.store = store
    app.state.broadcaster = broadcaster

    # -----------------------
    # Middleware / erros
    # -----------------------
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        if request.url.path not in QUIET_PATHS:
            logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": exc.detail, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": "Dados inválidos",
                "error": "Dados inválidos",
                "detalhes": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Erro não tratado em %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Erro interno no servidor", "error": "Erro interno no servidor"},
        )

    # -----------------------
    # Rotas
    # -----------------------
    app.include_router(auth.router)
    app.include_router(academias.router)
    app.include_router(proprietarios.router)
    app.include_router(personais.router)
    app.include_router(administradores.router)

    @app.get("/health", response_model=HealthOut)
    async def health(store: DualBackendStore = Depends(get_store)) -> HealthOut:
        return HealthOut(
            status="online",
            database=store.config.describe(),
            remote_enabled=store.config.enabled,
            timestamp=datetime.now(timezone.utc).isoformat(),
            version=__version__,
        )

    @app.get("/api/health")
    async def api_health(store: DualBackendStore = Depends(get_store)):
        return {
            "status": "online",
            "message": "API GYM P2 online",
            "database": store.config.describe(),
            "academias": len(await store.read("academias")),
            "proprietarios": len(await store.read("proprietarios")),
            "personais": len(await store.read("personais")),
            "usuarios": len(await store.read("usuarios")),
        }

    @app.get("/stats")
    async def stats(store: DualBackendStore = Depends(get_store)):
        today = datetime.now(timezone.utc).date().isoformat()
        logs = await store.read_logs()
        logins_hoje = sum(
            1 for log in logs if log.get("tipo") == "login_sucesso" and str(log.get("timestamp", "")).startswith(today)
        )
        data = await dashboard_stats(store)
        return {
            "sistema": "GYM P2",
            "total_usuarios": data["total_usuarios"],
            "sessoes_ativas": data["sessoes_ativas"],
            "logins_hoje": logins_hoje,
            "total_logs": len(logs),
            "academias": data["total_academias"],
            "proprietarios": data["total_proprietarios"],
            "personais": data["total_personais"],
            "personais_ativos": data["personais_ativos"],
            "personais_pendentes": data["personais_pendentes"],
        }

    @app.get("/status")
    async def status():
        return {
            "status": "online",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sistema": "GYM P2",
            "versao": __version__,
        }

    # -----------------------
    # WebSocket
    # -----------------------
    @app.websocket("/ws")
    async def realtime(websocket: WebSocket, canal: Optional[str] = None):
        await broadcaster.connect(websocket, public=canal == PUBLIC_CHANNEL)
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    message = json.loads(raw)
                except ValueError:
                    logger.warning("Mensagem WebSocket inválida: %r", raw)
                    continue
                acao = message.get("acao") if isinstance(message, dict) else None
                if acao == "subscribe-public":
                    broadcaster.subscribe_public(websocket)
                elif acao == "atualizar-dashboard":
                    await broadcaster.publish("dashboard-atualizado", await dashboard_stats(store))
                else:
                    logger.debug("Mensagem WebSocket ignorada: %r", message)
        except WebSocketDisconnect:
            logger.info("Cliente WebSocket desconectado")
        finally:
            broadcaster.disconnect(websocket)

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


app = create_app()
