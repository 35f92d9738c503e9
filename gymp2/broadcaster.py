# gymp2/broadcaster.py
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)

PUBLIC_CHANNEL = "publico"
ADMIN_CHANNEL = "admin"


class Broadcaster:
    """Fan-out de eventos para os WebSockets conectados.

    Todo cliente recebe os eventos do painel (canal admin); quem assinou o
    canal público recebe também os eventos públicos. Entrega no máximo uma
    vez: sem confirmação e sem replay para quem conectar depois.
    """

    def __init__(self):
        self._clients: Set[WebSocket] = set()
        self._public: Set[WebSocket] = set()

    @property
    def total(self) -> int:
        return len(self._clients)

    async def connect(self, websocket: WebSocket, public: bool = False) -> None:
        await websocket.accept()
        self._clients.add(websocket)
        if public:
            self._public.add(websocket)
        logger.info("Cliente WebSocket conectado (total=%s, publico=%s)", self.total, public)

    def subscribe_public(self, websocket: WebSocket) -> None:
        if websocket in self._clients:
            self._public.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self._clients.discard(websocket)
        self._public.discard(websocket)

    @staticmethod
    def _envelope(event: str, data: Any, channel: str) -> Dict[str, Any]:
        return {
            "evento": event,
            "canal": channel,
            "dados": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def _send(self, targets, message: Dict[str, Any]) -> int:
        targets = list(targets)
        results = await asyncio.gather(
            *(ws.send_json(message) for ws in targets),
            return_exceptions=True,
        )
        delivered = 0
        for ws, result in zip(targets, results):
            if isinstance(result, Exception):
                logger.warning("Falha ao enviar %s, removendo cliente: %r", message["evento"], result)
                self.disconnect(ws)
            else:
                delivered += 1
        return delivered

    async def publish(self, event: str, data: Any) -> int:
        return await self._send(self._clients, self._envelope(event, data, ADMIN_CHANNEL))

    async def publish_public(self, event: str, data: Any) -> int:
        return await self._send(self._public, self._envelope(event, data, PUBLIC_CHANNEL))
