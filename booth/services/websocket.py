import asyncio
import json
import logging
from typing import List

from fastapi import WebSocket

from booth.models.session import SessionSnapshot

logger = logging.getLogger(__name__)


class WebSocketManager:
    def __init__(self):
        self.active_connections: List[WebSocket] = []
        self._pending: set = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.active_connections.append(websocket)

    def disconnect(self, websocket: WebSocket):
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

    async def broadcast(self, message: dict):
        text = json.dumps(message)
        for connection in list(self.active_connections):
            try:
                await connection.send_text(text)
            except Exception as e:
                logger.info("Dropping websocket client: %s", e)
                self.disconnect(connection)

    def publish_state(self, snapshot: SessionSnapshot):
        """Session listener: push the new state to every client."""
        if not self.active_connections:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return
        message = {"type": "state", "session": snapshot.model_dump(mode="json")}
        task = loop.create_task(self.broadcast(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
