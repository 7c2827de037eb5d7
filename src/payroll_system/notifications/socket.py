from __future__ import annotations

import logging
from typing import Iterable

from flask import Flask, request
from flask_socketio import SocketIO, emit

logger = logging.getLogger(__name__)


def create_socketio(app: Flask, *, cors_origins: Iterable[str] = ()) -> SocketIO:
    """Attach the notification channel at /socket.io/.

    Clients only use it to check connectivity: connects and disconnects are
    logged and `message` events are echoed back.
    """
    origins = list(cors_origins) or "*"
    socketio = SocketIO(app, cors_allowed_origins=origins, path="socket.io")

    @socketio.on("connect")
    def on_connect():
        logger.info("Socket connected: %s", request.sid)

    @socketio.on("message")
    def on_message(data):
        logger.debug("Socket %s sent: %s", request.sid, data)
        emit("message", f"Server received: {data}")

    @socketio.on("disconnect")
    def on_disconnect(*_):
        logger.info("Socket disconnected: %s", request.sid)

    return socketio
