from __future__ import annotations

import logging
from typing import Callable, Protocol

from flask_socketio import SocketIO

from .models import TimerHandle


log = logging.getLogger(__name__)


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class BackgroundTimer:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class SocketIOScheduler:
    """Runs timers as Socket.IO background tasks (threads or greenlets)."""

    def __init__(self, socketio: SocketIO) -> None:
        self.socketio = socketio

    def _run(self, body: Callable[[], None]) -> None:
        try:
            body()
        except Exception:
            log.exception("Timer task failed")

    def call_later(self, delay: float, callback: Callable[[], None]) -> BackgroundTimer:
        handle = BackgroundTimer()

        def _once() -> None:
            self.socketio.sleep(delay)
            if not handle.cancelled:
                callback()

        self.socketio.start_background_task(self._run, _once)
        return handle

    def call_every(self, interval: float, callback: Callable[[], None]) -> BackgroundTimer:
        handle = BackgroundTimer()

        def _loop() -> None:
            while not handle.cancelled:
                self.socketio.sleep(interval)
                if handle.cancelled:
                    break
                self._run(callback)

        self.socketio.start_background_task(self._run, _loop)
        return handle
