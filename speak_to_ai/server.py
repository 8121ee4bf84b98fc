"""WebSocket server for remote recording control."""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass
from typing import Any, Coroutine, Protocol

from aiohttp import WSMsgType, web

from . import ws_auth
from .config import Config
from .logger import DefaultLogger, Logger
from .retry import RetryTracker

READ_LIMIT = 1024 * 1024
WRITE_TIMEOUT = 10.0
PING_INTERVAL = 20.0
SHUTDOWN_TIMEOUT = 5.0
TRANSCRIPTION_TIMEOUT = 30.0


class Recorder(Protocol):
    def start_recording(self) -> None: ...
    def stop_recording(self) -> str: ...
    def cleanup_file(self) -> None: ...


class Transcriber(Protocol):
    def transcribe(self, audio_file: str) -> str: ...


@dataclass
class Message:
    """A message exchanged over the WebSocket."""

    type: str
    payload: Any = None
    api_version: str = ""
    request_id: str = ""
    timestamp: int = 0
    error: str = ""

    def to_json(self) -> str:
        """Serialise, leaving out empty optional fields."""
        data: dict[str, Any] = {"type": self.type}
        if self.payload is not None:
            data["payload"] = self.payload
        if self.api_version:
            data["api_version"] = self.api_version
        if self.request_id:
            data["request_id"] = self.request_id
        if self.timestamp:
            data["timestamp"] = self.timestamp
        if self.error:
            data["error"] = self.error
        return json.dumps(data, separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, raw: str | bytes) -> "Message":
        """Parse a message; raises ValueError if it is malformed."""
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ValueError(f"invalid message: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("message must be a JSON object")
        for name in ("type", "api_version", "request_id", "error"):
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"field {name!r} must be a string")
        timestamp = data.get("timestamp")
        if timestamp is not None and (isinstance(timestamp, bool) or not isinstance(timestamp, int)):
            raise ValueError("field 'timestamp' must be an integer")
        return cls(
            type=data.get("type") or "",
            payload=data.get("payload"),
            api_version=data.get("api_version") or "",
            request_id=data.get("request_id") or "",
            timestamp=timestamp or 0,
            error=data.get("error") or "",
        )


class WebSocketServer:
    """Serves /ws, a versioned /api/<version>/ws and /health."""

    def __init__(
        self,
        config: Config,
        recorder: Recorder,
        whisper: Transcriber,
        logger: Logger | None = None,
        *,
        retries: RetryTracker | None = None,
        transcription_timeout: float = TRANSCRIPTION_TIMEOUT,
    ) -> None:
        self.config = config
        self.recorder = recorder
        self.whisper = whisper
        self.logger = logger if logger is not None else DefaultLogger()
        self.retries = retries if retries is not None else RetryTracker(logger=self.logger)
        self.transcription_timeout = transcription_timeout
        self.clients: set[web.WebSocketResponse] = set()
        self.started = False
        self._runner: web.AppRunner | None = None
        self._tasks: set[asyncio.Task] = set()

    @property
    def _settings(self):
        return self.config.web_server

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/ws", self._handle_websocket)
        if self._settings.api_version:
            app.router.add_get(f"/api/{self._settings.api_version}/ws", self._handle_websocket)
        app.router.add_route("*", "/health", self._handle_health)
        return app

    async def start(self) -> None:
        """Start listening if the server is enabled; bind errors are logged."""
        if not self._settings.enabled:
            return
        addr = f"{self._settings.host}:{self._settings.port}"
        runner = web.AppRunner(self.build_app())
        await runner.setup()
        site = web.TCPSite(runner, self._settings.host or None, self._settings.port)
        self.logger.info("Starting WebSocket server on %s", addr)
        try:
            await site.start()
        except OSError as exc:
            self.logger.error("WebSocket server error: %s", exc)
            await runner.cleanup()
            return
        self._runner = runner
        self.started = True

    async def stop(self) -> None:
        """Close all clients and shut the server down."""
        if self._runner is None or not self.started:
            return
        self.logger.info("Stopping WebSocket server...")
        clients, self.clients = list(self.clients), set()
        for ws in clients:
            await ws.close()
        try:
            await asyncio.wait_for(self._runner.cleanup(), SHUTDOWN_TIMEOUT)
        except (asyncio.TimeoutError, OSError) as exc:
            self.logger.error("Error shutting down WebSocket server: %s", exc)
        else:
            self.logger.info("WebSocket server stopped")
        self._runner = None
        self.started = False

    def authenticate(self, request: web.Request) -> bool:
        return ws_auth.authenticate(self._settings.auth_token, request.query, request.headers)

    def validate_token(self, token: str) -> bool:
        return ws_auth.validate_token(self._settings.auth_token, token)

    def make_message(self, message_type: str, payload: Any = None, request_id: str = "") -> Message:
        return Message(
            type=message_type,
            payload=payload,
            api_version=self._settings.api_version,
            request_id=request_id,
            timestamp=int(time.time()),
        )

    def make_error(self, error_type: str, error_message: str, request_id: str = "") -> Message:
        return Message(
            type="error",
            payload=error_message,
            api_version=self._settings.api_version,
            request_id=request_id,
            timestamp=int(time.time()),
            error=error_type,
        )

    async def send_message(self, ws, message_type: str, payload: Any = None, request_id: str = "") -> None:
        await self._write(ws, self.make_message(message_type, payload, request_id), log=True)

    async def broadcast_message(self, message_type: str, payload: Any = None) -> None:
        for ws in list(self.clients):
            await self.send_message(ws, message_type, payload)

    async def _send_error(self, ws, error_type: str, error_message: str, request_id: str = "") -> None:
        await self._write(ws, self.make_error(error_type, error_message, request_id), log=False)

    async def _write(self, ws, message: Message, *, log: bool) -> None:
        try:
            data = message.to_json()
        except (TypeError, ValueError) as exc:
            self.logger.error("Error marshaling message: %s", exc)
            return
        if log and self._settings.log_requests:
            self.logger.debug("Sending WebSocket message: %s", data)
        try:
            await asyncio.wait_for(ws.send_str(data), WRITE_TIMEOUT)
        except (OSError, RuntimeError, asyncio.TimeoutError) as exc:
            self.logger.error("Error sending message: %s", exc)

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.Response(text='{"status":"ok"}', content_type="application/json")

    async def _handle_websocket(self, request: web.Request) -> web.StreamResponse:
        if not self.authenticate(request):
            self.logger.warning("Unauthorized WebSocket connection attempt from %s", request.remote)
            return web.Response(status=401, text="Unauthorized")

        limit = self._settings.max_clients
        if limit > 0 and len(self.clients) >= limit:
            self.logger.warning("Max clients limit reached, rejecting connection from %s", request.remote)
            return web.Response(status=503, text="Too many connections")

        ws = web.WebSocketResponse(heartbeat=PING_INTERVAL, max_msg_size=READ_LIMIT)
        try:
            await ws.prepare(request)
        except web.HTTPException as exc:
            self.logger.error("Error upgrading to WebSocket: %s", exc)
            raise

        self.clients.add(ws)
        try:
            await self.send_message(
                ws,
                "connected",
                {"server": "Speak-to-AI", "api_version": self._settings.api_version},
            )
            await self._process_messages(ws)
        finally:
            await ws.close()
            self.clients.discard(ws)
            self.retries.forget(ws)
        return ws

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _process_messages(self, ws: web.WebSocketResponse) -> None:
        async for frame in ws:
            if frame.type == WSMsgType.ERROR:
                self.logger.debug("WebSocket error: %s", ws.exception())
                break
            if frame.type not in (WSMsgType.TEXT, WSMsgType.BINARY):
                continue
            raw = frame.data
            if self._settings.log_requests:
                text = raw if isinstance(raw, str) else raw.decode(errors="replace")
                self.logger.debug("Received WebSocket message: %s", text)
            try:
                message = Message.from_json(raw)
            except ValueError as exc:
                self.logger.error("Error parsing WebSocket message: %s", exc)
                await self._send_error(ws, "invalid_message", "Could not parse message")
                continue

            if message.type == "start-recording":
                self._spawn(self._handle_start_recording(ws, message.request_id))
            elif message.type == "stop-recording":
                self._spawn(self._handle_stop_recording(ws, message.request_id))
            elif message.type == "ping":
                await self.send_message(ws, "pong")
            else:
                self.logger.warning("Unknown message type: %s", message.type)
                await self._send_error(
                    ws, "unknown_type", f"Unknown message type: {message.type}", message.request_id
                )

    async def _handle_start_recording(self, ws, request_id: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(
                None, self.retries.execute_with_retry, self.recorder.start_recording, ws
            )
        except Exception as exc:
            self.logger.error("Error starting recording: %s", exc)
            await self._send_error(ws, "recording_error", f"Error starting recording: {exc}", request_id)
            return
        await self.send_message(ws, "recording-started", None, request_id)

    async def _handle_stop_recording(self, ws, request_id: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            audio_file = await loop.run_in_executor(None, self.recorder.stop_recording)
        except Exception as exc:
            self.logger.error("Error stopping recording: %s", exc)
            await self._send_error(ws, "recording_error", f"Error stopping recording: {exc}", request_id)
            return

        await self.send_message(ws, "recording-stopped", None, request_id)

        try:
            text = await asyncio.wait_for(
                loop.run_in_executor(None, self.whisper.transcribe, audio_file),
                self.transcription_timeout,
            )
        except asyncio.TimeoutError:
            self.logger.error("Timeout transcribing audio")
            await self._send_error(ws, "transcription_timeout", "Timeout transcribing audio", request_id)
        except Exception as exc:
            self.logger.error("Error transcribing audio: %s", exc)
            await self._send_error(
                ws, "transcription_error", f"Error transcribing audio: {exc}", request_id
            )
        else:
            await self.send_message(ws, "transcription", {"text": text}, request_id)

        try:
            await loop.run_in_executor(None, self.recorder.cleanup_file)
        except Exception as exc:
            self.logger.error("Error cleaning up audio file: %s", exc)