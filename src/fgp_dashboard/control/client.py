"""Async client for the daemon control socket.

Protocol: newline-delimited JSON over a Unix domain stream socket. The client
writes one request line and reads one response line per connection.

    request:  {"id": "...", "v": 1, "method": "health", "params": {}}
    response: {"id": "...", "ok": true, "result": {...}, "error": null, "meta": {...}}
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import math
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fgp_dashboard.errors import ControlSocketError

PROTOCOL_VERSION = 1
MAX_MESSAGE_SIZE = 10 * 1024 * 1024


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"number {text} is out of range")
    return value


@dataclass
class ControlRequest:
    method: str
    params: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    v: int = PROTOCOL_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "v": self.v, "method": self.method, "params": self.params}

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict()).encode() + b"\n"


@dataclass
class ControlErrorInfo:
    code: str
    message: str


@dataclass
class ControlResponse:
    """A decoded response envelope."""

    id: str | None
    ok: bool
    result: dict[str, Any] | None = None
    error: ControlErrorInfo | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def error_message(self) -> str:
        return self.error.message if self.error else ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ControlResponse:
        error = None
        raw_error = data.get("error")
        if isinstance(raw_error, dict):
            error = ControlErrorInfo(
                code=str(raw_error.get("code", "UNKNOWN")),
                message=str(raw_error.get("message", "")),
            )
        elif isinstance(raw_error, str):
            error = ControlErrorInfo(code="UNKNOWN", message=raw_error)
        result = data.get("result")
        meta = data.get("meta")
        return cls(
            id=data.get("id"),
            ok=data.get("ok") is True,
            result=result if isinstance(result, dict) else None,
            error=error,
            meta=meta if isinstance(meta, dict) else {},
        )


class ControlClient:
    """One-shot request/response client bound to a single control socket."""

    def __init__(self, socket_path: Path, timeout: float = 5.0) -> None:
        self.socket_path = socket_path
        self.timeout = timeout

    async def call(self, method: str, params: dict[str, Any] | None = None) -> ControlResponse:
        """Send *method* and return the decoded response.

        Raises ControlSocketError on connect failure, timeout, a closed
        connection or an undecodable reply.
        """
        request = ControlRequest(method=method, params=params or {})
        try:
            return await asyncio.wait_for(self._roundtrip(request), timeout=self.timeout)
        except TimeoutError as exc:
            raise ControlSocketError(
                f"Timed out after {self.timeout}s waiting for {self.socket_path}"
            ) from exc

    async def health(self) -> ControlResponse:
        return await self.call("health")

    async def stop(self) -> ControlResponse:
        return await self.call("stop")

    async def _roundtrip(self, request: ControlRequest) -> ControlResponse:
        try:
            reader, writer = await asyncio.open_unix_connection(
                str(self.socket_path), limit=MAX_MESSAGE_SIZE
            )
        except OSError as exc:
            raise ControlSocketError(f"Failed to connect to {self.socket_path}: {exc}") from exc

        try:
            writer.write(request.to_bytes())
            await writer.drain()
            line = await reader.readline()
        except (OSError, ValueError) as exc:
            raise ControlSocketError(f"Request {request.method!r} failed: {exc}") from exc
        finally:
            writer.close()
            with contextlib.suppress(OSError):
                await writer.wait_closed()

        if not line:
            raise ControlSocketError(f"Connection closed before a response to {request.method!r}")
        try:
            data = json.loads(line, parse_constant=_reject_constant, parse_float=_finite_float)
        except ValueError as exc:
            raise ControlSocketError(f"Invalid response to {request.method!r}: {exc}") from exc
        if not isinstance(data, dict):
            raise ControlSocketError(f"Invalid response to {request.method!r}: expected an object")
        return ControlResponse.from_dict(data)
