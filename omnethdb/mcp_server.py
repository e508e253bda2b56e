"""A JSON-RPC tool server speaking framed or line-delimited messages."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, BinaryIO, Protocol, runtime_checkable

DEFAULT_PROTOCOL_VERSION = "2025-03-26"

_CONTENT_LENGTH = re.compile(r"[+-]?\d+")
_HTML_ESCAPES = (
    ("<", "\\u003c"),
    (">", "\\u003e"),
    ("&", "\\u0026"),
    ("\u2028", "\\u2028"),
    ("\u2029", "\\u2029"),
)


class WireMode(Enum):
    UNKNOWN = 0
    FRAMED = 1
    PLAIN = 2


@dataclass
class ToolDefinition:
    name: str
    description: str = ""
    input_schema: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


@dataclass
class ToolContent:
    type: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass
class ToolResult:
    content: list[ToolContent] = field(default_factory=list)
    structured_content: Any = None
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Return the wire form, leaving out empty fields."""
        out: dict[str, Any] = {}
        if self.content:
            out["content"] = [item.to_dict() for item in self.content]
        if self.structured_content is not None:
            out["structuredContent"] = self.structured_content
        if self.is_error:
            out["isError"] = True
        return out


@runtime_checkable
class Tool(Protocol):
    """A callable tool exposed through the server."""

    def definition(self) -> ToolDefinition: ...

    def call(self, arguments: dict[str, Any]) -> ToolResult: ...


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    raise TypeError(f"cannot encode {type(value).__name__} as JSON")


def _encode(message: Any) -> bytes:
    text = json.dumps(message, ensure_ascii=False, separators=(",", ":"), default=_json_default)
    for raw, escaped in _HTML_ESCAPES:
        text = text.replace(raw, escaped)
    return text.encode("utf-8")


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def _read_frame(first_line: bytes, reader: BinaryIO) -> bytes:
    content_length = -1
    line = first_line
    while True:
        if not line.endswith(b"\n"):
            raise EOFError("end of input inside frame header")
        text = line.decode("latin-1").rstrip("\r\n")
        if text == "":
            break
        parts = text.split(":", 1)
        if len(parts) == 2 and parts[0].strip().lower() == "content-length":
            match = _CONTENT_LENGTH.match(parts[1].strip())
            if match is None:
                raise ValueError(f"invalid Content-Length: {parts[1].strip()!r}")
            content_length = int(match.group())
        line = reader.readline()

    if content_length < 0:
        raise ValueError("unexpected EOF: frame has no Content-Length")
    payload = reader.read(content_length) if content_length else b""
    if content_length and not payload:
        raise EOFError("end of input before frame payload")
    if len(payload) < content_length:
        raise ValueError("unexpected EOF: truncated frame payload")
    return payload


def read_message(reader: BinaryIO) -> tuple[bytes, WireMode]:
    """Read one message; raise ``EOFError`` when the input is exhausted."""
    line = reader.readline()
    if not line:
        raise EOFError("end of input")
    if line[:1] in (b"{", b"["):
        payload = line.strip()
        if not line.endswith(b"\n") and not payload:
            raise EOFError("end of input")
        return payload, WireMode.PLAIN
    return _read_frame(line, reader), WireMode.FRAMED


def write_message(writer: BinaryIO, message: Any, mode: WireMode) -> None:
    """Write ``message`` as one line in plain mode, otherwise as a frame."""
    payload = _encode(message)
    if mode is WireMode.PLAIN:
        writer.write(payload + b"\n")
    else:
        writer.write(f"Content-Length: {len(payload)}\r\n\r\n".encode("ascii") + payload)


def _decode_request(payload: bytes) -> dict[str, Any]:
    request = json.loads(payload)
    if not isinstance(request, dict):
        raise ValueError("request must be a JSON object")
    for key in ("jsonrpc", "method"):
        if request.get(key) is not None and not isinstance(request[key], str):
            raise ValueError(f"request field {key} must be a string")
    if request.get("params") is not None and not isinstance(request["params"], dict):
        raise ValueError("request params must be an object")
    return request


def _success(request_id: Any, result: Any) -> dict[str, Any]:
    out: dict[str, Any] = {"jsonrpc": "2.0"}
    if request_id is not None:
        out["id"] = request_id
    out["result"] = result
    return out


def _error(request_id: Any, code: int, message: str) -> dict[str, Any]:
    out: dict[str, Any] = {"jsonrpc": "2.0"}
    if request_id is not None:
        out["id"] = request_id
    out["error"] = {"code": code, "message": message}
    return out


def _flush(writer: BinaryIO) -> None:
    flush = getattr(writer, "flush", None)
    if callable(flush):
        flush()


class Server:
    """Dispatches JSON-RPC requests to registered tools."""

    def __init__(self, server_name: str, server_version: str, tools: Iterable[Tool | None]) -> None:
        self.server_name = server_name
        self.server_version = server_version
        self.tools: dict[str, Tool] = {}
        for tool in tools:
            if tool is None:
                continue
            self.tools[tool.definition().name] = tool

    def serve(self, reader: BinaryIO, writer: BinaryIO) -> None:
        """Answer requests from ``reader`` on ``writer`` until the input ends."""
        mode = WireMode.UNKNOWN
        while True:
            try:
                payload, detected = read_message(reader)
            except EOFError:
                _flush(writer)
                return

            try:
                request = _decode_request(payload)
            except ValueError:
                write_message(writer, _error(None, -32700, "parse error"), WireMode.FRAMED)
                _flush(writer)
                continue
            if mode is WireMode.UNKNOWN:
                mode = detected

            response = self.handle_request(request)
            if response is None:
                continue
            write_message(writer, response, mode)
            _flush(writer)

    def handle_request(self, request: Mapping[str, Any]) -> dict[str, Any] | None:
        """Return the response to ``request``, or ``None`` for notifications."""
        method = request.get("method") or ""
        request_id = request.get("id")
        params = request.get("params")
        if not isinstance(params, Mapping):
            params = {}

        def param_string(key: str) -> str:
            value = params.get(key)
            return value if isinstance(value, str) else ""

        if method == "initialize":
            requested = param_string("protocolVersion")
            version = requested if requested.strip() else DEFAULT_PROTOCOL_VERSION
            return _success(
                request_id,
                {
                    "capabilities": {
                        "logging": {},
                        "prompts": {"listChanged": False},
                        "resources": {"listChanged": False, "subscribe": False},
                        "tools": {"listChanged": False},
                    },
                    "protocolVersion": version,
                    "serverInfo": {"name": self.server_name, "version": self.server_version},
                },
            )
        if method in ("notifications/initialized", "$/cancelRequest"):
            return None
        if method in ("logging/setLevel", "ping"):
            return _success(request_id, {})
        if method == "tools/list":
            definitions = [tool.definition().to_dict() for tool in self.tools.values()]
            return _success(request_id, {"tools": definitions})
        empty_results = {
            "resources/list": {"resources": []},
            "resources/templates/list": {"resourceTemplates": []},
            "resources/read": {"contents": []},
            "prompts/list": {"prompts": []},
            "prompts/get": {"description": "", "messages": []},
            "roots/list": {"roots": []},
            "completion/complete": {"completion": {"hasMore": False, "values": []}},
        }
        if method in empty_results:
            return _success(request_id, empty_results[method])
        if method == "tools/call":
            return _success(request_id, self._call_tool(param_string("name"), params).to_dict())
        if method.startswith("notifications/"):
            return None
        return _error(request_id, -32601, "method not found")

    def _call_tool(self, name: str, params: Mapping[str, Any]) -> ToolResult:
        tool = self.tools.get(name)
        if tool is None:
            return ToolResult(
                is_error=True,
                content=[ToolContent(type="text", text=f"unknown tool {_quote(name)}")],
            )
        arguments = params.get("arguments")
        if not isinstance(arguments, dict):
            arguments = {}
        try:
            return tool.call(arguments)
        except Exception as exc:  # any tool failure is reported to the client
            return ToolResult(is_error=True, content=[ToolContent(type="text", text=str(exc))])