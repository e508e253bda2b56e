import io
import json

import pytest

from omnethdb.mcp_server import (
    Server,
    ToolContent,
    ToolDefinition,
    ToolResult,
    WireMode,
    read_message,
    write_message,
)


class StubTool:
    def definition(self):
        return ToolDefinition(
            name="echo_tool",
            description="Echoes arguments",
            input_schema={"type": "object"},
        )

    def call(self, arguments):
        return ToolResult(
            content=[ToolContent(type="text", text="ok")],
            structured_content=arguments,
        )


class FailingTool:
    def definition(self):
        return ToolDefinition(name="fail_tool", description="Always fails")

    def call(self, arguments):
        raise RuntimeError("boom")


def frame(payload: str) -> bytes:
    data = payload.encode("utf-8")
    return f"Content-Length: {len(data)}\r\n\r\n".encode("ascii") + data


def serve(data: bytes, tools=None) -> bytes:
    server = Server("omnethdb-mcp", "test", tools if tools is not None else [StubTool()])
    output = io.BytesIO()
    server.serve(io.BytesIO(data), output)
    return output.getvalue()


def frames(data: bytes):
    reader = io.BytesIO(data)
    out = []
    while True:
        try:
            payload, mode = read_message(reader)
        except EOFError:
            return out
        assert mode is WireMode.FRAMED
        out.append(json.loads(payload))


def test_server_serves_initialize_and_tool_calls():
    data = (
        frame('{"jsonrpc":"2.0","id":1,"method":"initialize","params":{"protocolVersion":"2025-03-26"}}')
        + frame('{"jsonrpc":"2.0","id":2,"method":"tools/list","params":{}}')
        + frame(
            '{"jsonrpc":"2.0","id":3,"method":"tools/call",'
            '"params":{"name":"echo_tool","arguments":{"hello":"world"}}}'
        )
    )
    got = serve(data).decode("utf-8")
    assert '"protocolVersion":"2025-03-26"' in got
    assert '"name":"echo_tool"' in got
    assert '"hello":"world"' in got


def test_server_supports_plain_jsonrpc_mode():
    data = (
        b'{"jsonrpc":"2.0","id":1,"method":"initialize","params":{"protocolVersion":"2025-11-25"}}\n'
        b'{"jsonrpc":"2.0","id":2,"method":"tools/list","params":{}}\n'
    )
    lines = serve(data).decode("utf-8").strip().split("\n")
    assert len(lines) == 2
    assert '"protocolVersion":"2025-11-25"' in lines[0]
    assert '"name":"echo_tool"' in lines[1]


def test_initialize_defaults_protocol_version():
    (response,) = frames(serve(frame('{"jsonrpc":"2.0","id":1,"method":"initialize"}')))
    assert response["result"]["protocolVersion"] == "2025-03-26"
    assert response["result"]["serverInfo"] == {"name": "omnethdb-mcp", "version": "test"}
    assert response["id"] == 1


def test_parse_error_is_framed_even_in_plain_mode():
    got = serve(b"{not json}\n")
    assert got.startswith(b"Content-Length: ")
    (response,) = frames(got)
    assert response == {"jsonrpc": "2.0", "error": {"code": -32700, "message": "parse error"}}


def test_unknown_method_reports_method_not_found():
    (response,) = frames(serve(frame('{"jsonrpc":"2.0","id":7,"method":"nope"}')))
    assert response["error"] == {"code": -32601, "message": "method not found"}
    assert response["id"] == 7


def test_notifications_get_no_response():
    data = frame('{"jsonrpc":"2.0","method":"notifications/initialized"}') + frame(
        '{"jsonrpc":"2.0","method":"notifications/progress"}'
    )
    assert serve(data) == b""


def test_unknown_tool_returns_error_result():
    (response,) = frames(
        serve(frame('{"jsonrpc":"2.0","id":4,"method":"tools/call","params":{"name":"missing"}}'))
    )
    assert response["result"] == {
        "content": [{"type": "text", "text": 'unknown tool "missing"'}],
        "isError": True,
    }


def test_failing_tool_returns_error_result():
    (response,) = frames(
        serve(
            frame('{"jsonrpc":"2.0","id":5,"method":"tools/call","params":{"name":"fail_tool"}}'),
            tools=[FailingTool()],
        )
    )
    assert response["result"]["isError"] is True
    assert response["result"]["content"][0]["text"] == "boom"


def test_handle_request_ping_and_empty_lists():
    server = Server("name", "1", [None, StubTool()])
    assert server.handle_request({"jsonrpc": "2.0", "id": 5, "method": "ping"}) == {
        "jsonrpc": "2.0",
        "id": 5,
        "result": {},
    }
    assert server.handle_request({"id": 6, "method": "prompts/list"})["result"] == {"prompts": []}
    assert server.handle_request({"method": "$/cancelRequest"}) is None
    assert list(server.tools) == ["echo_tool"]


def test_tool_output_escapes_html_characters():
    got = serve(
        frame(
            '{"jsonrpc":"2.0","id":3,"method":"tools/call",'
            '"params":{"name":"echo_tool","arguments":{"tag":"<b>"}}}'
        )
    )
    assert b"\\u003cb\\u003e" in got
    (response,) = frames(got)
    assert response["result"]["structuredContent"] == {"tag": "<b>"}


def test_read_message_detects_modes():
    payload, mode = read_message(io.BytesIO(b'  {"a":1}  \n'.lstrip()))
    assert mode is WireMode.PLAIN
    assert payload == b'{"a":1}'
    payload, mode = read_message(io.BytesIO(b"content-length: 2\r\nX-Other: 1\r\n\r\n{}"))
    assert mode is WireMode.FRAMED
    assert payload == b"{}"


def test_read_message_plain_line_without_newline():
    payload, mode = read_message(io.BytesIO(b'{"a":1}'))
    assert (payload, mode) == (b'{"a":1}', WireMode.PLAIN)


def test_read_message_raises_eof_on_empty_input():
    with pytest.raises(EOFError):
        read_message(io.BytesIO(b""))


def test_read_message_requires_content_length():
    with pytest.raises(ValueError):
        read_message(io.BytesIO(b"X-Other: 1\r\n\r\n{}"))


def test_read_message_rejects_truncated_payload():
    with pytest.raises(ValueError):
        read_message(io.BytesIO(b"Content-Length: 10\r\n\r\n{}"))


def test_serve_stops_cleanly_on_partial_header():
    got = serve(frame('{"jsonrpc":"2.0","id":1,"method":"ping"}') + b"Content-Len")
    assert frames(got) == [{"jsonrpc": "2.0", "id": 1, "result": {}}]


def test_write_message_formats():
    framed = io.BytesIO()
    write_message(framed, {"a": 1}, WireMode.FRAMED)
    assert framed.getvalue() == b'Content-Length: 7\r\n\r\n{"a":1}'
    plain = io.BytesIO()
    write_message(plain, {"a": 1}, WireMode.PLAIN)
    assert plain.getvalue() == b'{"a":1}\n'


def test_tool_result_to_dict_omits_empty_fields():
    assert ToolResult().to_dict() == {}
    result = ToolResult(structured_content={}, is_error=True)
    assert result.to_dict() == {"structuredContent": {}, "isError": True}