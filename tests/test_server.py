import errno
import socket
import threading
import time

import pytest

from chatrelay.errors import NetworkError
from chatrelay.instructions import Message
from chatrelay.server import Server, parse_instructions


def _free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
        probe.bind(("127.0.0.1", 0))
        return probe.getsockname()[1]


def _wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.02)
    return predicate()


def _read_frame(sock):
    data = b""
    while not data.endswith(b"\0"):
        chunk = sock.recv(4096)
        if not chunk:
            break
        data += chunk
    return data


@pytest.fixture
def running_server():
    port = _free_port()
    server = Server()
    thread = threading.Thread(target=server.listen, args=("127.0.0.1", port), daemon=True)
    thread.start()
    assert server.started.wait(5)
    yield server, port
    server.stop()
    thread.join(5)
    server.close()


def _connect(port):
    sock = socket.create_connection(("127.0.0.1", port), timeout=5)
    sock.settimeout(5)
    return sock


def test_parse_list_of_messages():
    result = parse_instructions(b'[{"instruction_type":1,"msg_text":"hello"}]')
    assert len(result) == 1
    assert isinstance(result[0], Message)
    assert result[0].text == "hello"


def test_parse_ignores_text_after_nul():
    result = parse_instructions(b'[{"instruction_type":1,"msg_text":"a"}]\x00garbage')
    assert [m.text for m in result] == ["a"]


def test_parse_accepts_str():
    result = parse_instructions('[{"instruction_type":1,"msg_text":"s"}]')
    assert [m.text for m in result] == ["s"]


def test_parse_object_yields_its_values():
    result = parse_instructions(b'{"x":{"instruction_type":1,"msg_text":"v"}}')
    assert [m.text for m in result] == ["v"]


def test_parse_malformed_reports_and_returns_nothing(capsys):
    assert parse_instructions(b"{not json") == []
    assert "malformed message" in capsys.readouterr().err


def test_parse_null_returns_nothing():
    assert parse_instructions(b"null") == []


@pytest.mark.parametrize("payload", [b'[{"msg_text":"x"}]', b"3", b'["text"]'])
def test_parse_non_instruction_raises(payload):
    with pytest.raises(ValueError):
        parse_instructions(payload)


def test_parse_unknown_type_raises():
    with pytest.raises(ValueError):
        parse_instructions(b'[{"instruction_type":9,"msg_text":"x"}]')


def test_listen_on_port_zero_raises():
    with pytest.raises(ValueError):
        Server().listen("127.0.0.1", 0)


def test_listen_on_bad_address_raises():
    with pytest.raises(NetworkError):
        Server().listen("999.999.999.999", _free_port())


def test_listen_on_busy_port_raises():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]
        with pytest.raises(NetworkError) as info:
            Server().listen("127.0.0.1", port)
        assert info.value.errno == errno.EADDRINUSE


def test_close_without_listening_raises():
    with pytest.raises(NetworkError):
        Server().close()


def test_message_is_broadcast_to_all_clients(running_server):
    server, port = running_server
    sender = _connect(port)
    receiver = _connect(port)
    try:
        assert _wait_for(lambda: len(server.context.client_list) == 2)
        sender.sendall(b'[{"instruction_type":1,"msg_text":"hello"}]\x00')
        expected = b'[{"instruction_type":1,"msg_text":"hello"}]\x00'
        assert _read_frame(receiver) == expected
        assert _read_frame(sender) == expected
    finally:
        sender.close()
        receiver.close()


def test_disconnected_client_is_removed(running_server):
    server, port = running_server
    first = _connect(port)
    second = _connect(port)
    try:
        _wait_for(lambda: len(server.context.client_list) == 2)
        assert len(server.context.client_list) == 2
        first.close()
        _wait_for(lambda: len(server.context.client_list) == 1)
        assert len(server.context.client_list) == 1
    finally:
        second.close()


def test_remove_client_forgets_fd(running_server):
    server, port = running_server
    peer = _connect(port)
    try:
        assert _wait_for(lambda: len(server.context.client_list) == 1)
        fd = next(iter(server.context.client_list))
        server.remove_client(fd)
        assert fd not in server.context.client_list
        assert peer.recv(16) == b""
    finally:
        peer.close()