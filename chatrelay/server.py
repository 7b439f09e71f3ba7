"""TCP chat server that relays messages to every connected client."""

import errno
import json
import select
import socket
import sys
import threading

from .client import Client
from .errors import NetworkError
from .handler import Context, InstructionHandler
from .instructions import create_instruction

SERVER_SOCKET_BACKLOG = 3
POLL_TIMEOUT = 0.25
RECV_BUF_SIZE = 1024


def _network_error(exc):
    return NetworkError(exc.strerror or str(exc), exc.errno or 0)


def parse_instructions(payload):
    """Decode a received payload into a list of instructions.

    Malformed JSON is reported on stderr and yields no instructions.
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    payload = payload.split(b"\0", 1)[0]
    try:
        document = json.loads(payload.decode("utf-8"))
    except ValueError:
        text = payload.decode("utf-8", errors="replace")
        print(f"JSON parsing error: Received malformed message: '{text}'", file=sys.stderr)
        return []

    if document is None:
        items = []
    elif isinstance(document, list):
        items = document
    elif isinstance(document, dict):
        items = list(document.values())
    else:
        items = [document]

    instructions = []
    for item in items:
        if not isinstance(item, dict) or "instruction_type" not in item:
            raise ValueError(
                "Tried to parse non-instruction JSON object as an instruction JSON object."
            )
        instruction = create_instruction(None, item["instruction_type"])
        instruction.from_json(item)
        instructions.append(instruction)
    return instructions


class Server:
    """Accepts clients and broadcasts their messages to everyone connected."""

    def __init__(self):
        self._listener = None
        self._sockets = {}
        self._clients = {}
        self._running = False
        self.context = Context(client_list=self._clients)
        self._handler = InstructionHandler(self.context)
        self.started = threading.Event()

    def listen(self, listen_addr, port):
        """Bind to ``listen_addr``:``port`` and serve until :meth:`stop` is called."""
        if port == 0:
            raise ValueError("Cannot bind to port 0.")
        try:
            infos = socket.getaddrinfo(
                listen_addr, port, socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP
            )
        except socket.gaierror as exc:
            raise NetworkError(exc.strerror or str(exc), exc.errno or 0) from exc

        try:
            listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM, socket.IPPROTO_TCP)
        except OSError as exc:
            raise _network_error(exc) from exc
        try:
            listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            listener.bind(infos[0][4])
            listener.listen(SERVER_SOCKET_BACKLOG)
        except OSError as exc:
            listener.close()
            raise _network_error(exc) from exc

        self._listener = listener
        self._running = True
        self.started.set()
        self._run()

    def stop(self):
        """Ask the serving loop to finish after its current iteration."""
        self._running = False

    def close(self):
        """Disconnect every client and close the listening socket."""
        for sock in list(self._sockets.values()):
            try:
                sock.shutdown(socket.SHUT_RDWR)
                sock.recv(RECV_BUF_SIZE - 1)
            except OSError:
                pass
            try:
                sock.close()
            except OSError as exc:
                raise _network_error(exc) from exc
        self._sockets.clear()
        self._clients.clear()

        if self._listener is None:
            raise NetworkError("Bad file descriptor", errno.EBADF)
        try:
            self._listener.close()
        except OSError as exc:
            raise _network_error(exc) from exc
        self._listener = None

    def remove_client(self, fd):
        """Forget and close the client associated with ``fd``."""
        self._clients.pop(fd, None)
        sock = self._sockets.pop(fd, None)
        if sock is not None:
            sock.close()

    def _run(self):
        while self._running:
            self._accept_new_clients()
            if self._clients:
                self._serve_clients()

    def _accept_new_clients(self):
        try:
            readable, _, _ = select.select([self._listener], [], [], POLL_TIMEOUT)
        except OSError as exc:
            raise _network_error(exc) from exc
        if not readable:
            return
        try:
            sock, _ = self._listener.accept()
        except OSError as exc:
            raise _network_error(exc) from exc
        fd = sock.fileno()
        self._sockets[fd] = sock
        self._clients[fd] = Client(sock)

    def _serve_clients(self):
        fd_by_sock = {sock: fd for fd, sock in self._sockets.items()}
        try:
            readable, _, _ = select.select(list(fd_by_sock), [], [], POLL_TIMEOUT)
        except OSError as exc:
            raise _network_error(exc) from exc

        for sock in readable:
            fd = fd_by_sock[sock]
            if fd not in self._clients:
                continue
            try:
                data = sock.recv(RECV_BUF_SIZE - 1)
            except ConnectionResetError:
                data = b""
            except OSError as exc:
                raise _network_error(exc) from exc
            if not data:
                self.remove_client(fd)
                continue

            instructions = parse_instructions(data)
            sender = self._clients[fd]
            for instruction in instructions:
                instruction.source_client = sender
                instruction.broadcast_clients = self._clients

            try:
                self._handler.handle(instructions)
            except NetworkError as exc:
                if exc.errno == errno.ECONNRESET:
                    self.remove_client(fd)