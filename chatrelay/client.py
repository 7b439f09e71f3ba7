"""A connected chat client."""

import errno
import json

from .errors import NetworkError


def _network_error(exc):
    return NetworkError(exc.strerror or str(exc), exc.errno or 0)


class Client:
    """Wraps the socket of one connected peer."""

    def __init__(self, sock):
        self._sock = sock

    def fileno(self):
        """Return the descriptor of the underlying socket (-1 once closed)."""
        return self._sock.fileno()

    def kick(self):
        """Close the connection to this client."""
        if self._sock.fileno() == -1:
            raise NetworkError("Bad file descriptor", errno.EBADF)
        try:
            self._sock.close()
        except OSError as exc:
            raise _network_error(exc) from exc

    def send(self, data):
        """Send raw bytes to this client."""
        try:
            self._sock.sendall(data)
        except OSError as exc:
            raise _network_error(exc) from exc

    def send_json(self, obj):
        """Send a compact JSON document followed by a NUL terminator."""
        text = json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)
        self.send(text.encode("utf-8") + b"\0")