"""Command-line entry point of the chat server."""

import re
import sys

from .server import Server

_INT_PREFIX = re.compile(r"\s*[+-]?\d+")
_INT_MIN = -(2**31)
_INT_MAX = 2**31 - 1


def _parse_port(text):
    match = _INT_PREFIX.match(text)
    if match is None:
        raise ValueError("Invalid port given.")
    value = int(match.group())
    if not _INT_MIN <= value <= _INT_MAX:
        raise ValueError("Invalid port given.")
    return value % 65536


def main(argv=None):
    """Run the chat server on 127.0.0.1 at the port given as the first argument."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: chat-server <listening_port>", file=sys.stderr)
        return 1

    try:
        port = _parse_port(args[0])
    except ValueError:
        print("Invalid port given.", file=sys.stderr)
        return 1

    server = Server()
    try:
        server.listen("127.0.0.1", port)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        server.stop()

    server.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())