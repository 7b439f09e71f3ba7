# chatrelay

A small TCP chat server. Every client that connects can send chat
instructions as JSON, and the server relays each message to every
client that is connected at that moment, the sender included.

## Running the server

Install the package, then start the server with the port to listen on:

```
chat-server 5000
```

The server binds to `127.0.0.1`. If the port is missing, it prints a
usage line and exits with status 1. If the port is not a number, it
reports an invalid port and exits with status 1.

## Wire format

A client sends a JSON array of instructions. Each instruction is an
object that holds an `instruction_type`. Type `1` sends a chat message:

```json
[{"instruction_type": 1, "msg_text": "hello"}]
```

Each client receives a JSON array holding the relayed message. The array
ends with a NUL byte:

```json
[{"instruction_type": 1, "msg_text": "hello"}]
```

An object with no `instruction_type` is an error. An object whose type
is unknown is also an error. A payload that is not valid JSON is logged
and skipped.

## Using it from Python

```python
from chatrelay.server import Server, parse_instructions

instructions = parse_instructions(b'[{"instruction_type": 1, "msg_text": "hi"}]')
print(instructions[0].text)  # "hi"

server = Server()
server.listen("127.0.0.1", 5000)  # runs until server.stop() is called
server.close()
```

The building blocks live in their own modules:

- `chatrelay.client.Client` wraps a connected socket.
- `chatrelay.instructions` holds `InstructionType`, `Instruction`,
  `Message` and `create_instruction`.
- `chatrelay.handler` holds `Context` and `InstructionHandler`, which
  runs a batch of instructions.
- `chatrelay.errors.NetworkError` is raised for socket failures. It
  carries the `errno` value.

## Development

```
pip install -e .[test]
pytest
```