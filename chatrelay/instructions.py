"""Instructions exchanged between clients and the server."""

from abc import ABC, abstractmethod
from enum import IntEnum


class InstructionType(IntEnum):
    UNKNOWN = 0
    SEND_MESSAGE = 1


class Instruction(ABC):
    """Base class of every instruction a client can send."""

    instruction_type = InstructionType.UNKNOWN

    def __init__(self, source_client=None):
        self.source_client = source_client
        self.target_clients = []
        self.broadcast_clients = None

    @abstractmethod
    def from_json(self, data):
        """Load this instruction's fields from a decoded JSON object."""

    @abstractmethod
    def to_json(self):
        """Return this instruction as a JSON-serialisable object."""

    @abstractmethod
    def execute(self):
        """Carry out the instruction."""


class Message(Instruction):
    """A chat message broadcast to every connected client."""

    instruction_type = InstructionType.SEND_MESSAGE

    def __init__(self, source_client=None, text=""):
        super().__init__(source_client)
        self.text = text

    def from_json(self, data):
        text = data["msg_text"]
        if not isinstance(text, str):
            raise TypeError("msg_text must be a string")
        self.text = text

    def to_json(self):
        return {
            "instruction_type": int(InstructionType.SEND_MESSAGE),
            "msg_text": self.text,
        }

    def execute(self):
        if self.broadcast_clients is None:
            raise RuntimeError("Message has no clients to broadcast to.")
        payload = [self.to_json()]
        for client in list(self.broadcast_clients.values()):
            client.send_json(payload)


def create_instruction(client, instruction_type):
    """Build an empty instruction of the given type for ``client``."""
    try:
        kind = InstructionType(instruction_type)
    except (ValueError, TypeError):
        kind = InstructionType.UNKNOWN
    if kind is InstructionType.SEND_MESSAGE:
        return Message(client)
    raise ValueError("Tried to create instruction with invalid type.")