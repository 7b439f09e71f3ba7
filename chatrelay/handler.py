"""Execution of received instructions."""

from dataclasses import dataclass


@dataclass
class Context:
    """State shared between the server and the instruction handler."""

    client_list: dict | None = None


class InstructionHandler:
    """Runs instructions in the order they were received."""

    def __init__(self, context):
        self.context = context

    def handle(self, instructions):
        for instruction in instructions:
            instruction.execute()