"""
This module contains the IOInterface abstract base class and its implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IOInterface(ABC):
    """
    Abstract base class for an IO interface.

    This class defines the interface for line-based input/output used by the
    console adapter.
    """

    @abstractmethod
    def output(self, message: str) -> None:
        """Output a message to the interface."""
        pass

    @abstractmethod
    def input(self, prompt: str) -> str:
        """Get input from the user with a prompt."""
        pass


class TestIOInterface(IOInterface):
    """
    A test IO interface. Collects output messages and replays queued input lines.

    Methods
    -------
    def output(self, message):
        Collect an output message.

    def input(self, prompt):
        Return the next queued response.

    def add_input(self, response: str):
        Queue a response for a later prompt.
    """

    __test__ = False

    def __init__(self, responses: list[str] | None = None):
        self.sent_messages: list[str] = []
        self.prompts: list[str] = []
        self.input_responses: list[str] = list(responses or [])

    def output(self, message: str) -> None:
        self.sent_messages.append(message)

    def input(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.input_responses:
            return self.input_responses.pop(0)
        raise EOFError("No more responses left in TestIOInterface queue.")

    def add_input(self, response: str) -> None:
        """Queue a response for a later prompt."""
        self.input_responses.append(response)


class ConsoleIOInterface(IOInterface):
    """
    A console IO interface for interactive play.
    """

    def output(self, message: str) -> None:
        print(message)

    def input(self, prompt: str) -> str:
        return input(prompt)
