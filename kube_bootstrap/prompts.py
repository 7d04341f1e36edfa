"""Interactive input providers."""

from abc import ABC, abstractmethod

from rich.console import Console
from rich.prompt import Prompt


class InputProvider(ABC):
    """Source of operator answers.

    Implementations return the default when the operator gives an empty
    answer and a default exists.
    """

    @abstractmethod
    def prompt(self, name: str, default: str | None = None) -> str: ...


class ConsolePrompter(InputProvider):
    """Asks on the terminal via rich.

    Answers to prompts with a default are stripped; free-form answers
    (no default) are returned as typed.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def prompt(self, name, default=None):
        if default is None:
            return Prompt.ask(name, console=self.console, default="", show_default=False)
        answer = Prompt.ask(name, console=self.console, default=default).strip()
        return answer or default
