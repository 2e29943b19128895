"""
Rich-based user prompts
"""
from typing import Optional
from rich.console import Console
from rich.prompt import Prompt, Confirm

from ...core.interfaces import PromptProvider
from ...core.logging import get_stdout_console


class RichPromptProvider(PromptProvider):
    """Rich-based prompt provider"""

    def __init__(self, console: Optional[Console] = None, assume_yes: bool = False):
        """
        Args:
            console: Console to prompt on
            assume_yes: Answer every confirmation with yes and every prompt
                with its default, without asking
        """
        self.console = console or get_stdout_console()
        self.assume_yes = assume_yes

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input"""
        if self.assume_yes and default is not None:
            return default
        return Prompt.ask(message, password=password, default=default, console=self.console)

    def confirm(self, message: str, default: bool = False) -> bool:
        """Prompt user for confirmation"""
        if self.assume_yes:
            self.console.print(f"{message} [dim](yes)[/dim]")
            return True
        return Confirm.ask(message, default=default, console=self.console)

    def success(self, message: str) -> None:
        """Display success message"""
        self.console.print(f"[green]✓[/green] {message}")
