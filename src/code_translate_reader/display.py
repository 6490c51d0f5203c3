import asyncio
from types import TracebackType

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status

from code_translate_reader.providers import PROVIDER_LABELS
from code_translate_reader.types import TranslationResult


class TranslationView:
    """Terminal UI owned by a single translate or speak action.

    Holds the progress spinner and the result panel. Starting a new spinner or
    showing a result replaces whatever was on screen; closing the view (or
    leaving the ``with`` block) tears everything down.
    """

    def __init__(self, console: Console, show_original_text: bool = True, hover_duration: int = 0) -> None:
        self.console = console
        self.show_original_text = show_original_text
        self.hover_duration = hover_duration
        self._status: Status | None = None

    def __enter__(self) -> "TranslationView":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def busy(self, message: str) -> None:
        self._clear_status()
        self._status = self.console.status(message)
        self._status.start()

    def done(self, message: str) -> None:
        self._clear_status()
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def render(self, original: str, result: TranslationResult) -> Panel:
        if self.show_original_text:
            body = f"[bold]Original:[/bold] {escape(original)}\n[bold]Translation:[/bold] {escape(result.text)}"
        else:
            body = escape(result.text)
        return Panel(body, title=PROVIDER_LABELS[result.provider], title_align="left", expand=False)

    async def show(self, original: str, result: TranslationResult) -> None:
        """Show the result panel.

        With a positive hover_duration on an interactive terminal the panel is
        dismissed after that many milliseconds, leaving a one-line summary behind.
        """
        self._clear_status()
        panel = self.render(original, result)

        if self.hover_duration > 0 and self.console.is_terminal:
            with Live(panel, console=self.console, transient=True):
                await asyncio.sleep(self.hover_duration / 1000)
            prefix = f"{escape(original)} → " if self.show_original_text else ""
            self.console.print(f"[dim]{prefix}[/dim]{escape(result.text)}")
        else:
            self.console.print(panel)

    def close(self) -> None:
        self._clear_status()

    def _clear_status(self) -> None:
        if self._status is not None:
            self._status.stop()
            self._status = None
