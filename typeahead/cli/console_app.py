"""Full-screen terminal editor hosting the suggestion pipeline."""

import logging
from pathlib import Path

from prompt_toolkit.application import Application
from prompt_toolkit.buffer import Buffer
from prompt_toolkit.document import Document
from prompt_toolkit.filters import Condition
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.key_binding import KeyBindings, KeyPressEvent
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import BufferControl, FormattedTextControl
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from ..core.completion import CompletionService
from ..core.config import SuggestionsConfig
from ..core.overlay import OverlayState, SuggestionOverlay
from ..core.pipeline import SuggestionPipeline
from .buffer_surface import BufferSurface
from .ghost import GhostTextProcessor, TerminalOverlayRenderer

logger = logging.getLogger("typeahead.cli")

# Repositioning is a no-op in a terminal; a slow tick keeps the tracker cheap.
TERMINAL_FRAME_INTERVAL = 0.1
ESCAPE_TIMEOUT = 0.05

STATUS_LOADING = "Generating…"
STATUS_VISIBLE = "Tab to accept · Esc to dismiss"
STATUS_OFF = "Suggestions off · Ctrl-T to enable"
STATUS_IDLE = "Ctrl-T toggle suggestions · Ctrl-S save · Ctrl-Q quit"


class EditorApp:
    """Multiline editor with inline ghost-text suggestions."""

    def __init__(
        self,
        service: CompletionService,
        *,
        text: str = "",
        path: Path | None = None,
        suggestions: SuggestionsConfig | None = None,
        provider_label: str = "",
    ):
        config = suggestions or SuggestionsConfig()
        self.console = Console()
        self.service = service
        self.path = path
        self.provider_label = provider_label
        self.message = ""

        self.buffer = Buffer(multiline=True, document=Document(text, len(text)))
        self.surface = BufferSurface(self.buffer)
        self.renderer = TerminalOverlayRenderer(self._invalidate)
        self.overlay = SuggestionOverlay(
            self.renderer,
            frame_interval=TERMINAL_FRAME_INTERVAL,
            hide_fallback=config.hide_fallback_ms / 1000,
            accept_duration=config.accept_duration_ms / 1000,
        )
        self.pipeline = SuggestionPipeline(
            self.overlay,
            service,
            self.surface,
            debounce_seconds=config.debounce_ms / 1000,
            min_sentence_chars=config.min_sentence_chars,
        )
        self.application = self._build_application()

    # -- Layout ----------------------------------------------------------

    def _build_application(self) -> Application[None]:
        editor = Window(
            BufferControl(
                buffer=self.buffer,
                input_processors=[GhostTextProcessor(lambda: self.renderer.ghost_text)],
            ),
            wrap_lines=True,
        )
        status = Window(FormattedTextControl(self.status_fragments), height=1, style="class:status")

        style = Style.from_dict({
            "ghost": "fg:#808080 italic",
            "status": "bg:#202020 fg:#bbbbbb",
            "status.accent": "bg:#202020 fg:#5fafff bold",
        })

        application: Application[None] = Application(
            layout=Layout(HSplit([editor, status]), focused_element=editor),
            key_bindings=self._build_key_bindings(),
            style=style,
            full_screen=True,
        )
        application.ttimeoutlen = ESCAPE_TIMEOUT
        return application

    def _build_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()
        suggestion_visible = Condition(self.overlay.is_visible)

        @kb.add("tab", filter=suggestion_visible)
        def _(event: KeyPressEvent) -> None:
            self.pipeline.accept()

        @kb.add("escape", filter=suggestion_visible, eager=True)
        def _(event: KeyPressEvent) -> None:
            self.pipeline.dismiss()

        @kb.add("c-t")
        def _(event: KeyPressEvent) -> None:
            self.toggle_suggestions()

        @kb.add("c-s")
        def _(event: KeyPressEvent) -> None:
            self.save()

        @kb.add("c-q")
        def _(event: KeyPressEvent) -> None:
            event.app.exit()

        return kb

    def status_fragments(self) -> StyleAndTextTuples:
        if not self.pipeline.running:
            hint = STATUS_OFF
        elif self.overlay.state is OverlayState.LOADING:
            hint = STATUS_LOADING
        elif self.overlay.is_visible():
            hint = STATUS_VISIBLE
        else:
            hint = STATUS_IDLE

        fragments: StyleAndTextTuples = [("class:status.accent", " typeahead "), ("class:status", f" {hint}")]
        if self.message:
            fragments.append(("class:status", f" · {self.message}"))
        return fragments

    # -- Actions ---------------------------------------------------------

    def toggle_suggestions(self) -> None:
        if self.pipeline.running:
            self.pipeline.stop()
            self.message = "suggestions paused"
        else:
            self.pipeline.start(self.surface)
            self.message = "suggestions on"
        self._invalidate()

    def save(self) -> bool:
        if self.path is None:
            self.message = "no file to save to"
            self._invalidate()
            return False
        try:
            self.path.write_text(self.buffer.text, encoding="utf-8")
        except OSError as e:
            logger.error("Could not save %s: %s", self.path, e)
            self.message = f"save failed: {e.strerror or e}"
            self._invalidate()
            return False
        self.message = f"saved {self.path.name}"
        self._invalidate()
        return True

    def _invalidate(self) -> None:
        app = getattr(self, "application", None)
        if app is not None and app.is_running:
            app.invalidate()

    # -- Lifecycle -------------------------------------------------------

    def _print_banner(self) -> None:
        """Print the application banner."""
        banner = Text()
        banner.append("typeahead", style="bold white")
        banner.append(" - inline writing suggestions", style="dim")
        if self.provider_label:
            banner.append(f"\nprovider: {self.provider_label}", style="cyan")
        self.console.print(Panel(banner, border_style="blue", padding=(1, 2)))

    async def run(self) -> None:
        """Run the editor until the user quits."""
        self._print_banner()
        self.pipeline.start(self.surface)
        try:
            await self.application.run_async()
        finally:
            await self._cleanup()

    async def _cleanup(self) -> None:
        """Clean up resources."""
        self.pipeline.stop()
        self.surface.detach()
        await self.service.close()
        self.console.print("[green]Goodbye![/green]")
