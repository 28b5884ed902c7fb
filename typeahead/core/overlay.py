"""Presentation state machine for the ghost-text suggestion overlay.

States move ``hidden -> loading -> visible -> accepting -> hidden``; loading and
visible may also go straight back to hidden. Hiding is a two-step handshake:
``hide()`` flips the state and marks a hide as pending, the renderer fades the
node out, and whichever arrives first of the fade-finished callback or the
fallback timer finalises the hide. Later signals for the same hide are ignored,
and a new ``show``/``show_loading`` supersedes a pending hide entirely.
"""

import asyncio
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from functools import partial

from .surface import FontMetrics, Rect, TextSurface

logger = logging.getLogger("typeahead.overlay")

DEFAULT_FRAME_INTERVAL = 1 / 60
DEFAULT_HIDE_FALLBACK = 0.2
DEFAULT_ACCEPT_DURATION = 0.13

_WHITESPACE_RUN = re.compile(r"\s+")

AcceptHandler = Callable[[str], None]


class OverlayState(str, Enum):
    HIDDEN = "hidden"
    LOADING = "loading"
    VISIBLE = "visible"
    ACCEPTING = "accepting"


class OverlayRenderer(ABC):
    """Host-side drawing of the overlay node."""

    @abstractmethod
    def render(self, state: OverlayState, text: str) -> None:
        """Show the node styled for `state` with `text` as its content."""
        pass

    @abstractmethod
    def move_to(self, anchor: Rect) -> None:
        """Place the node right after the cursor rect `anchor`."""
        pass

    @abstractmethod
    def apply_font(self, metrics: FontMetrics) -> None:
        """Match the node's typography to the surrounding text."""
        pass

    @abstractmethod
    def fade_out(self, on_finished: Callable[[], None]) -> None:
        """Start the hide animation and call `on_finished` when it completes.

        The callback may never arrive (dropped frames, detached nodes); the
        overlay does not depend on it.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Hide the node and drop its content."""
        pass


def sanitize_suggestion(text: str) -> str:
    """Collapse whitespace runs (including newlines) and drop leading space."""
    return _WHITESPACE_RUN.sub(" ", text).lstrip()


class SuggestionOverlay:
    """Owns OverlayState; every mutation goes through the methods below."""

    def __init__(
        self,
        renderer: OverlayRenderer,
        *,
        frame_interval: float = DEFAULT_FRAME_INTERVAL,
        hide_fallback: float = DEFAULT_HIDE_FALLBACK,
        accept_duration: float = DEFAULT_ACCEPT_DURATION,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self._renderer = renderer
        self._frame_interval = frame_interval
        self._hide_fallback = hide_fallback
        self._accept_duration = accept_duration
        self._loop = loop

        self._state = OverlayState.HIDDEN
        self._text = ""
        self._surface: TextSurface | None = None
        self._accept_handler: AcceptHandler | None = None

        self._hide_pending = False
        self._hide_token = 0
        self._frame_handle: asyncio.TimerHandle | None = None
        self._fallback_handle: asyncio.TimerHandle | None = None
        self._accept_handle: asyncio.TimerHandle | None = None

    # -- Wiring ----------------------------------------------------------

    def attach(self, surface: TextSurface | None) -> None:
        """Track the cursor of `surface` for positioning."""
        self._surface = surface

    def set_accept_handler(self, handler: AcceptHandler | None) -> None:
        """Register the callable that receives accepted text."""
        self._accept_handler = handler

    # -- Queries ---------------------------------------------------------

    @property
    def state(self) -> OverlayState:
        return self._state

    @property
    def hide_pending(self) -> bool:
        return self._hide_pending

    def is_visible(self) -> bool:
        return self._state is OverlayState.VISIBLE

    def get_text(self) -> str:
        return self._text if self._state is OverlayState.VISIBLE else ""

    # -- Transitions -----------------------------------------------------

    def show_loading(self) -> None:
        self._supersede_pending()
        self._text = ""
        self._state = OverlayState.LOADING
        self._renderer.render(OverlayState.LOADING, "")
        self._reposition()
        self._start_tracking()

    def show(self, text: str) -> None:
        sanitized = sanitize_suggestion(text or "")
        if not sanitized.strip():
            return

        self._supersede_pending()
        self._text = sanitized
        self._state = OverlayState.VISIBLE
        self._renderer.render(OverlayState.VISIBLE, sanitized)
        self._reposition()
        if self._surface is not None:
            metrics = self._surface.font_metrics()
            if metrics is not None:
                self._renderer.apply_font(metrics)
        self._start_tracking()

    def hide(self) -> None:
        if self._state in (OverlayState.HIDDEN, OverlayState.ACCEPTING):
            return

        self._state = OverlayState.HIDDEN
        self._stop_tracking()
        self._hide_pending = True
        self._hide_token += 1
        token = self._hide_token
        # Armed before fade_out so a synchronous completion can cancel it.
        self._fallback_handle = self._get_loop().call_later(
            self._hide_fallback, partial(self._finalize_hide, token, "fallback")
        )
        self._renderer.fade_out(partial(self._finalize_hide, token, "animation"))

    def accept(self) -> bool:
        """Accept the visible suggestion. Returns False when nothing is visible."""
        if self._state is not OverlayState.VISIBLE or not self._text:
            return False

        text = self._text
        self._state = OverlayState.ACCEPTING
        self._stop_tracking()
        self._renderer.render(OverlayState.ACCEPTING, text)
        self._accept_handle = self._get_loop().call_later(self._accept_duration, self._finish_accept)

        if self._accept_handler is not None:
            self._accept_handler(text)
        return True

    # -- Internals -------------------------------------------------------

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    def _supersede_pending(self) -> None:
        if self._hide_pending:
            self._hide_pending = False
            self._hide_token += 1
        for handle in (self._fallback_handle, self._accept_handle):
            if handle is not None:
                handle.cancel()
        self._fallback_handle = None
        self._accept_handle = None

    def _finalize_hide(self, token: int, source: str) -> None:
        if token != self._hide_token or not self._hide_pending:
            return
        self._hide_pending = False
        if self._fallback_handle is not None:
            self._fallback_handle.cancel()
            self._fallback_handle = None
        self._text = ""
        self._renderer.clear()
        logger.debug("Overlay hide finalised by %s", source)

    def _finish_accept(self) -> None:
        self._accept_handle = None
        if self._state is not OverlayState.ACCEPTING:
            return
        self._state = OverlayState.HIDDEN
        self._text = ""
        self._renderer.clear()

    def _reposition(self) -> None:
        if self._surface is None:
            return
        anchor = self._surface.cursor_rect()
        if anchor is None or (anchor.width == 0 and anchor.height == 0):
            return
        self._renderer.move_to(anchor)

    def _start_tracking(self) -> None:
        self._stop_tracking()
        self._frame_handle = self._get_loop().call_later(self._frame_interval, self._on_frame)

    def _stop_tracking(self) -> None:
        if self._frame_handle is not None:
            self._frame_handle.cancel()
            self._frame_handle = None

    def _on_frame(self) -> None:
        self._frame_handle = None
        if self._state not in (OverlayState.LOADING, OverlayState.VISIBLE):
            return
        self._reposition()
        self._frame_handle = self._get_loop().call_later(self._frame_interval, self._on_frame)
