import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional

from . import events as ev
from .schemas import InteractionState

logger = logging.getLogger(__name__)

DRAW_CONTROL = "draw"
DELETE_CONTROL = "delete"


class InteractionMode(str, Enum):
    IDLE = "idle"
    DRAW = "draw"
    DELETE = "delete"


class InteractionStateMachine:
    """
    Idle / Draw / Delete mode, panel expansion and the single-flight
    request token of one control.

    Draw and Delete are mutually exclusive: entering one leaves the other.
    Each accepted request gets a token; only the holder of the current
    token may clear the pending flag or apply its result.
    """

    def __init__(
        self,
        bus: ev.EventBus,
        collapsed: bool = True,
        error_duration_s: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._bus = bus
        self._clock = clock
        self._error_duration_s = error_duration_s
        self._mode = InteractionMode.IDLE
        self._panel_expanded = not collapsed
        self._pending = False
        self._token = 0
        self._errors: Dict[str, float] = {}

    # ------------------------------------------------------------------ queries

    @property
    def mode(self) -> InteractionMode:
        return self._mode

    @property
    def is_draw_active(self) -> bool:
        return self._mode is InteractionMode.DRAW

    @property
    def is_delete_active(self) -> bool:
        return self._mode is InteractionMode.DELETE

    @property
    def panel_expanded(self) -> bool:
        return self._panel_expanded

    @property
    def pending_request(self) -> bool:
        return self._pending

    @property
    def control_active(self) -> bool:
        """A mode is engaged while the panel is collapsed."""
        return not self._panel_expanded and self._mode is not InteractionMode.IDLE

    # -------------------------------------------------------------------- draw

    def set_draw_mode(self, active: bool) -> bool:
        """Idempotent; returns True when the mode changed."""
        if active == self.is_draw_active:
            return False
        if active:
            if self.is_delete_active:
                self.set_delete_mode(False)
            self._mode = InteractionMode.DRAW
            self._pending = False
            self._bus.fire(ev.DRAW_ACTIVATED)
        else:
            self._mode = InteractionMode.IDLE
            self._bus.fire(ev.DRAW_DEACTIVATED)
        return True

    def toggle_draw(self) -> bool:
        """Flip Draw; leaves Delete first. Returns whether Draw is now active."""
        if self.is_delete_active:
            self.set_delete_mode(False)
        self.set_draw_mode(not self.is_draw_active)
        return self.is_draw_active

    # ------------------------------------------------------------------ delete

    def set_delete_mode(self, active: bool) -> bool:
        if active == self.is_delete_active:
            return False
        if active:
            if self.is_draw_active:
                self.set_draw_mode(False)
            self._mode = InteractionMode.DELETE
            self._bus.fire(ev.DELETE_ACTIVATED)
        else:
            self._mode = InteractionMode.IDLE
            self._bus.fire(ev.DELETE_DEACTIVATED)
        return True

    def toggle_delete(self, has_results: bool) -> bool:
        """
        Flip Delete; leaves Draw first. Entering Delete with nothing to delete
        flashes the delete control instead. Returns whether Delete is now active.
        """
        if self.is_draw_active:
            self.set_draw_mode(False)
        if self.is_delete_active:
            self.set_delete_mode(False)
        elif has_results:
            self.set_delete_mode(True)
        else:
            logger.debug("Delete requested with no results")
            self.flag_error(DELETE_CONTROL)
        return self.is_delete_active

    # ------------------------------------------------------------------- panel

    def expand(self) -> None:
        self._panel_expanded = True
        self._bus.fire(ev.CONTROL_EXPANDED)

    def collapse(self) -> None:
        self._panel_expanded = False
        self._bus.fire(ev.CONTROL_COLLAPSED, active=self.control_active)

    # ------------------------------------------------------------ single-flight

    def begin_request(self) -> Optional[int]:
        """Accept a request unless one is pending. Returns its token or None."""
        if self._pending:
            return None
        self._pending = True
        self._token += 1
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def end_request(self, token: int) -> None:
        if self.is_current(token):
            self._pending = False

    def invalidate_requests(self) -> None:
        """Forget any outstanding request; its completion will be ignored."""
        self._token += 1
        self._pending = False

    # ----------------------------------------------------------- error flashes

    def flag_error(self, control: str) -> None:
        self._errors[control] = self._clock() + self._error_duration_s

    def has_error(self, control: str) -> bool:
        until = self._errors.get(control)
        if until is None:
            return False
        if self._clock() >= until:
            del self._errors[control]
            return False
        return True

    def snapshot(self) -> InteractionState:
        return InteractionState(
            panel_expanded=self._panel_expanded,
            mode=self._mode.value,
            pending_request=self._pending,
            control_active=self.control_active,
            errors=[c for c in (DRAW_CONTROL, DELETE_CONTROL) if self.has_error(c)],
        )
