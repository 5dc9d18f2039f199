"""
Debounced auto-save of an in-progress survey response.

The saver is a small explicit state machine driven by edits:

    Idle --edit--> PendingSave(deadline) --deadline--> Saving --done--> Idle

An edit while PendingSave moves the deadline. An edit while Saving is only
remembered; once the save finishes, a new debounce cycle starts if the
newest draft differs from what was just saved. At most one save request is
in flight at any time.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

SAVED_DISPLAY_SECONDS = 2.0
ERROR_DISPLAY_SECONDS = 3.0


class SaveStatus(str, Enum):
    """Indicator shown next to the survey form."""
    IDLE = "idle"
    TYPING = "typing"
    SAVING = "saving"
    SAVED = "saved"
    ERROR = "error"


@dataclass(frozen=True)
class Draft:
    """The auto-saved part of a response. Compared by value."""

    overall_rating: Optional[int] = None
    open_feedback: Optional[str] = None

    def as_payload(self) -> dict[str, Any]:
        # completed_at is never part of an auto-save
        return {"overall_rating": self.overall_rating, "open_feedback": self.open_feedback}


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PendingSave:
    deadline: float


@dataclass(frozen=True)
class Saving:
    draft: Draft


SaverState = Union[Idle, PendingSave, Saving]


class SurveyAutoSaver:
    """Save a draft once edits have been quiet for ``debounce_seconds``."""

    def __init__(
            self,
            save: Callable[[Draft], Awaitable[Any]],
            initial: Draft,
            debounce_seconds: float = 5.0,
            saved_display_seconds: float = SAVED_DISPLAY_SECONDS,
            error_display_seconds: float = ERROR_DISPLAY_SECONDS,
            on_status_change: Optional[Callable[[SaveStatus], None]] = None,
    ):
        self._save = save
        self.debounce_seconds = debounce_seconds
        self.saved_display_seconds = saved_display_seconds
        self.error_display_seconds = error_display_seconds
        self._on_status_change = on_status_change

        self.state: SaverState = Idle()
        self.status = SaveStatus.IDLE
        self._snapshot = initial
        self._latest = initial
        self._timer: Optional[asyncio.Task] = None
        self._status_reset: Optional[asyncio.TimerHandle] = None
        self._closed = False

    @property
    def latest(self) -> Draft:
        return self._latest

    def update(self, draft: Draft) -> None:
        """Record an edit; schedules (or reschedules) a save if the draft changed."""
        if self._closed:
            return
        self._latest = draft

        if isinstance(self.state, Saving):
            return
        if draft == self._snapshot:
            return

        self._snapshot = draft
        self._schedule()

    def cancel_pending(self) -> None:
        """Drop a scheduled save that has not started yet."""
        if isinstance(self.state, PendingSave):
            self._cancel_timer()
            self.state = Idle()
            self._set_status(SaveStatus.IDLE)

    def acknowledge(self, draft: Draft, succeeded: bool) -> None:
        """Reflect a save made outside the saver (the manual Save action)."""
        if succeeded:
            self._snapshot = draft
            if self._latest == draft:
                self.cancel_pending()
            self._flash(SaveStatus.SAVED, self.saved_display_seconds)
        else:
            self._flash(SaveStatus.ERROR, self.error_display_seconds)

    async def close(self) -> None:
        """Cancel every timer, including a save in flight."""
        self._closed = True
        if self._status_reset is not None:
            self._status_reset.cancel()
            self._status_reset = None
        timer = self._timer
        self._cancel_timer()
        if timer is not None:
            try:
                await timer
            except asyncio.CancelledError:
                pass
        self.state = Idle()

    def _schedule(self) -> None:
        loop = asyncio.get_running_loop()
        self._cancel_timer()
        self.state = PendingSave(deadline=loop.time() + self.debounce_seconds)
        self._set_status(SaveStatus.TYPING)
        self._timer = loop.create_task(self._save_after_deadline())

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _save_after_deadline(self) -> None:
        loop = asyncio.get_running_loop()
        while isinstance(self.state, PendingSave) and loop.time() < self.state.deadline:
            await asyncio.sleep(self.state.deadline - loop.time())

        draft = self._latest
        self.state = Saving(draft)
        self._set_status(SaveStatus.SAVING)
        try:
            await self._save(draft)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Auto-save failed: {e}")
            self._finish_save(draft, SaveStatus.ERROR, self.error_display_seconds)
        else:
            self._finish_save(draft, SaveStatus.SAVED, self.saved_display_seconds)

    def _finish_save(self, draft: Draft, status: SaveStatus, display_seconds: float) -> None:
        self._timer = None
        self.state = Idle()
        self._snapshot = draft
        self._flash(status, display_seconds)

        if self._latest != draft and not self._closed:
            self._snapshot = self._latest
            self._schedule()

    def _flash(self, status: SaveStatus, seconds: float) -> None:
        if self._status_reset is not None:
            self._status_reset.cancel()
            self._status_reset = None
        self._set_status(status)
        self._status_reset = asyncio.get_running_loop().call_later(seconds, self._reset_status, status)

    def _reset_status(self, shown: SaveStatus) -> None:
        self._status_reset = None
        if self.status == shown:
            self._set_status(SaveStatus.IDLE)

    def _set_status(self, status: SaveStatus) -> None:
        if self._status_reset is not None and status != self.status:
            self._status_reset.cancel()
            self._status_reset = None
        self.status = status
        if self._on_status_change is not None:
            self._on_status_change(status)
