from typing import Awaitable, Callable

import structlog

logger = structlog.get_logger()

MOODS = ("amazing", "great", "okay", "struggling", "tired", "focused")
NOTES_MAX_LENGTH = 200


class CheckInDialog:
    """State of the daily check-in prompt.

    Submitting and skipping both record a check-in; skipping just sends an
    empty mood and notes. A failed submission leaves the dialog open.
    """

    def __init__(self, on_check_in: Callable[[str, str], Awaitable[object]]):
        self.on_check_in = on_check_in
        self.is_open = False
        self.is_submitting = False
        self.selected_mood = ""
        self.notes = ""

    def open(self) -> None:
        if self.is_open:
            return
        self.selected_mood = ""
        self.notes = ""
        self.is_open = True

    def close(self) -> None:
        self.is_open = False

    def select_mood(self, mood: str) -> None:
        if mood not in MOODS:
            raise ValueError(f"Unknown mood: {mood!r}")
        self.selected_mood = mood

    def set_notes(self, text: str) -> None:
        self.notes = text[:NOTES_MAX_LENGTH]

    @property
    def can_submit(self) -> bool:
        return bool(self.selected_mood) and not self.is_submitting

    async def submit(self) -> bool:
        if not self.can_submit:
            return False
        await self._send(self.selected_mood, self.notes)
        return True

    async def skip(self) -> bool:
        if self.is_submitting:
            return False
        await self._send("", "")
        return True

    async def _send(self, mood: str, notes: str) -> None:
        self.is_submitting = True
        try:
            await self.on_check_in(mood, notes)
        except Exception:
            logger.warning("check_in_submit_failed", mood=mood)
            raise
        else:
            self.close()
        finally:
            self.is_submitting = False
