import pytest

from pluto.client.dialog import MOODS, NOTES_MAX_LENGTH, CheckInDialog


class Recorder:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def __call__(self, mood, notes):
        self.sent.append((mood, notes))
        if self.error:
            raise self.error
        return {"success": True}


@pytest.fixture
def recorder():
    return Recorder()


@pytest.fixture
def dialog(recorder):
    d = CheckInDialog(recorder)
    d.open()
    return d


def test_open_resets_form(dialog):
    dialog.select_mood("great")
    dialog.set_notes("hello")
    dialog.close()
    dialog.open()
    assert dialog.is_open
    assert dialog.selected_mood == ""
    assert dialog.notes == ""


def test_moods_are_fixed(dialog):
    assert MOODS == ("amazing", "great", "okay", "struggling", "tired", "focused")
    with pytest.raises(ValueError):
        dialog.select_mood("ecstatic")


def test_notes_are_truncated(dialog):
    dialog.set_notes("n" * (NOTES_MAX_LENGTH + 50))
    assert len(dialog.notes) == NOTES_MAX_LENGTH


@pytest.mark.asyncio
async def test_submit_needs_a_mood(dialog, recorder):
    assert dialog.can_submit is False
    assert await dialog.submit() is False
    assert recorder.sent == []
    assert dialog.is_open


@pytest.mark.asyncio
async def test_submit_sends_and_closes(dialog, recorder):
    dialog.select_mood("focused")
    dialog.set_notes("deep work")
    assert await dialog.submit() is True
    assert recorder.sent == [("focused", "deep work")]
    assert dialog.is_open is False
    assert dialog.is_submitting is False


@pytest.mark.asyncio
async def test_skip_sends_empty_check_in(dialog, recorder):
    dialog.select_mood("tired")
    assert await dialog.skip() is True
    assert recorder.sent == [("", "")]
    assert dialog.is_open is False


@pytest.mark.asyncio
async def test_failure_keeps_dialog_open():
    recorder = Recorder(error=RuntimeError("Failed to check in"))
    dialog = CheckInDialog(recorder)
    dialog.open()
    dialog.select_mood("okay")

    with pytest.raises(RuntimeError):
        await dialog.submit()
    assert dialog.is_open
    assert dialog.is_submitting is False
    assert dialog.selected_mood == "okay"


def test_reopening_keeps_what_was_typed(dialog):
    dialog.select_mood("amazing")
    dialog.set_notes("almost done")
    dialog.open()
    assert dialog.selected_mood == "amazing"
    assert dialog.notes == "almost done"
