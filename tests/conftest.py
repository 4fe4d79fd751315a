import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from app.state import Prompt  # noqa: E402
from services.typing_engine import TypingEngine  # noqa: E402
from helpers import FakeClock, RecordingSubmitter  # noqa: E402


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def submitter():
    return RecordingSubmitter()


@pytest.fixture
def make_engine(clock, submitter):
    def _make(text: str, **kw) -> TypingEngine:
        kw.setdefault("submitter", submitter)
        return TypingEngine(Prompt.from_text(text, id="p1", title="T"), user="ada", clock=clock, **kw)
    return _make
