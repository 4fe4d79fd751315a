from app.state import AttemptRecord
from services.typing_engine import TypingEngine


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class RecordingSubmitter:
    def __init__(self, fail: bool = False):
        self.attempts = []
        self.fail = fail

    def submit_attempt(self, attempt: AttemptRecord):
        self.attempts.append(attempt)
        if self.fail:
            raise ConnectionError("server down")
        return None


def type_text(engine: TypingEngine, text: str) -> None:
    for ch in text:
        engine.handle_key(ch)
