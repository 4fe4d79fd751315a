import logging

from app.state import Prompt, SessionState, SubmissionOutcome
from services.input_reducer import BACKSPACE, ESCAPE, PASTE, TAB
from services.typing_engine import TypingEngine

from helpers import RecordingSubmitter, type_text


def test_scenario_one_right_one_wrong(make_engine, submitter, clock):
    finished = []
    engine = make_engine("ab", on_finish=finished.append)
    engine.handle_key("a")
    assert engine.state.position == 1
    clock.advance(500)
    result = engine.handle_key("c")

    assert result.attempt is not None
    attempt = result.attempt
    assert attempt.raw_text == "ac"
    assert attempt.accuracy == 50
    assert attempt.duration_ms == 500
    assert attempt.user == "ada"
    assert attempt.problem_id == "p1"
    assert submitter.attempts == [attempt]
    assert finished == [attempt]
    assert engine.finished


def test_perfect_run_round_trips_the_prompt(make_engine):
    text = "for i in range(3):\n    print(i)"
    engine = make_engine(text)
    type_text(engine, text)
    assert engine.last_attempt.accuracy == 100
    assert engine.last_attempt.raw_text == text


def test_wpm_formula_on_completion(make_engine, clock):
    engine = make_engine("x" * 25)
    engine.handle_key("x")
    for _ in range(24):
        clock.advance(2500)
        engine.handle_key("x")
    assert engine.last_attempt.duration_ms == 60000
    assert engine.last_attempt.wpm == 5


def test_no_double_submission(make_engine, submitter):
    finished = []
    engine = make_engine("a", on_finish=finished.append)
    engine.handle_key("a")
    for key in ("<LEFT>", "<HOME>", "a", BACKSPACE, TAB, PASTE):
        result = engine.handle_key(key)
        assert result.attempt is None
    assert len(submitter.attempts) == 1
    assert len(finished) == 1


def test_tab_completes_once_after_all_spaces(make_engine, submitter):
    engine = make_engine("    ")
    result = engine.handle_key(TAB)
    assert result.consumed
    assert result.changed == (0, 1, 2, 3)
    assert result.attempt is not None
    assert len(submitter.attempts) == 1
    assert len(engine.samples) == 1


def test_empty_prompt_completes_without_submission(clock, submitter):
    finished = []
    engine = TypingEngine(Prompt.from_text(""), submitter=submitter, on_finish=finished.append, clock=clock)
    assert engine.finished
    assert submitter.attempts == []
    [attempt] = finished
    assert attempt.duration_ms == 0
    assert attempt.accuracy == 100
    assert attempt.wpm == 0
    assert attempt.raw_text == ""


def test_reset_twice_equals_reset_once(make_engine):
    engine = make_engine("abc")
    type_text(engine, "ax")
    engine.handle_key(ESCAPE)
    once = engine.state
    result = engine.handle_key(ESCAPE)
    assert result.reset
    assert engine.state == once == SessionState.fresh(engine.prompt)
    assert engine.samples == []


def test_reset_after_completion_allows_a_new_attempt(make_engine, submitter):
    engine = make_engine("a")
    engine.handle_key("a")
    engine.reset()
    assert not engine.finished
    engine.handle_key("a")
    assert len(submitter.attempts) == 2


def test_loading_a_new_prompt_discards_the_session(make_engine):
    engine = make_engine("abc")
    type_text(engine, "ab")
    engine.load(Prompt.from_text("xyz", id="p2"))
    assert engine.state == SessionState.fresh(engine.prompt)
    assert engine.prompt.id == "p2"


def test_auto_submit_off_still_notifies(make_engine, submitter):
    finished = []
    engine = make_engine("a", auto_submit=False, on_finish=finished.append)
    engine.handle_key("a")
    assert submitter.attempts == []
    assert len(finished) == 1


def test_submission_failure_is_logged_and_not_retried(make_engine, caplog):
    failing = RecordingSubmitter(fail=True)
    engine = make_engine("ab", submitter=failing)
    with caplog.at_level(logging.ERROR, logger="services.typing_engine"):
        type_text(engine, "ab")
        engine.handle_key("x")
    assert engine.finished
    assert len(failing.attempts) == 1
    assert "Submitting attempt" in caplog.text


def test_rejected_submission_is_logged(make_engine, caplog):
    class Rejecting:
        def submit_attempt(self, attempt):
            return SubmissionOutcome(success=False, error="cheat_detected")

    engine = make_engine("a", submitter=Rejecting())
    with caplog.at_level(logging.WARNING, logger="services.typing_engine"):
        engine.handle_key("a")
    assert "cheat_detected" in caplog.text


def test_callback_errors_do_not_escape(make_engine):
    def explode(_):
        raise ValueError("ui gone")

    engine = make_engine("a", on_finish=explode)
    result = engine.handle_key("a")
    assert result.attempt is not None
    assert engine.finished


def test_live_metrics(make_engine, clock):
    engine = make_engine("abcdefghij")
    assert engine.live_metrics().accuracy == 100
    assert engine.live_metrics().wpm == 0
    type_text(engine, "abcdX")
    clock.advance(6000)
    m = engine.live_metrics()
    assert m.typed == 5
    assert m.accuracy == 80
    assert m.elapsed_ms == 6000
    assert m.wpm == 10


def test_ignored_keys_are_not_consumed(make_engine):
    engine = make_engine("abc")
    before = engine.state
    result = engine.handle_key("<DOWN>")
    assert not result.consumed
    assert engine.state is before
    assert engine.state.start_ms is None


def test_user_name_is_sanitised(clock):
    engine = TypingEngine(Prompt.from_text("a"), user="  ", clock=clock)
    assert engine.user == "anon"
