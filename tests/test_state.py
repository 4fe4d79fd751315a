from app.state import AttemptRecord, Prompt, SessionState, Verdict, VerdictStatus, UNTYPED


def test_prompt_keeps_every_whitespace_character():
    p = Prompt.from_text("  a\tb\n\n c ", id="x", title="X")
    assert p.length() == 11
    assert p.character_at(2) == "a"
    assert p.character_at(3) == "\t"
    assert p.character_at(5) == "\n"
    assert p.text == "  a\tb\n\n c "


def test_prompt_splits_by_code_point():
    p = Prompt.from_text("héllo ✓")
    assert len(p) == 7
    assert p.character_at(6) == "✓"


def test_invalid_text_degrades_to_empty_prompt():
    assert Prompt.from_text(None).length() == 0
    assert Prompt.from_text(42).length() == 0
    assert Prompt.from_problem({"id": "p9", "title": "No text"}).length() == 0


def test_from_problem_prefers_code_field():
    p = Prompt.from_problem({"id": "p1", "title": "T", "text": "abc", "code": "def f():"})
    assert p.id == "p1"
    assert p.text == "def f():"


def test_fresh_state_has_one_untyped_verdict_per_char():
    s = SessionState.fresh(Prompt.from_text("abc"))
    assert s.position == 0
    assert s.verdicts == (UNTYPED, UNTYPED, UNTYPED)
    assert s.start_ms is None
    assert not s.finished


def test_typed_text_and_counts():
    s = SessionState(
        position=2,
        verdicts=(Verdict(VerdictStatus.CORRECT, "a"), Verdict(VerdictStatus.INCORRECT, "x"), UNTYPED),
    )
    assert s.typed_count == 2
    assert s.correct_count == 1
    assert s.typed_text() == "ax"


def test_attempt_payload_uses_wire_names():
    a = AttemptRecord(user="ada", problem_id="p1", wpm=40, accuracy=97, raw_text="hi", duration_ms=1234)
    assert a.to_payload() == {
        "user": "ada",
        "problemId": "p1",
        "wpm": 40,
        "accuracy": 97,
        "rawText": "hi",
        "durationMs": 1234,
    }


def test_from_problem_null_code_falls_back_to_text():
    p = Prompt.from_problem({"id": "p1", "title": "T", "code": None, "text": "abc"})
    assert p.text == "abc"
