"""Tests for best-effort results and the error hierarchy."""

from aetheria.errors import (
    AetheriaError,
    DispatchError,
    PresetNotFoundError,
    SessionNotFoundError,
    TurnInProgressError,
)
from aetheria.results import Result


def test_success_result():
    result = Result.success("grounding text")

    assert result.ok
    assert bool(result)
    assert result.value == "grounding text"
    assert result.reason is None


def test_failure_result_carries_default_and_reason():
    result = Result.failure("", "search timed out")

    assert not result.ok
    assert not bool(result)
    assert result.value == ""
    assert result.reason == "search timed out"


def test_dispatch_error_defaults_to_500():
    assert DispatchError("upstream down").status_code == 500
    assert DispatchError("no url", status_code=400).status_code == 400


def test_lookup_errors_are_key_errors_with_readable_message():
    err = SessionNotFoundError("abc")
    assert isinstance(err, KeyError)
    assert isinstance(err, AetheriaError)
    assert str(err) == "Unknown session: abc"

    preset_err = PresetNotFoundError("persona", "nobody")
    assert str(preset_err) == "Unknown persona: nobody"
    assert preset_err.preset_id == "nobody"


def test_turn_in_progress_error_names_session():
    err = TurnInProgressError("s1")
    assert err.session_id == "s1"
    assert "s1" in str(err)
