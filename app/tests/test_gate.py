import pytest

from app.core.errors import GateError, InvalidTransition
from app.engine.gate import CandidateContext, Gate, GateState

JANE = CandidateContext(id="c1", name="Jane Doe", email="Jane@X.com")


def test_no_passcode_no_linkage_starts_unlocked():
    assert Gate().state == GateState.UNLOCKED


def test_passcode_exact_match_unlocks():
    gate = Gate(passcode="XyZ-42")
    assert gate.state == GateState.LOCKED_PASSCODE

    with pytest.raises(GateError) as exc:
        gate.submit_passcode("xyz-42")
    assert exc.value.field == "passcode"
    assert exc.value.message == "Invalid passcode."
    assert gate.state == GateState.LOCKED_PASSCODE

    assert gate.submit_passcode("XyZ-42") == GateState.UNLOCKED


def test_wrong_passcode_can_be_retried_without_lockout():
    gate = Gate(passcode="secret")
    for _ in range(10):
        with pytest.raises(GateError):
            gate.submit_passcode("nope")
    assert gate.submit_passcode("secret") == GateState.UNLOCKED


def test_linkage_takes_precedence_over_passcode():
    gate = Gate(passcode="secret", candidate=JANE, has_linkage=True)
    assert gate.state == GateState.LOCKED_IDENTITY

    with pytest.raises(InvalidTransition):
        gate.submit_passcode("secret")


def test_identity_matches_case_insensitively():
    gate = Gate(candidate=JANE, has_linkage=True)
    assert gate.verify_identity("jane doe", "jane@x.com") == GateState.UNLOCKED


def test_identity_mismatch_keeps_gate_locked():
    gate = Gate(candidate=JANE, has_linkage=True)

    with pytest.raises(GateError) as exc:
        gate.verify_identity("jane doe", "jane@y.com")
    assert exc.value.field == "email"
    assert gate.state == GateState.LOCKED_IDENTITY


def test_identity_required_without_record():
    gate = Gate(identity_required=True)
    assert gate.state == GateState.LOCKED_IDENTITY

    with pytest.raises(GateError) as exc:
        gate.verify_identity("anyone", "a@b.com")
    assert exc.value.message == "Candidate record not found."


def test_unlocked_gate_ignores_further_entries():
    gate = Gate()
    assert gate.submit_passcode("whatever") == GateState.UNLOCKED
    assert gate.verify_identity("x", "y@z.com") == GateState.UNLOCKED
