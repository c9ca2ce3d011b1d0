import threading

import pytest

from app.core.errors import SubmissionError
from app.engine.gate import CandidateContext
from app.engine.submission import AnswerSlot, Linkage, SubmissionAssembler

ANSWERS = [AnswerSlot("q1", "Your name?", "Jane"), AnswerSlot("q3", "Pick many", ["X", "Z"])]


def make_assembler(writer, **kwargs):
    return SubmissionAssembler("a1", "Screening", writer, clock=lambda: 1000.0, **kwargs)


def test_payload_without_candidate_uses_placeholders():
    payload = make_assembler(lambda p: "s1").build_payload(ANSWERS, started_at=958.4)

    assert payload["candidate_name"] == "N/A"
    assert payload["candidate_email"] == "N/A"
    assert payload["candidate_id"] is None
    assert payload["college_id"] is None
    assert payload["college_candidate_id"] is None
    assert payload["time_taken"] == 41
    assert payload["answers"][1] == {"question_id": "q3", "question_text": "Pick many", "answer": ["X", "Z"]}


def test_payload_for_applicant_link():
    candidate = CandidateContext(id="c1", name="Jane Doe", email="jane@x.com")
    assembler = make_assembler(lambda p: "s1", candidate=candidate, linkage=Linkage(candidate_id="c1"))
    payload = assembler.build_payload(ANSWERS, started_at=900.0)

    assert payload["candidate_id"] == "c1"
    assert payload["college_candidate_id"] is None
    assert payload["candidate_name"] == "Jane Doe"


def test_payload_for_college_link():
    candidate = CandidateContext(id="cc1", name="Ravi", email="ravi@college.edu", college_id="col1")
    assembler = make_assembler(
        lambda p: "s1",
        candidate=candidate,
        linkage=Linkage(college_id="col1", candidate_id="cc1"),
    )
    payload = assembler.build_payload(ANSWERS, started_at=900.0)

    assert payload["college_id"] == "col1"
    assert payload["college_candidate_id"] == "cc1"
    assert payload["candidate_id"] is None


def test_submit_writes_once():
    writes = []
    assembler = make_assembler(lambda p: writes.append(p) or "s1")

    assert assembler.submit(ANSWERS, 990.0) == "s1"
    assert assembler.submit(ANSWERS, 990.0) is None
    assert assembler.finished
    assert len(writes) == 1


def test_rejected_write_can_be_retried():
    calls = []

    def flaky(payload):
        calls.append(payload)
        if len(calls) == 1:
            raise SubmissionError("write rejected")
        return "s2"

    assembler = make_assembler(flaky)

    with pytest.raises(SubmissionError):
        assembler.submit(ANSWERS, 990.0)
    assert not assembler.in_flight
    assert not assembler.finished

    assert assembler.submit(ANSWERS, 990.0) == "s2"
    assert len(calls) == 2


def test_submit_while_in_flight_is_ignored():
    entered = threading.Event()
    release = threading.Event()
    writes = []

    def slow(payload):
        writes.append(payload)
        entered.set()
        release.wait(timeout=5)
        return "s1"

    assembler = make_assembler(slow)
    results = []
    worker = threading.Thread(target=lambda: results.append(assembler.submit(ANSWERS, 990.0)))
    worker.start()
    entered.wait(timeout=5)

    assert assembler.submit(ANSWERS, 990.0) is None

    release.set()
    worker.join()
    assert results == ["s1"]
    assert len(writes) == 1
