import io
import threading

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.errors import (
    AlreadySubmitted,
    GateError,
    InvalidTransition,
    NotFoundError,
    StorageError,
    UploadError,
    ValidationFailed,
)
from app.engine.attempt import AttemptPhase, AttemptRegistry, AttemptSession
from app.engine.sections import load_assessment
from app.engine.uploads import UploadStatus
from app.models.submission import AssessmentSubmission
from app.schemas.attempt import AttemptStartRequest


class FailingStore:
    def upload(self, path, stream, on_progress=None):
        on_progress(10, 100)
        raise StorageError("disk full")

    def public_url(self, path):
        raise AssertionError("not reached")


def make_session(row, writer=None, clock=None, **kwargs):
    if clock:
        kwargs["clock"] = clock
    return AttemptSession(load_assessment(row), writer or (lambda p: "s1"), **kwargs)


# -------------------------
# Session (no database)
# -------------------------

def test_phases_follow_gate_and_start(make_assessment):
    session = make_session(make_assessment(passcode="open-sesame"))
    assert session.phase == AttemptPhase.LOCKED

    with pytest.raises(InvalidTransition):
        session.start()
    with pytest.raises(InvalidTransition):
        session.submit()

    with pytest.raises(GateError):
        session.submit_passcode("wrong")
    session.submit_passcode("open-sesame")
    assert session.phase == AttemptPhase.READY

    assert session.start() is None
    assert session.phase == AttemptPhase.ANSWERING

    assert session.submit() == "s1"
    assert session.phase == AttemptPhase.FINISHED
    assert session.submit() is None


def test_answers_are_kept_across_sections(make_assessment):
    session = make_session(make_assessment())
    session.start()

    session.set_answer("q1", "Jane")
    session.set_answer("q2", "B")
    session.next_section()
    session.set_answer("q3", ["Z", "X", "Z"])
    session.previous_section()

    assert session.answer_at(0).answer == "Jane"
    session.next_section()
    assert session.answer_at(0).answer == ["Z", "X"]
    assert session.snapshot()["primary_action"] == "submit"


def test_answer_validation(make_assessment):
    session = make_session(make_assessment())
    session.start()

    with pytest.raises(ValidationFailed):
        session.set_answer("q2", "D")
    with pytest.raises(ValidationFailed):
        session.set_answer("q3", "X")
    with pytest.raises(ValidationFailed):
        session.set_answer("q4", "http://elsewhere/cv.pdf")
    with pytest.raises(NotFoundError):
        session.set_answer("missing", "x")


def test_start_requires_questions(make_assessment):
    session = make_session(make_assessment(sections=[]))
    with pytest.raises(ValidationFailed):
        session.start()


def test_upload_success_fills_answer_slot(make_assessment, store):
    session = make_session(make_assessment())
    session.start()

    url = session.upload("q4", "../cv.pdf", io.BytesIO(b"%PDF-1.4 resume"), store)

    assert url.startswith("http://testserver/files/assessment-uploads/")
    assert url.endswith("-cv.pdf")
    tracker = session.uploads["q4"]
    assert tracker.state.status == UploadStatus.SUCCESS
    assert not tracker.input_enabled
    assert session.answers[3].answer == url

    with pytest.raises(UploadError):
        session.upload("q4", "cv2.pdf", io.BytesIO(b"again"), store)


def test_upload_failure_then_retry(make_assessment, store):
    session = make_session(make_assessment())
    session.start()

    with pytest.raises(UploadError):
        session.upload("q4", "cv.pdf", io.BytesIO(b"data"), FailingStore())

    tracker = session.uploads["q4"]
    assert tracker.state.status == UploadStatus.ERROR
    assert tracker.state.error == "disk full"
    assert session.answers[3].answer == ""

    url = session.upload("q4", "cv.pdf", io.BytesIO(b"data"), store)
    assert session.answers[3].answer == url


def test_upload_unexpected_error_leaves_input_retryable(make_assessment, store):
    session = make_session(make_assessment())
    session.start()

    closed = io.BytesIO(b"data")
    closed.close()
    with pytest.raises(ValueError):
        session.upload("q4", "cv.pdf", closed, store)

    tracker = session.uploads["q4"]
    assert tracker.state.status == UploadStatus.ERROR
    assert tracker.input_enabled

    url = session.upload("q4", "cv.pdf", io.BytesIO(b"data"), store)
    assert session.answers[3].answer == url


def test_upload_rejected_for_text_question(make_assessment, store):
    session = make_session(make_assessment())
    session.start()
    with pytest.raises(ValidationFailed):
        session.upload("q1", "a.txt", io.BytesIO(b"x"), store)


def test_timeout_and_manual_submit_write_once(make_assessment):
    entered = threading.Event()
    release = threading.Event()
    writes = []

    def slow_writer(payload):
        writes.append(payload)
        entered.set()
        release.wait(timeout=5)
        return "s1"

    session = make_session(make_assessment(time_limit=1), writer=slow_writer)
    timer = session.start()
    assert timer.remaining == 60

    session.set_answer("q1", "Jane")

    def run_out_clock():
        for _ in range(60):
            timer.tick()

    expiry = threading.Thread(target=run_out_clock)
    expiry.start()
    entered.wait(timeout=5)

    # Candidate presses submit while the timeout write is in flight
    assert session.submit() is None

    release.set()
    expiry.join()

    assert len(writes) == 1
    assert writes[0]["answers"][0]["answer"] == "Jane"
    assert session.phase == AttemptPhase.FINISHED


def test_time_taken_from_clock(make_assessment):
    now = [1000.0]
    writes = []
    session = make_session(make_assessment(), writer=lambda p: writes.append(p) or "s1", clock=lambda: now[0])

    session.start()
    now[0] = 1125.9
    session.submit()

    assert writes[0]["time_taken"] == 125


# -------------------------
# Service (database)
# -------------------------

def test_open_attempt_for_applicant_and_persist(attempt_service, db, make_assessment, applicant):
    row = make_assessment()
    session = attempt_service.open_attempt(
        db, AttemptStartRequest(assessment_id=row.id, candidate_id=applicant.id)
    )
    assert session.gate.state.value == "locked_identity"

    session.verify_identity("JANE DOE", "jane@x.com")
    session.start()
    session.set_answer("q2", "B")
    submission_id = attempt_service.submit(session.id)

    stored = db.query(AssessmentSubmission).one()
    assert str(stored.id) == submission_id
    assert stored.candidate_id == applicant.id
    assert stored.college_candidate_id is None
    assert stored.candidate_name == "Jane Doe"
    assert stored.score == 5
    assert stored.max_score == 8


def test_open_attempt_for_college_candidate(attempt_service, db, make_assessment, college, college_candidate):
    row = make_assessment()
    session = attempt_service.open_attempt(
        db,
        AttemptStartRequest(assessment_id=row.id, candidate_id=college_candidate.id, college_id=college.id),
    )
    session.verify_identity("Ravi Kumar", "RAVI@college.edu")
    session.start()
    attempt_service.submit(session.id)

    stored = db.query(AssessmentSubmission).one()
    assert stored.college_id == college.id
    assert stored.college_candidate_id == college_candidate.id
    assert stored.candidate_id is None

    with pytest.raises(AlreadySubmitted):
        attempt_service.open_attempt(
            db,
            AttemptStartRequest(assessment_id=row.id, candidate_id=college_candidate.id, college_id=college.id),
        )


def test_open_attempt_unknown_candidate(attempt_service, db, make_assessment):
    row = make_assessment()
    with pytest.raises(NotFoundError) as exc:
        attempt_service.open_attempt(
            db,
            AttemptStartRequest(assessment_id=row.id, candidate_id="00000000-0000-0000-0000-000000000001"),
        )
    assert exc.value.message == "Candidate not found for this assessment link."


def test_anonymous_attempt_stores_placeholders(attempt_service, db, make_assessment):
    row = make_assessment()
    session = attempt_service.open_attempt(db, AttemptStartRequest(assessment_id=row.id))
    assert session.phase == AttemptPhase.READY
    assert len(attempt_service.registry) == 1

    session.start()
    attempt_service.submit(session.id)

    stored = db.query(AssessmentSubmission).one()
    assert stored.candidate_name == "N/A"
    assert stored.candidate_email == "N/A"
    assert stored.candidate_id is None
    assert len(attempt_service.registry) == 0


def test_second_attempt_of_same_candidate_refused_on_submit(attempt_service, db, make_assessment, applicant):
    row = make_assessment()
    sessions = []
    for _ in range(2):
        session = attempt_service.open_attempt(
            db, AttemptStartRequest(assessment_id=row.id, candidate_id=applicant.id)
        )
        session.verify_identity("Jane Doe", "jane@x.com")
        session.start()
        sessions.append(session)

    attempt_service.submit(sessions[0].id)
    with pytest.raises(AlreadySubmitted):
        attempt_service.submit(sessions[1].id)

    assert db.query(AssessmentSubmission).count() == 1
    assert len(attempt_service.registry) == 0


def test_one_submission_per_linked_candidate_in_database(db, make_assessment, applicant):
    row = make_assessment()
    for _ in range(2):
        db.add(AssessmentSubmission(
            assessment_id=row.id,
            assessment_title=row.title,
            answers=[],
            candidate_id=applicant.id,
        ))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


# -------------------------
# Registry
# -------------------------

def test_registry_releases_finished_attempts(attempt_service, db, make_assessment):
    row = make_assessment()
    finished = []
    for _ in range(3):
        session = attempt_service.open_attempt(db, AttemptStartRequest(assessment_id=row.id))
        session.start()
        attempt_service.submit(session.id)
        finished.append(session.id)

    assert len(attempt_service.registry) == 0
    with pytest.raises(NotFoundError):
        attempt_service.get(finished[0])


def test_registry_drops_abandoned_attempts(make_assessment):
    now = [0.0]
    clock = lambda: now[0]
    registry = AttemptRegistry(ttl_seconds=60, clock=clock)

    abandoned = registry.add(make_session(make_assessment(), clock=clock))
    timed = registry.add(make_session(make_assessment(time_limit=5), clock=clock))
    timed.start()

    now[0] = 61.0
    fresh = registry.add(make_session(make_assessment(), clock=clock))

    with pytest.raises(NotFoundError):
        registry.get(abandoned.id)
    # A running countdown will finish the attempt itself
    assert registry.get(timed.id) is timed
    assert registry.get(fresh.id) is fresh
    assert len(registry) == 2
