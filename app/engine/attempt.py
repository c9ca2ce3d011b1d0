# app/engine/attempt.py

"""
ASSESSMENT ATTEMPT STATE MACHINE

One ``AttemptSession`` per candidate visit to an assessment link.

PHASES:
    LOCKED     - gate not passed (passcode or identity)
    READY      - unlocked, start page shown, timer not running
    ANSWERING  - started; answers, navigation and uploads allowed
    FINISHED   - submission written (terminal)

Actions outside their phase raise ``InvalidTransition``; there is no way
back from FINISHED and no way to submit before the gate is passed.
"""

import logging
import os
import threading
import time
import uuid
from enum import Enum
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Protocol

from app.core.errors import (
    AlreadySubmitted,
    InvalidTransition,
    NotFoundError,
    StorageError,
    SubmissionError,
    UploadError,
    ValidationFailed,
)
from app.engine.gate import CandidateContext, Gate, GateState
from app.engine.navigator import SectionNavigator
from app.engine.sections import question_counts
from app.engine.submission import AnswerSlot, Linkage, SubmissionAssembler, SubmissionWriter
from app.engine.timer import CountdownTimer
from app.engine.uploads import UploadTracker
from app.schemas.assessment import AssessmentDocument, Question

logger = logging.getLogger(__name__)

UPLOAD_ROOT = "assessment-uploads"


class AttemptPhase(str, Enum):
    LOCKED = "locked"
    READY = "ready"
    ANSWERING = "answering"
    FINISHED = "finished"


class FileStore(Protocol):
    def upload(
        self,
        path: str,
        stream: BinaryIO,
        on_progress: Optional[Callable[[int, int], Any]] = None,
    ) -> str: ...

    def public_url(self, path: str) -> str: ...


def upload_path(assessment_id: str, question_id: str, file_name: str, millis: int) -> str:
    safe_name = os.path.basename(file_name.replace("\\", "/")) or "upload"
    return f"{UPLOAD_ROOT}/{assessment_id}/{question_id}-{millis}-{safe_name}"


class AttemptSession:
    def __init__(
        self,
        document: AssessmentDocument,
        writer: SubmissionWriter,
        candidate: Optional[CandidateContext] = None,
        linkage: Optional[Linkage] = None,
        clock: Callable[[], float] = time.time,
        attempt_id: Optional[str] = None,
        on_finish: Optional[Callable[["AttemptSession"], None]] = None,
    ):
        self.id = attempt_id or str(uuid.uuid4())
        self.document = document
        self.candidate = candidate
        self.linkage = linkage or Linkage()
        self.clock = clock
        self.on_finish = on_finish
        self.opened_at = clock()

        self.gate = Gate(
            passcode=document.passcode,
            candidate=candidate,
            has_linkage=self.linkage.present,
            identity_required=document.authentication == "email_verification",
        )
        self.navigator = SectionNavigator(question_counts(document))

        self.questions: List[Question] = document.all_questions()
        self.answers: List[AnswerSlot] = [
            AnswerSlot(q.id, q.text, [] if q.type == "checkbox" else "")
            for q in self.questions
        ]
        self._slot_by_question: Dict[str, int] = {
            q.id: i for i, q in enumerate(self.questions)
        }
        self.uploads: Dict[str, UploadTracker] = {
            q.id: UploadTracker(q.id)
            for q in self.questions
            if q.type == "file-upload"
        }

        self.assembler = SubmissionAssembler(
            assessment_id=document.id,
            assessment_title=document.title,
            writer=writer,
            candidate=candidate,
            linkage=self.linkage,
            clock=clock,
        )

        self.started_at: Optional[float] = None
        self.timer: Optional[CountdownTimer] = None
        self._lock = threading.RLock()

    # ------------------------------------------------------------
    # Phase
    # ------------------------------------------------------------

    @property
    def phase(self) -> AttemptPhase:
        if self.assembler.finished:
            return AttemptPhase.FINISHED
        if not self.gate.unlocked:
            return AttemptPhase.LOCKED
        if self.started_at is None:
            return AttemptPhase.READY
        return AttemptPhase.ANSWERING

    def _require(self, phase: AttemptPhase, action: str) -> None:
        current = self.phase
        if current != phase:
            raise InvalidTransition(f"Cannot {action} while the attempt is {current.value}.")

    # ------------------------------------------------------------
    # Gate
    # ------------------------------------------------------------

    def submit_passcode(self, passcode: str) -> GateState:
        with self._lock:
            return self.gate.submit_passcode(passcode)

    def verify_identity(self, name: str, email: str) -> GateState:
        with self._lock:
            return self.gate.verify_identity(name, email)

    # ------------------------------------------------------------
    # Start / timer
    # ------------------------------------------------------------

    def start(self) -> Optional[CountdownTimer]:
        """
        Leave the start page. Returns the countdown the caller must drive,
        or None when the assessment has no time limit.
        """
        with self._lock:
            self._require(AttemptPhase.READY, "start")
            if not self.questions:
                raise ValidationFailed("This assessment has no questions.")

            self.started_at = self.clock()
            if self.document.time_limit and self.document.time_limit > 0:
                self.timer = CountdownTimer.for_minutes(self.document.time_limit, self._on_timeout)
            return self.timer

    @property
    def time_left(self) -> Optional[int]:
        if self.timer is None:
            return None
        return self.timer.remaining

    def _on_timeout(self) -> None:
        try:
            self.submit()
        except InvalidTransition:
            pass
        except AlreadySubmitted:
            logger.warning("Auto-submit refused for attempt %s: candidate already submitted", self.id)
        except SubmissionError:
            # Already logged by the assembler; the candidate can still
            # press submit.
            logger.warning("Auto-submit failed for attempt %s", self.id)

    # ------------------------------------------------------------
    # Answers and navigation
    # ------------------------------------------------------------

    def _question(self, question_id: str) -> Question:
        try:
            return self.questions[self._slot_by_question[question_id]]
        except KeyError:
            raise NotFoundError(f"Question {question_id} not found", field="question_id")

    def set_answer(self, question_id: str, value: Any) -> AnswerSlot:
        with self._lock:
            self._require(AttemptPhase.ANSWERING, "answer")
            question = self._question(question_id)

            if question.type == "file-upload":
                raise ValidationFailed("File answers must be uploaded.", field="answer")
            if question.type == "checkbox":
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ValidationFailed("Expected a list of options.", field="answer")
                unknown = [v for v in value if v not in (question.options or [])]
                if unknown:
                    raise ValidationFailed(f"Unknown option(s): {', '.join(unknown)}", field="answer")
                value = list(dict.fromkeys(value))
            else:
                if not isinstance(value, str):
                    raise ValidationFailed("Expected a text answer.", field="answer")
                if question.type == "multiple-choice" and value and value not in (question.options or []):
                    raise ValidationFailed(f"Unknown option: {value}", field="answer")

            slot = self.answers[self._slot_by_question[question_id]]
            slot.answer = value
            return slot

    def answer_at(self, question_index: int) -> AnswerSlot:
        """Answer slot of the n-th question of the current section."""
        return self.answers[self.navigator.overall_index(question_index)]

    def next_section(self) -> int:
        with self._lock:
            self._require(AttemptPhase.ANSWERING, "change section")
            return self.navigator.next()

    def previous_section(self) -> int:
        with self._lock:
            self._require(AttemptPhase.ANSWERING, "change section")
            return self.navigator.previous()

    # ------------------------------------------------------------
    # Uploads
    # ------------------------------------------------------------

    def upload(self, question_id: str, file_name: str, stream: BinaryIO, store: FileStore) -> str:
        with self._lock:
            self._require(AttemptPhase.ANSWERING, "upload")
            tracker = self.uploads.get(question_id)
            if tracker is None:
                self._question(question_id)
                raise ValidationFailed("Not a file-upload question.", field="question_id")
            tracker.begin(file_name)

        path = upload_path(self.document.id, question_id, file_name, int(self.clock() * 1000))
        try:
            store.upload(path, stream, on_progress=tracker.report_progress)
            url = store.public_url(path)
        except (StorageError, OSError) as exc:
            tracker.fail(str(exc))
            raise UploadError(f"Upload failed: {exc}", field=question_id)
        except Exception as exc:
            # Leave the input usable for a retry
            tracker.fail(str(exc) or exc.__class__.__name__)
            raise

        with self._lock:
            tracker.succeed(url)
            self.answers[self._slot_by_question[question_id]].answer = url
        return url

    # ------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------

    def submit(self) -> Optional[str]:
        """
        Manual or timeout-triggered submit. Returns the submission id, or
        None when a submit is already in flight or done.
        """
        with self._lock:
            current = self.phase
            if current == AttemptPhase.FINISHED:
                return None
            if current != AttemptPhase.ANSWERING:
                raise InvalidTransition(f"Cannot submit while the attempt is {current.value}.")
            answers = [AnswerSlot(s.question_id, s.question_text, s.answer) for s in self.answers]
            started_at = self.started_at

        submission_id = self.assembler.submit(answers, started_at)
        if submission_id is not None:
            if self.timer is not None:
                self.timer.stop()
            if self.on_finish is not None:
                self.on_finish(self)
        return submission_id

    def expired(self, now: float, ttl_seconds: float) -> bool:
        """Abandoned: open longer than ``ttl_seconds`` with no countdown left to finish it."""
        if now - self.opened_at < ttl_seconds:
            return False
        return self.timer is None or not self.timer.running

    # ------------------------------------------------------------
    # View
    # ------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "attempt_id": self.id,
                "assessment_id": self.document.id,
                "phase": self.phase.value,
                "gate": self.gate.state.value,
                "time_left": self.time_left,
                "section_index": self.navigator.index,
                "section_count": self.navigator.section_count,
                "can_go_back": self.navigator.can_go_back,
                "primary_action": self.navigator.primary_action,
                "answers": [slot.to_dict() for slot in self.answers],
                "uploads": {
                    qid: {**tracker.state.to_dict(), "input_enabled": tracker.input_enabled}
                    for qid, tracker in self.uploads.items()
                },
                "submission_id": self.assembler.submission_id,
            }


class AttemptRegistry:
    """
    Process-local store of live attempts.

    Finished attempts are dropped as soon as their submission is written
    (``remove`` is wired as the session's ``on_finish``). Attempts left open
    longer than ``ttl_seconds`` are dropped on the next ``add`` unless a
    countdown is still running for them.
    """

    def __init__(self, ttl_seconds: float = 24 * 60 * 60, clock: Callable[[], float] = time.time):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: Dict[str, AttemptSession] = {}
        self._lock = threading.Lock()

    def add(self, session: AttemptSession) -> AttemptSession:
        self.prune()
        with self._lock:
            self._sessions[session.id] = session
        return session

    def get(self, attempt_id: str) -> AttemptSession:
        with self._lock:
            session = self._sessions.get(attempt_id)
        if session is None:
            raise NotFoundError("Attempt not found")
        return session

    def remove(self, attempt_id: str) -> Optional[AttemptSession]:
        with self._lock:
            return self._sessions.pop(attempt_id, None)

    def prune(self) -> int:
        now = self.clock()
        with self._lock:
            stale = [
                attempt_id
                for attempt_id, session in self._sessions.items()
                if session.expired(now, self.ttl_seconds)
            ]
            for attempt_id in stale:
                del self._sessions[attempt_id]
        if stale:
            logger.info("Dropped %d abandoned attempt(s)", len(stale))
        return len(stale)

    def __len__(self) -> int:
        return len(self._sessions)
