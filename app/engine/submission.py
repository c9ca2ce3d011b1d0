# app/engine/submission.py

"""
Builds and writes the single submission of an attempt.

Manual submit and timeout auto-submit both come through
``SubmissionAssembler.submit``; the in-flight flag makes them mutually
exclusive, and a successful write closes the assembler for good.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from app.core.errors import SubmissionError
from app.engine.gate import CandidateContext

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

AnswerValue = Union[str, List[str]]


@dataclass
class AnswerSlot:
    question_id: str
    question_text: str
    answer: AnswerValue = ""

    def to_dict(self) -> Dict[str, Any]:
        answer = list(self.answer) if isinstance(self.answer, list) else self.answer
        return {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "answer": answer,
        }


@dataclass(frozen=True)
class Linkage:
    """Where an invitation link came from; all fields optional."""

    college_id: Optional[str] = None
    candidate_id: Optional[str] = None

    @property
    def present(self) -> bool:
        return self.candidate_id is not None


# Persists a payload and returns the new submission id; raises
# SubmissionError when the write is rejected.
SubmissionWriter = Callable[[Dict[str, Any]], str]


class SubmissionAssembler:
    def __init__(
        self,
        assessment_id: str,
        assessment_title: str,
        writer: SubmissionWriter,
        candidate: Optional[CandidateContext] = None,
        linkage: Optional[Linkage] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.assessment_id = assessment_id
        self.assessment_title = assessment_title
        self.writer = writer
        self.candidate = candidate
        self.linkage = linkage or Linkage()
        self.clock = clock

        self._lock = threading.Lock()
        self.in_flight = False
        self.submission_id: Optional[str] = None

    @property
    def finished(self) -> bool:
        return self.submission_id is not None

    def build_payload(self, answers: List[AnswerSlot], started_at: Optional[float]) -> Dict[str, Any]:
        time_taken = int(self.clock() - started_at) if started_at is not None else 0

        payload: Dict[str, Any] = {
            "assessment_id": self.assessment_id,
            "assessment_title": self.assessment_title,
            "answers": [slot.to_dict() for slot in answers],
            "time_taken": max(time_taken, 0),
            "college_id": self.linkage.college_id,
        }

        if self.candidate is not None:
            college_link = self.linkage.college_id is not None
            payload.update({
                "candidate_id": None if college_link else self.candidate.id,
                "college_candidate_id": self.linkage.candidate_id if college_link else None,
                "candidate_name": self.candidate.name,
                "candidate_email": self.candidate.email,
            })
        else:
            payload.update({
                "candidate_id": None,
                "college_candidate_id": None,
                "candidate_name": NOT_AVAILABLE,
                "candidate_email": NOT_AVAILABLE,
            })
        return payload

    def submit(self, answers: List[AnswerSlot], started_at: Optional[float]) -> Optional[str]:
        """
        Write the submission once.

        Returns the new submission id, or None when another submit is in
        flight or the attempt is already submitted. A rejected write resets
        the guard and re-raises so the candidate can retry.
        """
        with self._lock:
            if self.in_flight or self.finished:
                logger.info("Submit ignored for assessment %s: already in flight or done", self.assessment_id)
                return None
            self.in_flight = True

        submission_id = None
        try:
            payload = self.build_payload(answers, started_at)
            submission_id = self.writer(payload)
        except SubmissionError:
            logger.exception("Submission write failed for assessment %s", self.assessment_id)
            raise
        finally:
            with self._lock:
                if submission_id is not None:
                    self.submission_id = submission_id
                self.in_flight = False
        return submission_id
