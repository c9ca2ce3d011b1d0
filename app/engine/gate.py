# app/engine/gate.py

"""
Access gate in front of an assessment.

States:
    LOCKED_PASSCODE  - waiting for the assessment passcode
    LOCKED_IDENTITY  - waiting for the invited candidate's name and email
    UNLOCKED         - questions may be shown (terminal)

There is no attempt counter: a wrong entry only attaches a field error.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.core.errors import GateError, InvalidTransition

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    LOCKED_PASSCODE = "locked_passcode"
    LOCKED_IDENTITY = "locked_identity"
    UNLOCKED = "unlocked"


@dataclass(frozen=True)
class CandidateContext:
    """The candidate an invitation link points at (applicant or college import)."""

    id: str
    name: str
    email: str
    college_id: Optional[str] = None


class Gate:
    def __init__(
        self,
        passcode: Optional[str] = None,
        candidate: Optional[CandidateContext] = None,
        has_linkage: bool = False,
        identity_required: bool = False,
    ):
        self.passcode = passcode or None
        self.candidate = candidate

        if has_linkage or identity_required:
            self.state = GateState.LOCKED_IDENTITY
        elif self.passcode:
            self.state = GateState.LOCKED_PASSCODE
        else:
            self.state = GateState.UNLOCKED

    @property
    def unlocked(self) -> bool:
        return self.state == GateState.UNLOCKED

    def submit_passcode(self, value: str) -> GateState:
        if self.unlocked:
            return self.state
        if self.state != GateState.LOCKED_PASSCODE:
            raise InvalidTransition("This assessment does not use a passcode.")

        # Exact, case-sensitive comparison
        if value == self.passcode:
            self.state = GateState.UNLOCKED
            return self.state

        logger.info("Passcode rejected")
        raise GateError("passcode", "Invalid passcode.")

    def verify_identity(self, name: str, email: str) -> GateState:
        if self.unlocked:
            return self.state
        if self.state != GateState.LOCKED_IDENTITY:
            raise InvalidTransition("This assessment does not use identity verification.")

        if self.candidate is None:
            raise GateError("email", "Candidate record not found.")

        name_match = name.lower() == self.candidate.name.lower()
        email_match = email.lower() == self.candidate.email.lower()

        if name_match and email_match:
            self.state = GateState.UNLOCKED
            return self.state

        logger.info("Identity verification failed for candidate %s", self.candidate.id)
        raise GateError(
            "email",
            "The name or email does not match our records for this link.",
        )
