# app/services/notifications.py

"""Candidate-facing emails: application updates, assessment invites, resets."""

import logging
import uuid
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AppError, PersistenceError
from app.models.submission import AssessmentInvitation
from app.schemas.emails import InviteeIn
from app.services.mail import MailClient, get_mail_client, load_template, newlines_to_breaks, render_template

logger = logging.getLogger(__name__)

INVITE_TEMPLATE = "assessment-invite-mail.html"
REJECTION_TEMPLATE = "rejection-mail.html"
SHORTLIST_TEMPLATE = "application-response-mail.html"
RESET_TEMPLATE = "reset-assessment-mail.html"

VERIFICATION_NOTICE = (
    "Please note: You will need to verify your name and email address "
    "to access this assessment."
)


@dataclass
class DispatchResult:
    sent: int = 0
    failed: int = 0
    reasons: List[str] = field(default_factory=list)

    @property
    def status_code(self) -> int:
        if self.failed == 0:
            return 200
        # Every recipient failed -> server error, some failed -> multi-status
        return 500 if self.sent == 0 else 207

    @property
    def message(self) -> str:
        if self.failed == 0:
            return f"Assessment invitations sent to {self.sent} candidates successfully."
        return (
            f"Process completed with errors. Sent: {self.sent}, Failed: {self.failed}. "
            f"Reasons: {', '.join(self.reasons)}"
        )


def assessment_link(assessment_id, candidate_id, college_id=None) -> str:
    link = f"{settings.PUBLIC_BASE_URL.rstrip('/')}/assessment/{assessment_id}?candidateId={candidate_id}"
    if college_id:
        link += f"&collegeId={college_id}"
    return link


class NotificationService:
    def __init__(self, mail: MailClient, templates_dir: Optional[str] = None):
        self.mail = mail
        self.templates_dir = templates_dir

    def _template(self, name: str) -> str:
        return load_template(name, self.templates_dir)

    # ------------------------------------------------------------
    # Application status emails
    # ------------------------------------------------------------

    def send_rejection(self, full_name: str, email: str, position: str) -> None:
        body = render_template(
            self._template(REJECTION_TEMPLATE),
            {"Candidate Name": full_name, "Position": position},
        )
        self.mail.send(email, full_name, f"Update on your application with {settings.COMPANY_NAME}", body)

    def send_shortlisted(self, full_name: str, email: str, position: str) -> None:
        body = render_template(
            self._template(SHORTLIST_TEMPLATE),
            {"Candidate Name": full_name, "Position": position},
        )
        self.mail.send(
            email,
            full_name,
            f"Update on your application with {settings.COMPANY_NAME} Careers",
            body,
        )

    # ------------------------------------------------------------
    # Assessment invitations
    # ------------------------------------------------------------

    def send_assessment_invitations(
        self,
        db: Session,
        candidates: Sequence[InviteeIn],
        assessment_id: uuid.UUID,
        assessment_title: str,
        subject: str,
        body: str,
        passcode: Optional[str] = None,
        college_id: Optional[uuid.UUID] = None,
        authentication: str = "none",
    ) -> DispatchResult:
        """
        Email each candidate their personal link. Recipients are attempted
        independently; one failure never blocks the others.
        """
        base_template = self._template(INVITE_TEMPLATE)
        if authentication == "email_verification":
            body = f"{VERIFICATION_NOTICE}\n\n{body}"

        result = DispatchResult()
        for candidate in candidates:
            try:
                html_body = render_template(
                    base_template,
                    {
                        "Candidate Name": candidate.name,
                        "Assessment Name": assessment_title,
                        "Assessment Link": assessment_link(assessment_id, candidate.id, college_id),
                        "Passcode": passcode or "N/A",
                        "EMAIL_BODY": newlines_to_breaks(body),
                    },
                    keep_blocks=["passcode"] if passcode else [],
                    drop_blocks=[] if passcode else ["passcode"],
                )
                self.mail.send(candidate.email, candidate.name, subject, html_body)
            except AppError as exc:
                result.failed += 1
                reason = f"Failed to send to {candidate.email}: {exc.message}"
                logger.error(reason)
                result.reasons.append(reason)
                continue

            db.add(AssessmentInvitation(
                candidate_id=candidate.id,
                candidate_email=candidate.email,
                assessment_id=assessment_id,
                assessment_title=assessment_title,
                college_id=college_id,
            ))
            result.sent += 1

        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Failed to record assessment invitations")
            raise PersistenceError(f"Could not record invitations: {exc}")
        return result

    def send_reset_notice(
        self,
        candidate_name: str,
        candidate_email: str,
        assessment_name: str,
        link: str,
        subject: str,
        body: str,
    ) -> None:
        html_body = render_template(
            self._template(RESET_TEMPLATE),
            {
                "Candidate Name": candidate_name,
                "Assessment Name": assessment_name,
                "Assessment Link": link,
                "EMAIL_BODY": body,
            },
        )
        self.mail.send(candidate_email, candidate_name, subject, html_body)


def get_notification_service() -> NotificationService:
    return NotificationService(get_mail_client())
