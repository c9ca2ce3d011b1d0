from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.common import ApiResponse
from app.schemas.emails import ApplicationEmailRequest, AssessmentInviteRequest, ResetAssessmentRequest
from app.services.notifications import NotificationService, get_notification_service

router = APIRouter(tags=["Emails"])


@router.post("/rejected", response_model=ApiResponse)
def send_rejection(
    payload: ApplicationEmailRequest,
    notifications: NotificationService = Depends(get_notification_service),
):
    notifications.send_rejection(payload.full_name, payload.email, payload.position)
    return ApiResponse(message="Rejection email sent successfully")


@router.post("/shortlisted", response_model=ApiResponse)
def send_shortlisted(
    payload: ApplicationEmailRequest,
    notifications: NotificationService = Depends(get_notification_service),
):
    notifications.send_shortlisted(payload.full_name, payload.email, payload.position)
    return ApiResponse(message="Shortlist email sent successfully")


@router.post("/send-assessment")
def send_assessment(
    payload: AssessmentInviteRequest,
    db: Session = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
):
    result = notifications.send_assessment_invitations(
        db,
        candidates=payload.candidates,
        assessment_id=payload.assessment_id,
        assessment_title=payload.assessment_title,
        subject=payload.subject,
        body=payload.body,
        passcode=payload.passcode,
        college_id=payload.college_id,
        authentication=payload.authentication,
    )
    return JSONResponse(
        status_code=result.status_code,
        content={
            "success": result.failed == 0,
            "message": result.message,
            "sent": result.sent,
            "failed": result.failed,
        },
    )


@router.post("/reset-assessment", response_model=ApiResponse)
def reset_assessment(
    payload: ResetAssessmentRequest,
    notifications: NotificationService = Depends(get_notification_service),
):
    notifications.send_reset_notice(
        candidate_name=payload.candidate_name,
        candidate_email=payload.candidate_email,
        assessment_name=payload.assessment_name,
        link=payload.assessment_link,
        subject=payload.subject,
        body=payload.body,
    )
    return ApiResponse(message="Reset email sent successfully")
