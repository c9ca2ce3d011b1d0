from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.attempt import AnswerRequest, AttemptStartRequest, PasscodeRequest, VerificationRequest
from app.schemas.submission import SubmissionResponse
from app.services.attempts import AttemptService, get_attempt_service

router = APIRouter(prefix="/attempts", tags=["Attempts"])


@router.post("", status_code=status.HTTP_201_CREATED)
def open_attempt(
    payload: AttemptStartRequest,
    db: Session = Depends(get_db),
    service: AttemptService = Depends(get_attempt_service),
):
    session = service.open_attempt(db, payload)
    return {
        **session.snapshot(),
        "assessment": session.document.public_view(),
    }


@router.get("/{attempt_id}")
def get_attempt(attempt_id: str, service: AttemptService = Depends(get_attempt_service)):
    return service.get(attempt_id).snapshot()


# -------------------------------------------------
# Gate
# -------------------------------------------------

@router.post("/{attempt_id}/passcode")
def submit_passcode(
    attempt_id: str,
    payload: PasscodeRequest,
    service: AttemptService = Depends(get_attempt_service),
):
    session = service.get(attempt_id)
    session.submit_passcode(payload.passcode)
    return session.snapshot()


@router.post("/{attempt_id}/verify")
def verify_identity(
    attempt_id: str,
    payload: VerificationRequest,
    service: AttemptService = Depends(get_attempt_service),
):
    session = service.get(attempt_id)
    session.verify_identity(payload.name, payload.email)
    return session.snapshot()


# -------------------------------------------------
# Taking the assessment
# -------------------------------------------------

@router.post("/{attempt_id}/start")
async def start_attempt(attempt_id: str, service: AttemptService = Depends(get_attempt_service)):
    # async so the countdown task lands on the server's event loop
    return service.start(attempt_id).snapshot()


@router.put("/{attempt_id}/answers/{question_id}")
def set_answer(
    attempt_id: str,
    question_id: str,
    payload: AnswerRequest,
    service: AttemptService = Depends(get_attempt_service),
):
    slot = service.get(attempt_id).set_answer(question_id, payload.answer)
    return slot.to_dict()


@router.post("/{attempt_id}/next")
def next_section(attempt_id: str, service: AttemptService = Depends(get_attempt_service)):
    session = service.get(attempt_id)
    session.next_section()
    return session.snapshot()


@router.post("/{attempt_id}/previous")
def previous_section(attempt_id: str, service: AttemptService = Depends(get_attempt_service)):
    session = service.get(attempt_id)
    session.previous_section()
    return session.snapshot()


@router.post("/{attempt_id}/uploads/{question_id}")
def upload_file(
    attempt_id: str,
    question_id: str,
    file: UploadFile = File(...),
    service: AttemptService = Depends(get_attempt_service),
):
    url = service.upload(attempt_id, question_id, file.filename or "upload", file.file)
    upload_state = service.get(attempt_id).uploads[question_id].state
    return {"url": url, "upload": upload_state.to_dict()}


@router.post("/{attempt_id}/submit", response_model=SubmissionResponse)
def submit_attempt(attempt_id: str, service: AttemptService = Depends(get_attempt_service)):
    session = service.get(attempt_id)
    submission_id = service.submit(attempt_id)

    if submission_id is None:
        return SubmissionResponse(
            message="Submission already in progress or completed.",
            submission_id=session.assembler.submission_id,
            status=session.phase.value,
        )

    document = session.document
    return SubmissionResponse(
        message="Assessment submitted successfully.",
        submission_id=submission_id,
        success_title=document.success_title or "Assessment Complete",
        success_message=document.success_message or "Thank you for your submission. The hiring team will get back to you soon.",
    )
