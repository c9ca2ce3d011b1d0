from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from app.core.errors import ExtractionError
from app.schemas.ai import IconRequest, JobDescriptionRequest
from app.services.ai import StructuredExtractor, get_extractor, pdf_to_text

router = APIRouter(prefix="/ai", tags=["AI"])


def _failure(exc: ExtractionError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


@router.post("/resume")
def extract_resume(
    file: UploadFile = File(...),
    extractor: StructuredExtractor = Depends(get_extractor),
):
    try:
        data = extractor.extract_resume(file.file.read())
    except ExtractionError as exc:
        return _failure(exc)
    return {"success": True, "data": data.model_dump()}


@router.post("/job-description")
def parse_job_description(
    payload: JobDescriptionRequest,
    extractor: StructuredExtractor = Depends(get_extractor),
):
    try:
        data = extractor.parse_job_description(payload.job_description)
    except ExtractionError as exc:
        return _failure(exc)
    return {"success": True, "data": data.model_dump()}


@router.post("/icon")
def suggest_icon(
    payload: IconRequest,
    extractor: StructuredExtractor = Depends(get_extractor),
):
    try:
        icon_name = extractor.suggest_icon(payload.job_title)
    except ExtractionError as exc:
        return _failure(exc)
    return {"success": True, "data": {"icon_name": icon_name}}
