# app/engine/uploads.py

"""Per-question file upload state."""

import logging
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from app.core.errors import UploadError

logger = logging.getLogger(__name__)


class UploadStatus(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class UploadState:
    status: UploadStatus = UploadStatus.IDLE
    progress: float = 0.0
    url: Optional[str] = None
    error: Optional[str] = None
    file_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


class UploadTracker:
    """
    Drives one file-upload question through idle -> uploading -> success|error.

    The input is disabled while uploading and after a success; after an
    error it stays enabled so the candidate can retry.
    """

    def __init__(self, question_id: str):
        self.question_id = question_id
        self.state = UploadState()

    @property
    def input_enabled(self) -> bool:
        return self.state.status not in (UploadStatus.UPLOADING, UploadStatus.SUCCESS)

    def begin(self, file_name: str) -> None:
        if not self.input_enabled:
            raise UploadError(
                f"Upload for question {self.question_id} is {self.state.status.value}"
            )
        self.state = UploadState(status=UploadStatus.UPLOADING, progress=0.0, file_name=file_name)

    def report_progress(self, transferred: int, total: int) -> float:
        if self.state.status != UploadStatus.UPLOADING:
            return self.state.progress
        progress = (transferred / total) * 100 if total > 0 else 0.0
        self.state.progress = min(100.0, max(0.0, progress))
        return self.state.progress

    def succeed(self, url: str) -> None:
        self.state = UploadState(
            status=UploadStatus.SUCCESS,
            progress=100.0,
            url=url,
            file_name=self.state.file_name,
        )

    def fail(self, message: str) -> None:
        logger.warning("Upload failed for question %s: %s", self.question_id, message)
        self.state = UploadState(
            status=UploadStatus.ERROR,
            progress=0.0,
            error=message,
            file_name=self.state.file_name,
        )
