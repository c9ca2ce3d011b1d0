from app.models.assessment import Assessment
from app.models.candidate import Candidate
from app.models.college import College, CollegeCandidate
from app.models.email_template import EmailTemplate
from app.models.job import Job
from app.models.submission import AssessmentInvitation, AssessmentSubmission
from app.models.user import User

__all__ = [
    "Assessment",
    "AssessmentInvitation",
    "AssessmentSubmission",
    "Candidate",
    "College",
    "CollegeCandidate",
    "EmailTemplate",
    "Job",
    "User",
]
