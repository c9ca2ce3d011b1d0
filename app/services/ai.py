# app/services/ai.py

"""
Structured extraction with an LLM.

Each operation sends one prompt, asks for a JSON object and validates the
reply against a pydantic model. Anything unparseable or invalid becomes an
``ExtractionError``.
"""

import io
import json
import logging
from typing import Any, Optional, Type, TypeVar

from openai import OpenAI, OpenAIError
from pydantic import BaseModel, ValidationError
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from app.core.config import settings
from app.core.errors import ExtractionError
from app.schemas.ai import IconSuggestion, JobDescriptionData, ResumeData

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

RESUME_PROMPT = """You are an AI assistant that extracts information from resumes.

Analyze the following resume and extract the following information:
- Full Name
- Email Address
- Phone Number
- Location (City, State)
- Address
- Education
- Experience (Work and/or Internship)

Resume:
'''
{resume_text}
'''
"""

JOB_DESCRIPTION_PROMPT = """You are an expert at parsing job descriptions into structured JSON.
Analyze the following job description text and structure it.

IMPORTANT RULES:
1. If you find a section titled "Highlights" or similar, extract its bullet points into the 'highlight_points' array.
2. For all other sections that describe the job itself (like "Responsibilities", "Required Skills", "Qualifications", "Requirements", "What You'll Do"), parse them into the 'sections' array. Each item in 'sections' must have a 'title' and an array of 'points'.
3. EXCLUDE any general company information, "About Us" sections, "Why Work Here" sections, or any other content that doesn't describe the role's duties or qualifications.

Job Description Text:
'''
{job_description}
'''
"""

ICON_PROMPT = """You are an expert at selecting the perfect icon for a job title.
Based on the job title provided, suggest a single, relevant icon name from the "lucide-react" icon library.

RULES:
1. You MUST return the icon name in PascalCase format (e.g., "Briefcase", "Code", "PenTool").
2. Choose an icon that best represents the core function of the job. For "Software Engineer", suggest "Code" or "Terminal". For "Graphic Designer", suggest "PenTool" or "Paintbrush". For a generic business role, "Briefcase" is a good default.

Job Title:
'''
{job_title}
'''
"""


def pdf_to_text(data: bytes) -> str:
    try:
        reader = PdfReader(io.BytesIO(data))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
    except PdfReadError as exc:
        raise ExtractionError(f"Could not read PDF: {exc}")
    if not text.strip():
        raise ExtractionError("No text could be extracted from the resume.")
    return text


class StructuredExtractor:
    def __init__(self, client: Any, model: str, temperature: float = 0.1):
        self.client = client
        self.model = model
        self.temperature = temperature

    def _extract(self, prompt: str, schema: Type[T]) -> T:
        schema_hint = json.dumps(schema.model_json_schema())
        messages = [
            {
                "role": "system",
                "content": (
                    "Respond ONLY with a JSON object matching this JSON schema, "
                    f"no markdown and no explanations:\n{schema_hint}"
                ),
            },
            {"role": "user", "content": prompt},
        ]

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            logger.error("LLM request failed: %s", exc)
            raise ExtractionError(f"AI request failed: {exc}")

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ExtractionError("AI response was empty.")

        try:
            return schema.model_validate(json.loads(content))
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("LLM output did not match %s: %s", schema.__name__, exc)
            raise ExtractionError("AI response was in an unexpected format.")

    # ------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------

    def extract_resume(self, pdf_bytes: bytes) -> ResumeData:
        text = pdf_to_text(pdf_bytes)
        return self._extract(RESUME_PROMPT.format(resume_text=text), ResumeData)

    def parse_job_description(self, job_description: str) -> JobDescriptionData:
        result = self._extract(
            JOB_DESCRIPTION_PROMPT.format(job_description=job_description),
            JobDescriptionData,
        )
        if not result.sections:
            raise ExtractionError("AI response was empty or in an unexpected format.")
        return result

    def suggest_icon(self, job_title: str) -> str:
        return self._extract(ICON_PROMPT.format(job_title=job_title), IconSuggestion).icon_name


_extractor: Optional[StructuredExtractor] = None


def get_extractor() -> StructuredExtractor:
    global _extractor
    if _extractor is None:
        if not settings.OPENAI_API_KEY:
            raise ExtractionError("OPENAI_API_KEY is not configured.")
        _extractor = StructuredExtractor(
            client=OpenAI(api_key=settings.OPENAI_API_KEY),
            model=settings.OPENAI_MODEL,
        )
    return _extractor
