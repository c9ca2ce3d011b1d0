# app/services/mail.py

"""
Transactional email over the ZeptoMail REST API, plus HTML template
rendering for the recruiting emails.
"""

import html
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, Optional

import httpx

from app.core.config import settings
from app.core.errors import MailError, NotFoundError

logger = logging.getLogger(__name__)


class MailClient:
    def __init__(
        self,
        url: str,
        token: str,
        from_address: str,
        from_name: str,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.url = url.rstrip("/") + "/v1.1/email"
        self.token = token
        self.from_address = from_address
        self.from_name = from_name
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def send(self, to_email: str, to_name: str, subject: str, html_body: str) -> None:
        if not self.token:
            raise MailError("Mail client is not initialized. Check server environment variables.")

        payload = {
            "from": {"address": self.from_address, "name": self.from_name},
            "to": [{"email_address": {"address": to_email, "name": to_name}}],
            "subject": subject,
            "htmlbody": html_body,
        }
        headers = {
            "Authorization": f"Zoho-enczapikey {self.token}",
            "Accept": "application/json",
        }

        try:
            response = self._client.post(self.url, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("Email to %s rejected: %s", to_email, exc.response.text)
            raise MailError(f"Email API returned {exc.response.status_code}")
        except httpx.HTTPError as exc:
            logger.error("Email to %s failed: %s", to_email, exc)
            raise MailError(str(exc))

        logger.info("Email sent to %s", to_email)


_client: Optional[MailClient] = None


def get_mail_client() -> MailClient:
    global _client
    if _client is None:
        _client = MailClient(
            url=settings.ZEPTOMAIL_URL,
            token=settings.ZEPTOMAIL_TOKEN,
            from_address=settings.MAIL_FROM_ADDRESS,
            from_name=settings.MAIL_FROM_NAME,
        )
    return _client


# -------------------------------------------------
# Templates
# -------------------------------------------------

RAW_PLACEHOLDERS = frozenset({"EMAIL_BODY"})


def load_template(name: str, templates_dir: Optional[str] = None) -> str:
    path = Path(templates_dir or settings.EMAIL_TEMPLATES_DIR) / name
    try:
        return path.read_text(encoding="utf-8")
    except OSError:
        logger.error("Failed to read email template at %s", path)
        raise NotFoundError("Email template not found or unreadable.")


def render_template(
    template: str,
    values: Dict[str, str],
    keep_blocks: Iterable[str] = (),
    drop_blocks: Iterable[str] = (),
) -> str:
    """
    Fill ``<<Placeholder>>`` markers and resolve conditional blocks.

    Placeholders are matched in raw and HTML-escaped (``&lt;&lt;..&gt;&gt;``)
    form and replaced in a single pass, so inserted values are never
    expanded again. Values are HTML-escaped except the keys in
    ``RAW_PLACEHOLDERS``, which carry markup already.
    ``<!-- IF name -->...<!-- ENDIF name -->`` blocks listed in
    ``keep_blocks`` lose their markers; those in ``drop_blocks`` are removed
    entirely.
    """
    if values:
        keys = "|".join(re.escape(key) for key in values)
        placeholder = re.compile(rf"(?:<<|&lt;&lt;)({keys})(?:>>|&gt;&gt;)")

        def fill(match: re.Match) -> str:
            key = match.group(1)
            value = values[key]
            return value if key in RAW_PLACEHOLDERS else html.escape(value)

        template = placeholder.sub(fill, template)

    for name in keep_blocks:
        template = template.replace(f"<!-- IF {name} -->", "").replace(f"<!-- ENDIF {name} -->", "")
    for name in drop_blocks:
        pattern = re.compile(
            rf"<!-- IF {re.escape(name)} -->.*?<!-- ENDIF {re.escape(name)} -->",
            re.DOTALL,
        )
        template = pattern.sub("", template)
    return template


def newlines_to_breaks(body: str) -> str:
    return body.replace("\n", "<br />")
