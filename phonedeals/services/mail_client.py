# phonedeals/services/mail_client.py
import requests

from phonedeals.utils.retry import http_retry
from phonedeals.utils.settings import MAILER_URL, MAIL_FROM
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class MailClient:
    """HTTP client for the mail relay, fire-and-forget from the caller's side."""

    def __init__(self, base_url: str | None = None, sender: str | None = None, timeout: int = 5):
        self.base_url = (base_url or MAILER_URL).rstrip("/")
        self.sender = sender or MAIL_FROM
        self.timeout = timeout

    @http_retry()
    def send(self, to: str, subject: str, body: str) -> None:
        url = f"{self.base_url}/send"
        logger.info(f"MailClient POST {url} to={to} subject={subject!r}")

        resp = requests.post(
            url,
            json={"from": self.sender, "to": to, "subject": subject, "text": body},
            timeout=self.timeout,
        )
        resp.raise_for_status()
