"""Mailgun delivery backend for outgoing notification emails"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from mailgun.client import Client

logger = logging.getLogger(__name__)


@dataclass
class OutgoingEmail:
    to: str
    subject: str
    text: str
    html: Optional[str] = None
    tag: str = "registration-disposition"


class EmailClient:
    """Thin wrapper over the Mailgun messages API"""

    def __init__(self, config: dict):
        self.domain = config["mailgun_domain"]
        self.sender_email = config["sender_email"]
        self.client = Client(auth=("api", config["mailgun_api_key"]))

    def _payload(self, email: OutgoingEmail) -> Dict[str, str]:
        data = {
            "from": self.sender_email,
            "to": email.to,
            "subject": email.subject,
            "text": email.text,
            "o:tag": email.tag,
        }
        if email.html:
            data["html"] = email.html
        return data

    async def send(self, email: OutgoingEmail) -> Dict:
        """
        Deliver one email through Mailgun.

        Returns:
            Dict containing the Mailgun API response

        Raises:
            RuntimeError: If Mailgun rejects the message or cannot be reached
        """
        try:
            req = self.client.messages.create(data=self._payload(email), domain=self.domain)
            response = req.json()
        except Exception as e:
            logger.error(f"Mailgun request for {email.to} failed: {e}")
            raise RuntimeError(f"Email sending failed: {e}") from e

        if req.status_code != 200:
            logger.error(f"Mailgun API error: {req.status_code} - {response}")
            raise RuntimeError(f"Mailgun rejected email to {email.to}: {response}")

        logger.info(f"Email sent to {email.to}: {response.get('id', 'unknown')}")
        return response
