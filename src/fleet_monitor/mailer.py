from __future__ import annotations

import html
import logging
from collections.abc import Sequence
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Any

import boto3

from .errors import DeliveryError

DEFAULT_SES_REGION = "us-east-1"

LOGGER = logging.getLogger(__name__)


def build_message(sender: str, recipients: Sequence[str], subject: str, body: str) -> MIMEMultipart:
    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = sender
    message["To"] = ", ".join(recipients)
    message.attach(MIMEText(body, "plain", "utf-8"))
    message.attach(MIMEText(f"<pre>{html.escape(body)}</pre>", "html", "utf-8"))
    return message


class SesTransport:
    def __init__(
        self,
        sender: str,
        recipients: Sequence[str],
        *,
        region: str | None = DEFAULT_SES_REGION,
        profile: str | None = None,
        client: Any | None = None,
    ) -> None:
        self.sender = sender
        self.recipients = tuple(recipients)
        if client is None:
            session = boto3.Session(profile_name=profile, region_name=region or DEFAULT_SES_REGION)
            client = session.client("ses")
        self._client = client

    def send(self, subject: str, body: str) -> None:
        if not self.recipients:
            raise DeliveryError("No notification recipients configured")
        message = build_message(self.sender, self.recipients, subject, body)
        response = self._client.send_raw_email(
            Source=self.sender,
            Destinations=list(self.recipients),
            RawMessage={"Data": message.as_bytes()},
        )
        LOGGER.info("Sent notification %s to %s", response.get("MessageId"), ", ".join(self.recipients))


class ConsoleTransport:
    """Prints the notification instead of sending it."""

    def __init__(self, stream: Any | None = None) -> None:
        self.stream = stream

    def send(self, subject: str, body: str) -> None:
        print(f"Subject: {subject}\n\n{body}", file=self.stream)
