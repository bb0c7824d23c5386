from __future__ import annotations

import email
import io

import boto3
import pytest
from botocore.exceptions import ClientError
from botocore.stub import ANY, Stubber

from fleet_monitor.errors import DeliveryError
from fleet_monitor.mailer import ConsoleTransport, SesTransport, build_message


@pytest.fixture
def ses_client():
    return boto3.client(
        "ses",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


def test_build_message_has_plain_and_html_parts() -> None:
    message = build_message("Monitor <noreply@example.com>", ["ops@example.com"], "Status", "a < b\nc")

    parsed = email.message_from_bytes(message.as_bytes())
    parts = [part for part in parsed.walk() if not part.is_multipart()]
    assert parsed["Subject"] == "Status"
    assert parsed["To"] == "ops@example.com"
    assert [part.get_content_type() for part in parts] == ["text/plain", "text/html"]
    assert parts[0].get_payload(decode=True).decode("utf-8") == "a < b\nc"
    assert parts[1].get_payload(decode=True).decode("utf-8") == "<pre>a &lt; b\nc</pre>"


def test_ses_transport_sends_raw_email(ses_client) -> None:
    stubber = Stubber(ses_client)
    stubber.add_response(
        "send_raw_email",
        {"MessageId": "message-1"},
        {
            "Source": "noreply@example.com",
            "Destinations": ["ops@example.com", "dev@example.com"],
            "RawMessage": {"Data": ANY},
        },
    )

    with stubber:
        SesTransport(
            "noreply@example.com",
            ["ops@example.com", "dev@example.com"],
            client=ses_client,
        ).send("Status", "i-1 web running ok ok")

    stubber.assert_no_pending_responses()


def test_ses_transport_requires_recipients(ses_client) -> None:
    with pytest.raises(DeliveryError):
        SesTransport("noreply@example.com", [], client=ses_client).send("Status", "body")


def test_ses_transport_propagates_send_failure(ses_client) -> None:
    stubber = Stubber(ses_client)
    stubber.add_client_error("send_raw_email", service_error_code="MessageRejected")

    with stubber:
        with pytest.raises(ClientError):
            SesTransport("noreply@example.com", ["ops@example.com"], client=ses_client).send("Status", "body")


def test_console_transport_prints_notification() -> None:
    stream = io.StringIO()

    ConsoleTransport(stream).send("Status", "WARNING: Queue length is 600")

    assert stream.getvalue() == "Subject: Status\n\nWARNING: Queue length is 600\n"
