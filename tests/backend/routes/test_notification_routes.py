import os
from datetime import datetime

import pytest
from fastapi import HTTPException

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.routes.notification_routes import (  # noqa: E402
    SendTestNotificationRequest,
    send_test_notification,
)
from backend.services.notification import EmailClient, EmailDeliveryError  # noqa: E402


class RecordingEmailClient(EmailClient):
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send_reminder(self, to, title, start_time):
        if self.fail:
            raise EmailDeliveryError('smtp down')
        self.sent.append((to, title, start_time))


def make_request() -> SendTestNotificationRequest:
    return SendTestNotificationRequest(
        email='user@example.com',
        title='Dentist',
        start_time=datetime(2026, 1, 5, 14, 25),
    )


def test_send_test_notification_uses_email_client() -> None:
    email_client = RecordingEmailClient()

    response = send_test_notification(data=make_request(), email_client=email_client)

    assert response == {'message': 'Test notification sent'}
    assert email_client.sent == [('user@example.com', 'Dentist', datetime(2026, 1, 5, 14, 25))]


def test_send_test_notification_reports_delivery_failure() -> None:
    with pytest.raises(HTTPException) as exception_info:
        send_test_notification(data=make_request(), email_client=RecordingEmailClient(fail=True))

    assert exception_info.value.status_code == 502
    assert exception_info.value.detail == 'Failed to send notification.'
