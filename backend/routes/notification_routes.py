from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator

from backend.core.clock import to_naive_utc
from backend.dependencies import get_email_client
from backend.services.notification import EmailClient, EmailDeliveryError

router = APIRouter(tags=['notifications'])


class SendTestNotificationRequest(BaseModel):
    email: str
    title: str
    start_time: datetime

    @field_validator('email', 'title')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Value is required.')
        return normalized

    @field_validator('start_time')
    @classmethod
    def validate_start_time(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


@router.post('/test')
def send_test_notification(
    data: SendTestNotificationRequest,
    email_client: EmailClient = Depends(get_email_client),
):
    try:
        email_client.send_reminder(data.email, data.title, data.start_time)
    except EmailDeliveryError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail='Failed to send notification.',
        ) from exc

    return {'message': 'Test notification sent'}
