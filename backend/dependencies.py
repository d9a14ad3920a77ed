from fastapi import HTTPException, Request, status

from backend.services.notification import EmailClient
from backend.storage import AppointmentStore


def get_store(request: Request) -> AppointmentStore:
    store = getattr(request.app.state, 'store', None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Appointment store is not initialised.',
        )
    return store


def get_email_client(request: Request) -> EmailClient:
    email_client = getattr(request.app.state, 'email_client', None)
    if email_client is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Email client is not configured.',
        )
    return email_client
