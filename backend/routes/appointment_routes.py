from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from backend.core.clock import to_naive_utc
from backend.dependencies import get_store
from backend.models.appointment import Appointment
from backend.services.conflicts import check_conflicts
from backend.storage import AppointmentNotFoundError, AppointmentStore

router = APIRouter(tags=['appointments'])

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'
CONFLICT_ERROR = 'Appointment conflicts with existing events'


def normalize_title(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError('Title is required.')
    return normalized


def normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip() or None


def normalize_email(value: str | None) -> str | None:
    if value is None:
        return None
    return value.strip().lower() or None


class CreateAppointmentRequest(BaseModel):
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    category_id: int | None = None
    email: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        return normalize_title(value)

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return normalize_email(value)

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_timestamp(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class UpdateAppointmentRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    category_id: int | None = None
    email: str | None = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str | None) -> str:
        if value is None:
            raise ValueError('Title cannot be cleared.')
        return normalize_title(value)

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return normalize_optional_text(value)

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        return normalize_email(value)

    @field_validator('start_time', 'end_time')
    @classmethod
    def validate_timestamp(cls, value: datetime | None) -> datetime:
        if value is None:
            raise ValueError('Start and end times cannot be cleared.')
        return to_naive_utc(value)


class AppointmentResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    category_id: int | None = None
    email: str | None = None
    notification_sent: bool = False

    class Config:
        from_attributes = True


def raise_if_conflicting(conflicts: list[Appointment]) -> None:
    if conflicts:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={
                'error': CONFLICT_ERROR,
                'conflicts': [
                    AppointmentResponse.model_validate(conflict).model_dump(mode='json')
                    for conflict in conflicts
                ],
            },
        )


@router.get('', response_model=list[AppointmentResponse])
def list_appointments(
    start_date: datetime | None = Query(default=None),
    end_date: datetime | None = Query(default=None),
    store: AppointmentStore = Depends(get_store),
):
    try:
        if start_date is not None and end_date is not None:
            return store.list_appointments_in_range(to_naive_utc(start_date), to_naive_utc(end_date))
        return store.list_appointments()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, store: AppointmentStore = Depends(get_store)):
    try:
        raise_if_conflicting(check_conflicts(store, data.start_time, data.end_time))
        return store.create_appointment(data.model_dump())
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.put('/{appointment_id}', response_model=AppointmentResponse)
def update_appointment(
    appointment_id: int,
    data: UpdateAppointmentRequest,
    store: AppointmentStore = Depends(get_store),
):
    values = data.model_dump(exclude_unset=True)

    try:
        existing = store.get_appointment(appointment_id)
        if existing is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail='Appointment not found.',
            )

        if 'start_time' in values or 'end_time' in values:
            raise_if_conflicting(
                check_conflicts(
                    store,
                    values.get('start_time', existing.start_time),
                    values.get('end_time', existing.end_time),
                    exclude_id=appointment_id,
                )
            )

        return store.update_appointment(appointment_id, values)
    except AppointmentNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail='Appointment not found.',
        ) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.delete('/{appointment_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(appointment_id: int, store: AppointmentStore = Depends(get_store)):
    try:
        store.delete_appointment(appointment_id)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc
