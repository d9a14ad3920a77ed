from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import SQLAlchemyError

from backend.dependencies import get_store
from backend.storage import AppointmentStore

router = APIRouter(tags=['categories'])

DATABASE_UNAVAILABLE_DETAIL = 'Database unavailable. Verify DATABASE_URL and database credentials.'


class CreateCategoryRequest(BaseModel):
    name: str
    color: str

    @field_validator('name', 'color')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Value is required.')
        return normalized


class CategoryResponse(BaseModel):
    id: int
    name: str
    color: str

    class Config:
        from_attributes = True


@router.get('', response_model=list[CategoryResponse])
def list_categories(store: AppointmentStore = Depends(get_store)):
    try:
        return store.list_categories()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.post('', response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(data: CreateCategoryRequest, store: AppointmentStore = Depends(get_store)):
    try:
        return store.create_category(data.name, data.color)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc


@router.delete('/{category_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_category(category_id: int, store: AppointmentStore = Depends(get_store)):
    # Appointments keep their category_id; the calendar shows them uncategorised.
    try:
        store.delete_category(category_id)
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_DETAIL,
        ) from exc
