import os
from datetime import datetime

import pytest
from pydantic import ValidationError

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from backend.routes.category_routes import (  # noqa: E402
    CategoryResponse,
    CreateCategoryRequest,
    create_category,
    delete_category,
    list_categories,
)
from backend.storage import MemoryStore  # noqa: E402


def test_create_category_request_trims_values() -> None:
    request = CreateCategoryRequest(name='  Travel ', color=' #00BCD4 ')

    assert request.name == 'Travel'
    assert request.color == '#00BCD4'


def test_create_category_request_rejects_blank_name() -> None:
    with pytest.raises(ValidationError):
        CreateCategoryRequest(name='  ', color='#00BCD4')


def test_list_categories_returns_defaults() -> None:
    categories = [CategoryResponse.model_validate(category) for category in list_categories(store=MemoryStore())]

    assert [category.name for category in categories] == ['Work', 'Personal', 'Health', 'Social']


def test_create_and_delete_category() -> None:
    store = MemoryStore()

    category = create_category(data=CreateCategoryRequest(name='Travel', color='#00BCD4'), store=store)
    assert category.name == 'Travel'
    assert len(list_categories(store=store)) == 5

    delete_category(category_id=category.id, store=store)
    assert len(list_categories(store=store)) == 4


def test_delete_category_keeps_referencing_appointments() -> None:
    store = MemoryStore()
    appointment = store.create_appointment(
        {'title': 'Gym', 'start_time': datetime(2026, 1, 5, 7), 'end_time': datetime(2026, 1, 5, 8), 'category_id': 3}
    )

    delete_category(category_id=3, store=store)

    assert store.get_appointment(appointment.id).category_id == 3
