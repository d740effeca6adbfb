"""Shared domain models and fixtures."""

from typing import List, Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from request_factory import RequestFactory
from request_factory.config import Settings
from request_factory.core.models import GeoPoint, SeqNoPrimaryTerm


class Address(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    street: Optional[str] = None
    city: Optional[str] = Field(default=None, alias="city-name")


class Person(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: Optional[str] = None
    last_name: Optional[str] = Field(default=None, alias="last-name")
    location: Optional[GeoPoint] = Field(default=None, alias="current-location")
    age: Optional[int] = None
    address: Optional[Address] = None
    previous_addresses: List[Address] = Field(default_factory=list, alias="previous-addresses")


class EntityWithSeqNoPrimaryTerm(BaseModel):
    id: Optional[str] = None
    message: Optional[str] = None
    seq_no_primary_term: Optional[SeqNoPrimaryTerm] = None


@pytest.fixture
def settings():
    return Settings(max_result_window=10_000, default_page_size=10)


@pytest.fixture
def factory(settings):
    return RequestFactory.for_entities(Person, EntityWithSeqNoPrimaryTerm, settings=settings)


@pytest.fixture
def compiler(factory):
    return factory.compiler
