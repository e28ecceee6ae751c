"""
User API schemas (request/response models).
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class CreateUserRequest(BaseModel):
    first_name: str | None = Field(default=None, max_length=200)
    last_name: str | None = Field(default=None, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    country_id: str | None = Field(default=None, max_length=64)
    city: str | None = Field(default=None, max_length=200)
    state: str | None = Field(default=None, max_length=200)
    zip_code: str | None = Field(default=None, max_length=32)


class UpdateUserRequest(BaseModel):
    # Emptiness is checked by the repository so it surfaces as a 400.
    email: str | None = Field(default=None, max_length=320)
    first_name: str | None = Field(default=None, max_length=200)
    last_name: str | None = Field(default=None, max_length=200)


class UserResponse(BaseModel):
    user_key: str
    first_name: str | None = None
    last_name: str | None = None
    email: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AddressResponse(BaseModel):
    address_key: str
    country_id: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class LinkResponse(BaseModel):
    user_key: str
    address_key: str


class CreateUserResponse(BaseModel):
    user: UserResponse
    address: AddressResponse | None = None
    link: LinkResponse | None = None


class UserWithAddressResponse(BaseModel):
    user_key: str
    first_name: str | None = None
    last_name: str | None = None
    email: str
    address_key: str
    country_id: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None


class UpdateUserResponse(BaseModel):
    email: str
    first_name: str
    last_name: str


class DeleteUserResponse(BaseModel):
    status: str
    message: str
