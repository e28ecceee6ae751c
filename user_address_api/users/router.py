"""
User API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, status

from user_address_api.core import db

from . import schemas, service

router = APIRouter()


def get_lifecycle() -> service.UserLifecycle:
    return service.lifecycle(db.database())


@router.post(
    "/user",
    status_code=status.HTTP_201_CREATED,
    response_model=schemas.CreateUserResponse,
)
async def create_user(
    request: schemas.CreateUserRequest,
    lifecycle: service.UserLifecycle = Depends(get_lifecycle),
) -> dict:
    return await lifecycle.create_user_with_address(
        first_name=request.first_name,
        last_name=request.last_name,
        email=request.email,
        country_id=request.country_id,
        city=request.city,
        state=request.state,
        zip_code=request.zip_code,
    )


@router.get("/user", response_model=schemas.UserWithAddressResponse)
async def get_user(
    email: str = Query(..., min_length=1, max_length=320),
    lifecycle: service.UserLifecycle = Depends(get_lifecycle),
) -> dict:
    return await lifecycle.get_user_with_address(email)


@router.put("/user", response_model=schemas.UpdateUserResponse)
async def update_user(
    request: schemas.UpdateUserRequest,
    lifecycle: service.UserLifecycle = Depends(get_lifecycle),
) -> dict:
    return await lifecycle.update_user_names(
        email=request.email or "",
        first_name=request.first_name or "",
        last_name=request.last_name or "",
    )


@router.delete("/user", response_model=schemas.DeleteUserResponse)
async def delete_user(
    email: str = Query(..., min_length=1, max_length=320),
    lifecycle: service.UserLifecycle = Depends(get_lifecycle),
) -> dict:
    """
    Delete a user, its links and any addresses left unlinked.

    An unknown email is not an error: the response says `not_found`.
    """
    return await lifecycle.delete_user_cascade(email)
