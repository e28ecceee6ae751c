"""
User lifecycle business logic.

Multi-step flows over the user, address and link repositories. None of them
run in a transaction: every step commits on its own and is safe to repeat, so
a caller recovers from a partial failure by retrying the same call.
"""

from __future__ import annotations

import logging
from typing import Any

from user_address_api.addresses.repository import AddressFields, AddressRepository
from user_address_api.core.db import Database
from user_address_api.core.errors import NotFound
from user_address_api.links.repository import LinkRepository

from .repository import UserRepository

logger = logging.getLogger(__name__)

STATUS_DELETED = "deleted"
STATUS_NOT_FOUND = "not_found"


class UserLifecycle:
    def __init__(
        self,
        *,
        users: UserRepository,
        addresses: AddressRepository,
        links: LinkRepository,
    ) -> None:
        self.users = users
        self.addresses = addresses
        self.links = links

    async def create_user_with_address(
        self,
        *,
        first_name: str | None,
        last_name: str | None,
        email: str,
        country_id: str | None = None,
        city: str | None = None,
        state: str | None = None,
        zip_code: str | None = None,
    ) -> dict[str, Any]:
        """
        Create (or reuse) the address, then the user, then link them.

        If the user step raises `Conflict`, the address stays behind; it is
        harmless and will be reused by the next submission with the same fields.
        """
        fields = AddressFields(country_id=country_id, city=city, state=state, zip_code=zip_code)
        address_key = fields.key

        address = await self.addresses.create(fields)
        user = await self.users.create(first_name=first_name, last_name=last_name, email=email)
        link = await self.links.link(str(user["user_key"]), address_key)

        logger.info(
            "user_address_linked user_key=%s address_key=%s new_link=%s",
            user["user_key"],
            address_key,
            link is not None,
        )
        return {"user": user, "address": address, "link": link}

    async def get_user_with_address(self, email: str) -> dict[str, Any]:
        row = await self.users.find_with_address(email)
        if row is None:
            raise NotFound("User not found")
        return row

    async def update_user_names(self, *, email: str, first_name: str, last_name: str) -> dict[str, Any]:
        return await self.users.update_names(email, first_name, last_name)

    async def delete_user_cascade(self, email: str) -> dict[str, str]:
        """
        Delete a user, its links, and every address left without links.

        Order: links, then the orphan sweep (which only sees addresses as
        orphaned once the links are gone), then the user row.
        """
        user = await self.users.find_by_email(email)
        if user is None:
            return {"status": STATUS_NOT_FOUND, "message": "User not found"}

        user_key = str(user["user_key"])
        links_deleted = await self.links.delete_links_for_user(user_key)
        # TODO: scope the sweep to this user's former address keys once the
        # address table is large enough for the full anti-join to matter.
        addresses_deleted = await self.addresses.delete_orphans()
        await self.users.delete_by_key(user_key)

        logger.info(
            "user_deleted user_key=%s links_deleted=%s addresses_deleted=%s",
            user_key,
            links_deleted,
            addresses_deleted,
        )
        return {
            "status": STATUS_DELETED,
            "message": "User and associated address data deleted successfully",
        }


def lifecycle(db: Database) -> UserLifecycle:
    return UserLifecycle(
        users=UserRepository(db),
        addresses=AddressRepository(db),
        links=LinkRepository(db),
    )
