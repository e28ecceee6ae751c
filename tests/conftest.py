"""
Shared fixtures.

`FakeDatabase` stands in for `core.db.Database`. It keeps the three tables in
memory and dispatches on the SQL constants the repositories use, so tests
exercise the real repository and lifecycle code without Postgres.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from user_address_api.addresses import repository as address_sql
from user_address_api.addresses.repository import AddressRepository
from user_address_api.core.errors import StorageUnavailable
from user_address_api.links import repository as link_sql
from user_address_api.links.repository import LinkRepository
from user_address_api.users import repository as user_sql
from user_address_api.users import service
from user_address_api.users.repository import UserRepository

STATEMENT_NAMES = {
    address_sql.SELECT_ADDRESS_BY_KEY_SQL: "select_address",
    address_sql.INSERT_ADDRESS_SQL: "insert_address",
    address_sql.DELETE_ORPHAN_ADDRESSES_SQL: "delete_orphan_addresses",
    user_sql.SELECT_USER_BY_EMAIL_SQL: "select_user_by_email",
    user_sql.SELECT_USER_BY_KEY_SQL: "select_user_by_key",
    user_sql.INSERT_USER_SQL: "insert_user",
    user_sql.UPDATE_USER_NAMES_SQL: "update_user_names",
    user_sql.DELETE_USER_BY_KEY_SQL: "delete_user",
    user_sql.SELECT_USER_WITH_ADDRESS_SQL: "select_user_with_address",
    link_sql.INSERT_LINK_SQL: "insert_link",
    link_sql.DELETE_LINKS_FOR_USER_SQL: "delete_links",
    link_sql.SELECT_ADDRESS_KEYS_FOR_USER_SQL: "select_link_address_keys",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FakeDatabase:
    def __init__(self) -> None:
        self.addresses: dict[str, dict[str, Any]] = {}
        self.users: dict[str, dict[str, Any]] = {}
        self.links: list[tuple[str, str]] = []
        self.calls: list[str] = []
        # statement name -> exception to raise instead of running it
        self.failures: dict[str, BaseException] = {}
        # statement name -> callback run just before the statement
        self.before: dict[str, Callable[[tuple[Any, ...]], None]] = {}

    # -- executor surface -------------------------------------------------

    async def fetch_one(self, sql: str, *args: Any) -> dict[str, Any] | None:
        name = self._enter(sql, args)
        handler = getattr(self, f"_one_{name}")
        return handler(*args)

    async def fetch_all(self, sql: str, *args: Any) -> list[dict[str, Any]]:
        name = self._enter(sql, args)
        handler = getattr(self, f"_all_{name}")
        return handler(*args)

    async def execute(self, sql: str, *args: Any) -> str:
        name = self._enter(sql, args)
        handler = getattr(self, f"_exec_{name}")
        return handler(*args)

    def _enter(self, sql: str, args: tuple[Any, ...]) -> str:
        name = STATEMENT_NAMES[sql]
        self.calls.append(name)
        if name in self.failures:
            raise self.failures[name]
        if name in self.before:
            self.before[name](args)
        return name

    # -- seeding helpers --------------------------------------------------

    def put_address(self, address_key: str, country_id, city, state, zip_code) -> dict[str, Any]:
        row = {
            "address_key": address_key,
            "country_id": country_id,
            "city": city,
            "state": state,
            "zip_code": zip_code,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.addresses[address_key] = row
        return row

    def put_user(self, user_key: str, first_name, last_name, email: str) -> dict[str, Any]:
        row = {
            "user_key": user_key,
            "first_name": first_name,
            "last_name": last_name,
            "email": email,
            "created_at": _now(),
            "updated_at": _now(),
        }
        self.users[user_key] = row
        return row

    # -- statement handlers -----------------------------------------------

    def _one_select_address(self, address_key):
        row = self.addresses.get(address_key)
        return dict(row) if row is not None else None

    def _one_insert_address(self, address_key, country_id, city, state, zip_code):
        if address_key in self.addresses:
            return None
        return dict(self.put_address(address_key, country_id, city, state, zip_code))

    def _exec_delete_orphan_addresses(self):
        linked = {address_key for (_, address_key) in self.links}
        orphans = [key for key in self.addresses if key not in linked]
        for key in orphans:
            del self.addresses[key]
        return f"DELETE {len(orphans)}"

    def _one_select_user_by_email(self, email):
        for row in self.users.values():
            if row["email"] == email:
                return dict(row)
        return None

    def _one_select_user_by_key(self, user_key):
        row = self.users.get(user_key)
        return dict(row) if row is not None else None

    def _one_insert_user(self, user_key, first_name, last_name, email):
        if user_key in self.users or any(row["email"] == email for row in self.users.values()):
            return None
        return dict(self.put_user(user_key, first_name, last_name, email))

    def _one_update_user_names(self, email, first_name, last_name):
        for row in self.users.values():
            if row["email"] == email:
                row["first_name"] = first_name
                row["last_name"] = last_name
                row["updated_at"] = _now()
                return {"email": email, "first_name": first_name, "last_name": last_name}
        return None

    def _exec_delete_user(self, user_key):
        if self.users.pop(user_key, None) is None:
            return "DELETE 0"
        return "DELETE 1"

    def _one_select_user_with_address(self, email):
        user = self._one_select_user_by_email(email)
        if user is None:
            return None
        for user_key, address_key in self.links:
            if user_key == user["user_key"] and address_key in self.addresses:
                address = self.addresses[address_key]
                return {
                    **user,
                    "address_key": address_key,
                    "country_id": address["country_id"],
                    "city": address["city"],
                    "state": address["state"],
                    "zip_code": address["zip_code"],
                }
        return None

    def _one_insert_link(self, user_key, address_key):
        if (user_key, address_key) in self.links:
            return None
        self.links.append((user_key, address_key))
        return {"user_key": user_key, "address_key": address_key}

    def _exec_delete_links(self, user_key):
        before = len(self.links)
        self.links = [link for link in self.links if link[0] != user_key]
        return f"DELETE {before - len(self.links)}"

    def _all_select_link_address_keys(self, user_key):
        return [{"address_key": a} for (u, a) in sorted(self.links) if u == user_key]


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def addresses(fake_db: FakeDatabase) -> AddressRepository:
    return AddressRepository(fake_db)


@pytest.fixture
def users(fake_db: FakeDatabase) -> UserRepository:
    return UserRepository(fake_db)


@pytest.fixture
def links(fake_db: FakeDatabase) -> LinkRepository:
    return LinkRepository(fake_db)


@pytest.fixture
def lifecycle(fake_db: FakeDatabase) -> service.UserLifecycle:
    return service.lifecycle(fake_db)


@pytest.fixture
def storage_down() -> StorageUnavailable:
    return StorageUnavailable("Database call failed: connection refused")
