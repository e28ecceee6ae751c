"""
User persistence helpers.
"""

from __future__ import annotations

import logging
from typing import Any

from user_address_api.core import hashing
from user_address_api.core.db import Database, affected_rows
from user_address_api.core.errors import Conflict, NotFound, ValidationError
from user_address_api.core.results import Inserted, InsertResult, insert_outcome

logger = logging.getLogger(__name__)

USER_COLUMNS = "user_key, first_name, last_name, email, created_at, updated_at"

SELECT_USER_BY_EMAIL_SQL = f"""
    SELECT {USER_COLUMNS}
    FROM user_tbl
    WHERE email = $1
"""

SELECT_USER_BY_KEY_SQL = f"""
    SELECT {USER_COLUMNS}
    FROM user_tbl
    WHERE user_key = $1
"""

# No conflict target: covers both the user_key primary key and the unique email.
INSERT_USER_SQL = f"""
    INSERT INTO user_tbl (user_key, first_name, last_name, email)
    VALUES ($1, $2, $3, $4)
    ON CONFLICT DO NOTHING
    RETURNING {USER_COLUMNS}
"""

UPDATE_USER_NAMES_SQL = """
    UPDATE user_tbl
    SET first_name = $2,
        last_name = $3,
        updated_at = now()
    WHERE email = $1
    RETURNING email, first_name, last_name
"""

DELETE_USER_BY_KEY_SQL = """
    DELETE FROM user_tbl
    WHERE user_key = $1
"""

SELECT_USER_WITH_ADDRESS_SQL = """
    SELECT
      u.user_key,
      u.first_name,
      u.last_name,
      u.email,
      a.address_key,
      a.country_id,
      a.city,
      a.state,
      a.zip_code,
      u.created_at,
      u.updated_at
    FROM user_tbl u
    JOIN user_address_link_tbl l ON l.user_key = u.user_key
    JOIN address_tbl a ON a.address_key = l.address_key
    WHERE u.email = $1
    ORDER BY a.created_at, a.address_key
    LIMIT 1
"""


def _required(value: str | None) -> str:
    return (value or "").strip()


class UserRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def find_by_email(self, email: str) -> dict[str, Any] | None:
        return await self._db.fetch_one(SELECT_USER_BY_EMAIL_SQL, email)

    async def find_by_key(self, user_key: str) -> dict[str, Any] | None:
        return await self._db.fetch_one(SELECT_USER_BY_KEY_SQL, user_key)

    async def find_with_address(self, email: str) -> dict[str, Any] | None:
        return await self._db.fetch_one(SELECT_USER_WITH_ADDRESS_SQL, email)

    async def insert(
        self,
        *,
        user_key: str,
        first_name: str | None,
        last_name: str | None,
        email: str,
    ) -> InsertResult:
        row = await self._db.fetch_one(INSERT_USER_SQL, user_key, first_name, last_name, email)
        return insert_outcome(row)

    async def create(
        self,
        *,
        first_name: str | None,
        last_name: str | None,
        email: str,
    ) -> dict[str, Any]:
        """
        Return the user with this email, inserting it when new.

        Unlike addresses, a suppressed insert is an error: it means another
        writer registered the same email (or one differing only in case)
        after our lookup.
        """
        user_key = hashing.user_key(email)

        existing = await self.find_by_email(email)
        if existing is not None:
            return existing

        outcome = await self.insert(
            user_key=user_key,
            first_name=first_name,
            last_name=last_name,
            email=email,
        )
        if not isinstance(outcome, Inserted):
            logger.info("user_insert_conflict user_key=%s", user_key)
            raise Conflict("Email already exists")

        logger.info("user_created user_key=%s", user_key)
        return outcome.row

    async def update_names(self, email: str, first_name: str, last_name: str) -> dict[str, Any]:
        """
        Change a user's first/last name. Email and key never change.
        """
        email = _required(email)
        first_name = _required(first_name)
        last_name = _required(last_name)
        if not email or not first_name or not last_name:
            raise ValidationError("Missing required fields")

        if await self.find_by_email(email) is None:
            raise NotFound("User not found")

        row = await self._db.fetch_one(UPDATE_USER_NAMES_SQL, email, first_name, last_name)
        if row is None:
            # Deleted between the lookup and the update.
            raise NotFound("User not found")
        return {
            "email": str(row["email"]),
            "first_name": str(row["first_name"]),
            "last_name": str(row["last_name"]),
        }

    async def delete_by_key(self, user_key: str) -> bool:
        return affected_rows(await self._db.execute(DELETE_USER_BY_KEY_SQL, user_key)) > 0
