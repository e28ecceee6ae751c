"""
User <-> address link persistence.
"""

from __future__ import annotations

from typing import Any

from user_address_api.core.db import Database, affected_rows

INSERT_LINK_SQL = """
    INSERT INTO user_address_link_tbl (user_key, address_key)
    VALUES ($1, $2)
    ON CONFLICT (user_key, address_key) DO NOTHING
    RETURNING user_key, address_key
"""

DELETE_LINKS_FOR_USER_SQL = """
    DELETE FROM user_address_link_tbl
    WHERE user_key = $1
"""

SELECT_ADDRESS_KEYS_FOR_USER_SQL = """
    SELECT address_key
    FROM user_address_link_tbl
    WHERE user_key = $1
    ORDER BY address_key
"""


class LinkRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def link(self, user_key: str, address_key: str) -> dict[str, Any] | None:
        """
        Link a user to an address. Returns the new link row, or None when the
        pair was already linked.
        """
        return await self._db.fetch_one(INSERT_LINK_SQL, user_key, address_key)

    async def delete_links_for_user(self, user_key: str) -> int:
        return affected_rows(await self._db.execute(DELETE_LINKS_FOR_USER_SQL, user_key))

    async def address_keys_for_user(self, user_key: str) -> list[str]:
        rows = await self._db.fetch_all(SELECT_ADDRESS_KEYS_FOR_USER_SQL, user_key)
        return [str(row["address_key"]) for row in rows]
