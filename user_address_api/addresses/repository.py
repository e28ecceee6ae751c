"""
Address persistence (raw SQL).

Addresses are content-addressed: the primary key is a hash of the normalized
fields, so the first write for a given key wins and later writes converge
onto it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from user_address_api.core import hashing
from user_address_api.core.db import Database, affected_rows
from user_address_api.core.results import InsertResult, Inserted, insert_outcome

logger = logging.getLogger(__name__)

ADDRESS_COLUMNS = "address_key, country_id, city, state, zip_code, created_at, updated_at"

SELECT_ADDRESS_BY_KEY_SQL = f"""
    SELECT {ADDRESS_COLUMNS}
    FROM address_tbl
    WHERE address_key = $1
"""

INSERT_ADDRESS_SQL = f"""
    INSERT INTO address_tbl (address_key, country_id, city, state, zip_code)
    VALUES ($1, $2, $3, $4, $5)
    ON CONFLICT (address_key) DO NOTHING
    RETURNING {ADDRESS_COLUMNS}
"""

# Global sweep: any address no link row points at, not only the ones a
# particular user was linked to.
DELETE_ORPHAN_ADDRESSES_SQL = """
    DELETE FROM address_tbl
    WHERE address_key NOT IN (
        SELECT address_key
        FROM user_address_link_tbl
    )
"""


@dataclass(frozen=True)
class AddressFields:
    country_id: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None

    @property
    def key(self) -> str:
        return hashing.address_key(self.country_id, self.city, self.state, self.zip_code)


class AddressRepository:
    def __init__(self, db: Database) -> None:
        self._db = db

    async def find_by_key(self, address_key: str) -> dict[str, Any] | None:
        return await self._db.fetch_one(SELECT_ADDRESS_BY_KEY_SQL, address_key)

    async def insert(self, address_key: str, fields: AddressFields) -> InsertResult:
        row = await self._db.fetch_one(
            INSERT_ADDRESS_SQL,
            address_key,
            fields.country_id,
            fields.city,
            fields.state,
            fields.zip_code,
        )
        return insert_outcome(row)

    async def create(self, fields: AddressFields) -> dict[str, Any] | None:
        """
        Return the stored address for these fields, inserting it when new.

        An existing row is returned unchanged even if the incoming fields differ
        in case. If another writer inserted the same key between our lookup and
        our insert, the row is re-read; a `None` result is tolerated.
        """
        address_key = fields.key

        existing = await self.find_by_key(address_key)
        if existing is not None:
            return existing

        outcome = await self.insert(address_key, fields)
        if isinstance(outcome, Inserted):
            logger.info("address_created address_key=%s", address_key)
            return outcome.row

        logger.info("address_insert_raced address_key=%s", address_key)
        return await self.find_by_key(address_key)

    async def delete_orphans(self) -> int:
        """
        Delete every address that no link row references. Returns the row count.
        """
        deleted = affected_rows(await self._db.execute(DELETE_ORPHAN_ADDRESSES_SQL))
        if deleted:
            logger.info("orphan_addresses_deleted count=%s", deleted)
        return deleted
