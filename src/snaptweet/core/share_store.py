"""SQLite store for shared tweet records."""

from __future__ import annotations

import json
import logging
import re
import secrets
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from snaptweet.core.errors import StoreError
from snaptweet.core.models import ShareRequest, SharedTweetRecord

logger = logging.getLogger(__name__)

_SHARE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


def is_valid_share_id(share_id: str | None) -> bool:
    """Return ``True`` if *share_id* has the shape of an issued id."""
    return bool(share_id) and _SHARE_ID_PATTERN.fullmatch(share_id) is not None


def new_share_id() -> str:
    """Generate a short, URL-safe, unguessable share id."""
    return secrets.token_urlsafe(9)


class ShareStore:
    """Persist and look up share records using SQLite.

    Records are insert-only.  There is no update, listing, or delete
    operation; every read is a primary-key point lookup.

    List-valued columns (images, menus, variations) are stored as JSON text,
    with image bytes base64-encoded.
    """

    def __init__(self, db_path: Path):
        """Initialize the share store.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._initialize_db()
        logger.info(f"Initialized share store at {self.db_path}")

    def _initialize_db(self) -> None:
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS shared_tweets (
                        id TEXT PRIMARY KEY,
                        images TEXT NOT NULL,
                        restaurant_name TEXT,
                        menus TEXT NOT NULL,
                        satisfaction TEXT NOT NULL,
                        variations TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    )
                    """)
                conn.commit()
        except sqlite3.Error as e:
            raise StoreError(f"Could not initialize share store: {e}") from e

    def create_share(self, payload: ShareRequest) -> str:
        """Insert one share record.

        Each call inserts a new row, so submitting the same payload twice
        yields two distinct ids.

        Args:
            payload: The original request plus its generated variations.

        Returns:
            The newly assigned share id.

        Raises:
            StoreError: If the insert fails.
        """
        share_id = new_share_id()
        data = payload.model_dump(mode="json")
        created_at = datetime.now(timezone.utc).isoformat()

        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO shared_tweets
                        (id, images, restaurant_name, menus, satisfaction, variations, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        share_id,
                        json.dumps(data["images"]),
                        payload.restaurant_name,
                        json.dumps(data["menus"], ensure_ascii=False),
                        payload.satisfaction.value,
                        json.dumps(data["variations"], ensure_ascii=False),
                        created_at,
                    ),
                )
                conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error creating share: {e}")
            raise StoreError(f"Could not create share: {e}") from e

        logger.info(f"Created share {share_id}")
        return share_id

    def get_share(self, share_id: str) -> SharedTweetRecord | None:
        """Fetch a share record by exact id.

        Args:
            share_id: Id returned by :meth:`create_share`.

        Returns:
            The record, or ``None`` if no row matches.

        Raises:
            StoreError: If the lookup fails or the stored row is unreadable.
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    """
                    SELECT id, images, restaurant_name, menus, satisfaction, variations, created_at
                    FROM shared_tweets WHERE id = ? LIMIT 1
                    """,
                    (share_id,),
                )
                row = cursor.fetchone()
        except sqlite3.Error as e:
            logger.error(f"Error fetching share {share_id}: {e}")
            raise StoreError(f"Could not fetch share: {e}") from e

        if row is None:
            return None

        record_id, images, restaurant_name, menus, satisfaction, variations, created_at = row
        try:
            return SharedTweetRecord(
                id=record_id,
                images=json.loads(images),
                restaurant_name=restaurant_name,
                menus=json.loads(menus),
                satisfaction=satisfaction,
                variations=json.loads(variations),
                created_at=created_at,
            )
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(f"Corrupt share row {share_id}: {e}")
            raise StoreError(f"Stored share {share_id} is unreadable") from e
