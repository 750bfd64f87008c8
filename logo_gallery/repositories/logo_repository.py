"""Logo repository for database CRUD operations."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from logo_gallery.services.database import Database

logger = structlog.get_logger(__name__)

_SUMMARY_COLUMNS = (
    "id, owner_id, title, description, tags, file_name, content_type, "
    "file_size, width, height, content_hash, image_features, created_at"
)


class LogoRepository:
    """Repository for logo data access."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def store_logo(self, data: dict[str, Any]) -> int:
        """Insert a logo row. Returns the new logo ID.

        A UNIQUE(content_hash, owner_id) violation propagates as
        sqlite3.IntegrityError so the caller can report a conflict.
        """
        with self.db.transaction() as cursor:
            cursor.execute(
                """INSERT INTO logos
                   (owner_id, title, description, tags, file_name, content_type,
                    file_size, width, height, content_hash, image_features,
                    file_data, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    data["owner_id"],
                    data["title"],
                    data.get("description"),
                    json.dumps(data.get("tags") or []),
                    data["file_name"],
                    data["content_type"],
                    data["file_size"],
                    data["width"],
                    data["height"],
                    data["content_hash"],
                    data["image_features"],
                    data["file_data"],
                    data["created_at"],
                ),
            )
        logger.debug("logo_stored", logo_id=cursor.lastrowid, owner_id=data["owner_id"])
        return cursor.lastrowid or 0

    def get_logo(self, logo_id: int) -> dict[str, Any] | None:
        """Get a logo by ID, without the raw file bytes."""
        row = self.db.fetchone(f"SELECT {_SUMMARY_COLUMNS} FROM logos WHERE id = ?", (logo_id,))
        return dict(row) if row else None

    def get_logo_file(self, logo_id: int) -> bytes | None:
        """Get the raw uploaded bytes of a logo."""
        row = self.db.fetchone("SELECT file_data FROM logos WHERE id = ?", (logo_id,))
        return bytes(row["file_data"]) if row else None

    def get_feature_records(self) -> list[dict[str, Any]]:
        """Get every stored record the duplicate guard compares against."""
        rows = self.db.fetchall(
            "SELECT id, owner_id, content_hash, image_features FROM logos ORDER BY id"
        )
        return [dict(row) for row in rows]

    def get_logos_by_owner(self, owner_id: str) -> list[dict[str, Any]]:
        """Get all logos uploaded by an owner, newest first."""
        rows = self.db.fetchall(
            f"SELECT {_SUMMARY_COLUMNS} FROM logos WHERE owner_id = ? "
            "ORDER BY created_at DESC, id DESC",
            (owner_id,),
        )
        return [dict(row) for row in rows]

    def get_all_logos(self) -> list[dict[str, Any]]:
        """Get all logos, newest first."""
        rows = self.db.fetchall(
            f"SELECT {_SUMMARY_COLUMNS} FROM logos ORDER BY created_at DESC, id DESC"
        )
        return [dict(row) for row in rows]

    def get_logo_count(self) -> int:
        """Get total number of logos."""
        row = self.db.fetchone("SELECT COUNT(*) as count FROM logos")
        return row["count"] if row else 0

    def delete_logo(self, logo_id: int) -> bool:
        """Delete a logo. Returns True if a row was removed."""
        cursor = self.db.execute("DELETE FROM logos WHERE id = ?", (logo_id,))
        self.db.connection.commit()
        return cursor.rowcount > 0
