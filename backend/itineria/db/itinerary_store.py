# backend/itineria/db/itinerary_store.py

import sqlite3
import time
from pathlib import Path
from datetime import datetime
from typing import Optional, List, Tuple, Union
from uuid import uuid4

from itineria.core.config_loader import settings
from itineria.core.logger import logger
from itineria.models.itinerary_models import Itinerary, PlannerItem
from itineria.utils.time_utils import now


# Retry configuration
MAX_RETRIES = 5
RETRY_DELAY = 0.1  # 100ms

ITINERARY = "itinerary"
PLANNER_ITEM = "planner_item"

_UNSET = object()


def connect(db_path: Union[str, Path]) -> sqlite3.Connection:
    """Open a SQLite connection configured the way every store in the app expects."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(
        str(db_path),
        check_same_thread=False,
        timeout=30.0
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA busy_timeout=30000")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def execute_with_retry(operation, *args, **kwargs):
    """Execute a database operation, retrying while the database is locked."""
    for attempt in range(MAX_RETRIES):
        try:
            return operation(*args, **kwargs)
        except sqlite3.OperationalError as e:
            if "locked" in str(e).lower() and attempt < MAX_RETRIES - 1:
                time.sleep(RETRY_DELAY * (attempt + 1))
                continue
            raise


def _to_db(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _from_db(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class ItineraryStore:
    """
    Itineraries and their planner items.

    Photos are kept in their own table keyed by (owner_kind, owner_id) so the
    itinerary and planner item rows stay small when listed.
    """

    def __init__(self, db_path: Union[str, Path, None] = None):
        self.db_path = Path(db_path or settings.DB_PATH)
        self.conn = connect(self.db_path)
        self._init_tables()

    def close(self):
        self.conn.close()

    # ----------------------------------------------------------------------
    # CREATE TABLES
    # ----------------------------------------------------------------------
    def _init_tables(self):
        cur = self.conn.cursor()

        cur.execute("""
        CREATE TABLE IF NOT EXISTS itineraries (
            id TEXT PRIMARY KEY,
            trip_name TEXT NOT NULL,
            trip_start_date TEXT NOT NULL,
            trip_end_date TEXT NOT NULL,
            trip_description TEXT NOT NULL DEFAULT '',
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        );
        """)

        cur.execute("""
        CREATE TABLE IF NOT EXISTS planner_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            itinerary_id TEXT,
            position INTEGER NOT NULL,
            destination TEXT NOT NULL,
            start_date TEXT,
            end_date TEXT,
            notes TEXT NOT NULL DEFAULT '',
            FOREIGN KEY (itinerary_id) REFERENCES itineraries(id) ON DELETE CASCADE
        );
        """)

        # Out-of-line blob storage for itinerary covers and planner item photos
        cur.execute("""
        CREATE TABLE IF NOT EXISTS photos (
            owner_kind TEXT NOT NULL,
            owner_id TEXT NOT NULL,
            data BLOB NOT NULL,
            updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            PRIMARY KEY (owner_kind, owner_id)
        );
        """)

        cur.execute("CREATE INDEX IF NOT EXISTS idx_items_itinerary ON planner_items(itinerary_id);")

        self.conn.commit()

    # ----------------------------------------------------------------------
    # ROW MAPPING
    # ----------------------------------------------------------------------
    @staticmethod
    def _itinerary_from_row(row: sqlite3.Row) -> Itinerary:
        return Itinerary(
            id=row["id"],
            trip_name=row["trip_name"],
            trip_start_date=_from_db(row["trip_start_date"]),
            trip_end_date=_from_db(row["trip_end_date"]),
            trip_description=row["trip_description"],
        )

    @staticmethod
    def _item_from_row(row: sqlite3.Row) -> PlannerItem:
        return PlannerItem(
            id=row["id"],
            destination=row["destination"],
            start_date=_from_db(row["start_date"]),
            end_date=_from_db(row["end_date"]),
            notes=row["notes"],
            itinerary_id=row["itinerary_id"],
        )

    # ----------------------------------------------------------------------
    # ITINERARIES
    # ----------------------------------------------------------------------
    def create_itinerary(
        self,
        trip_name: str,
        trip_start_date: Optional[datetime] = None,
        trip_end_date: Optional[datetime] = None,
        trip_description: str = "",
    ) -> Itinerary:
        created = now()
        itinerary = Itinerary(
            id=str(uuid4()),
            trip_name=trip_name,
            trip_start_date=trip_start_date or created,
            trip_end_date=trip_end_date or created,
            trip_description=trip_description,
            items=[],
        )

        def _create_itinerary():
            cur = self.conn.cursor()
            cur.execute("""
            INSERT INTO itineraries (id, trip_name, trip_start_date, trip_end_date, trip_description)
            VALUES (?, ?, ?, ?, ?)
            """, (
                itinerary.id,
                itinerary.trip_name,
                _to_db(itinerary.trip_start_date),
                _to_db(itinerary.trip_end_date),
                itinerary.trip_description,
            ))
            self.conn.commit()

        execute_with_retry(_create_itinerary)
        logger.info(f"Created itinerary {itinerary.id} ({trip_name})")
        return itinerary

    def get_itinerary(self, itinerary_id: str) -> Optional[Itinerary]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM itineraries WHERE id = ?", (itinerary_id,))
        row = cur.fetchone()
        if not row:
            return None

        itinerary = self._itinerary_from_row(row)
        itinerary.photo = self._read_photo(ITINERARY, itinerary.id)
        itinerary.items = self.list_planner_items(itinerary)
        for item in itinerary.items:
            item.photo = self._read_photo(PLANNER_ITEM, str(item.id))
        return itinerary

    def list_itineraries(self, name: Optional[str] = None) -> List[Itinerary]:
        """
        All itineraries ordered by start date, without photos.

        Args:
            name: optional case-insensitive substring filter on the trip name
        """
        cur = self.conn.cursor()
        if name:
            cur.execute("""
            SELECT * FROM itineraries
            WHERE trip_name LIKE ? ESCAPE '\\'
            ORDER BY trip_start_date ASC, created_at ASC
            """, (f"%{_escape_like(name)}%",))
        else:
            cur.execute("""
            SELECT * FROM itineraries
            ORDER BY trip_start_date ASC, created_at ASC
            """)
        rows = cur.fetchall()

        itineraries = []
        for r in rows:
            itinerary = self._itinerary_from_row(r)
            itinerary.items = self.list_planner_items(itinerary)
            itineraries.append(itinerary)
        return itineraries

    def update_itinerary(
        self,
        itinerary: Itinerary,
        trip_name: Optional[str] = None,
        trip_start_date: Optional[datetime] = None,
        trip_end_date: Optional[datetime] = None,
        trip_description: Optional[str] = None,
    ) -> Itinerary:
        """Settings edit. Every itinerary field is required, so None leaves a field unchanged."""
        if trip_name is not None:
            itinerary.trip_name = trip_name
        if trip_start_date is not None:
            itinerary.trip_start_date = trip_start_date
        if trip_end_date is not None:
            itinerary.trip_end_date = trip_end_date
        if trip_description is not None:
            itinerary.trip_description = trip_description

        def _update_itinerary():
            cur = self.conn.cursor()
            cur.execute("""
            UPDATE itineraries
            SET trip_name = ?, trip_start_date = ?, trip_end_date = ?, trip_description = ?
            WHERE id = ?
            """, (
                itinerary.trip_name,
                _to_db(itinerary.trip_start_date),
                _to_db(itinerary.trip_end_date),
                itinerary.trip_description,
                itinerary.id,
            ))
            self.conn.commit()

        execute_with_retry(_update_itinerary)
        return itinerary

    def delete_itinerary(self, itinerary: Itinerary):
        """Delete the itinerary, every planner item it owns and all their photos in one transaction."""
        def _delete_itinerary():
            cur = self.conn.cursor()
            try:
                cur.execute("BEGIN")
                cur.execute("""
                DELETE FROM photos
                WHERE owner_kind = ?
                  AND owner_id IN (SELECT CAST(id AS TEXT) FROM planner_items WHERE itinerary_id = ?)
                """, (PLANNER_ITEM, itinerary.id))
                cur.execute("DELETE FROM planner_items WHERE itinerary_id = ?", (itinerary.id,))
                removed_items = cur.rowcount
                cur.execute(
                    "DELETE FROM photos WHERE owner_kind = ? AND owner_id = ?",
                    (ITINERARY, itinerary.id),
                )
                cur.execute("DELETE FROM itineraries WHERE id = ?", (itinerary.id,))
                self.conn.commit()
            except sqlite3.Error:
                self.conn.rollback()
                raise
            return removed_items

        removed = execute_with_retry(_delete_itinerary)
        itinerary.items = []
        logger.info(f"Deleted itinerary {itinerary.id} with {removed} planner items")

    # ----------------------------------------------------------------------
    # PLANNER ITEMS
    # ----------------------------------------------------------------------
    def add_planner_item(
        self,
        itinerary: Itinerary,
        destination: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        notes: str = "",
    ) -> PlannerItem:
        def _add_planner_item():
            cur = self.conn.cursor()
            cur.execute(
                "SELECT COALESCE(MAX(position), -1) + 1 AS next FROM planner_items WHERE itinerary_id = ?",
                (itinerary.id,),
            )
            position = cur.fetchone()["next"]
            cur.execute("""
            INSERT INTO planner_items (itinerary_id, position, destination, start_date, end_date, notes)
            VALUES (?, ?, ?, ?, ?, ?)
            """, (
                itinerary.id, position, destination,
                _to_db(start_date), _to_db(end_date), notes,
            ))
            self.conn.commit()
            return cur.lastrowid

        item_id = execute_with_retry(_add_planner_item)
        item = PlannerItem(
            id=item_id,
            destination=destination,
            start_date=start_date,
            end_date=end_date,
            notes=notes,
            itinerary_id=itinerary.id,
        )
        itinerary.items.append(item)
        return item

    def get_planner_item(self, item_id: int) -> Optional[PlannerItem]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM planner_items WHERE id = ?", (item_id,))
        row = cur.fetchone()
        if not row:
            return None
        item = self._item_from_row(row)
        item.photo = self._read_photo(PLANNER_ITEM, str(item.id))
        return item

    def list_planner_items(self, itinerary: Itinerary) -> List[PlannerItem]:
        cur = self.conn.cursor()
        cur.execute("""
        SELECT * FROM planner_items
        WHERE itinerary_id = ?
        ORDER BY position ASC
        """, (itinerary.id,))
        return [self._item_from_row(r) for r in cur.fetchall()]

    def update_planner_item(
        self,
        item: PlannerItem,
        destination: Optional[str] = None,
        start_date=_UNSET,
        end_date=_UNSET,
        notes: Optional[str] = None,
    ) -> PlannerItem:
        # Planner dates are optional: passing None clears them
        if destination is not None:
            item.destination = destination
        if start_date is not _UNSET:
            item.start_date = start_date
        if end_date is not _UNSET:
            item.end_date = end_date
        if notes is not None:
            item.notes = notes

        def _update_item():
            cur = self.conn.cursor()
            cur.execute("""
            UPDATE planner_items
            SET destination = ?, start_date = ?, end_date = ?, notes = ?
            WHERE id = ?
            """, (
                item.destination, _to_db(item.start_date), _to_db(item.end_date),
                item.notes, item.id,
            ))
            self.conn.commit()

        execute_with_retry(_update_item)
        return item

    def delete_planner_item(self, item: PlannerItem):
        def _delete_item():
            cur = self.conn.cursor()
            cur.execute(
                "DELETE FROM photos WHERE owner_kind = ? AND owner_id = ?",
                (PLANNER_ITEM, str(item.id)),
            )
            cur.execute("DELETE FROM planner_items WHERE id = ?", (item.id,))
            self.conn.commit()

        execute_with_retry(_delete_item)

    # ----------------------------------------------------------------------
    # PHOTOS
    # ----------------------------------------------------------------------
    @staticmethod
    def _owner(entity: Union[Itinerary, PlannerItem]) -> Tuple[str, str]:
        if isinstance(entity, Itinerary):
            return ITINERARY, entity.id
        if isinstance(entity, PlannerItem):
            return PLANNER_ITEM, str(entity.id)
        raise TypeError(f"Photos can only be attached to itineraries or planner items, not {type(entity).__name__}")

    def _read_photo(self, owner_kind: str, owner_id: str) -> Optional[bytes]:
        cur = self.conn.cursor()
        cur.execute(
            "SELECT data FROM photos WHERE owner_kind = ? AND owner_id = ?",
            (owner_kind, owner_id),
        )
        row = cur.fetchone()
        return bytes(row["data"]) if row else None

    def get_photo(self, entity: Union[Itinerary, PlannerItem]) -> Optional[bytes]:
        return self._read_photo(*self._owner(entity))

    def update_photo(self, entity: Union[Itinerary, PlannerItem], data: Optional[bytes]):
        """Replace the entity's photo; None removes it."""
        owner_kind, owner_id = self._owner(entity)

        def _update_photo():
            cur = self.conn.cursor()
            if data is None:
                cur.execute(
                    "DELETE FROM photos WHERE owner_kind = ? AND owner_id = ?",
                    (owner_kind, owner_id),
                )
            else:
                cur.execute("""
                REPLACE INTO photos (owner_kind, owner_id, data, updated_at)
                VALUES (?, ?, ?, ?)
                """, (owner_kind, owner_id, sqlite3.Binary(data), _to_db(now())))
            self.conn.commit()

        execute_with_retry(_update_photo)
        entity.photo = data


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
