# backend/itineria/services/profile_store.py

import json
import re
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from itineria.core.config_loader import settings
from itineria.core.logger import logger
from itineria.db.itinerary_store import connect, execute_with_retry
from itineria.models.profile_models import Profile


NAME_KEY = "NAME_KEY"
INITIAL_KEY = "INITIAL_KEY"
EMAIL_KEY = "EMAIL_KEY"
USER_KEY = "USER_KEY"

# Only ".com" addresses are accepted
EMAIL_PATTERN = re.compile(r"[A-Z0-9a-z._%+-]+@[A-Za-z0-9.-]+\.com")


class KeyValueBackend(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


# --------------------------------------------------------
# Backends
# --------------------------------------------------------
class JsonFileBackend:
    """Flat string map persisted as a JSON object."""

    def __init__(self, path: Union[str, Path, None] = None):
        self.path = Path(path or settings.PROFILE_PATH)
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable profile file {self.path}: {e}")
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)} if isinstance(data, dict) else {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._data, ensure_ascii=False, indent=2), encoding="utf-8")


class SQLiteKeyValueBackend:
    """Flat string map in a `profile` table of the app database."""

    def __init__(self, db_path: Union[str, Path, None] = None):
        self.conn = connect(db_path or settings.DB_PATH)
        self.conn.execute("""
        CREATE TABLE IF NOT EXISTS profile (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
        """)
        self.conn.commit()

    def get(self, key: str) -> Optional[str]:
        cur = self.conn.cursor()
        cur.execute("SELECT value FROM profile WHERE key = ?", (key,))
        row = cur.fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        def _set():
            self.conn.execute("REPLACE INTO profile (key, value) VALUES (?, ?)", (key, value))
            self.conn.commit()

        execute_with_retry(_set)


# --------------------------------------------------------
# Validation / derivation
# --------------------------------------------------------
def validate_email(email: str) -> bool:
    return EMAIL_PATTERN.fullmatch(email) is not None


def derive_initials(full_name: str) -> Optional[str]:
    """
    Abbreviate a personal name to the initials of its first and last components.

    "Daniel La" -> "DL", "Cher" -> "C". Returns None when the text is not a
    name, i.e. it is empty or a component does not start with a letter.
    """
    components = full_name.split()
    if not components or not all(c[0].isalpha() for c in components):
        return None

    initials = components[0][0]
    if len(components) > 1:
        initials += components[-1][0]
    return initials.upper()


# --------------------------------------------------------
# Store
# --------------------------------------------------------
class ProfileStore:
    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    def _read(self, key: str) -> str:
        return self.backend.get(key) or ""

    @property
    def name(self) -> str:
        return self._read(NAME_KEY)

    @property
    def initials(self) -> str:
        return self._read(INITIAL_KEY)

    @property
    def email(self) -> str:
        return self._read(EMAIL_KEY)

    @property
    def username(self) -> str:
        return self._read(USER_KEY)

    def profile(self) -> Profile:
        return Profile(
            name=self.name,
            initials=self.initials,
            email=self.email,
            username=self.username,
        )

    def save(self, name: str, email: str, username: str) -> Profile:
        self.backend.set(NAME_KEY, name)
        self.backend.set(EMAIL_KEY, email)
        self.backend.set(USER_KEY, username)

        initials = derive_initials(name)
        if initials is not None:
            self.backend.set(INITIAL_KEY, initials)
        else:
            logger.debug(f"Could not derive initials from name {name!r}; keeping previous initials")

        return self.profile()
