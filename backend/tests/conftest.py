import os
import tempfile

import pytest
import requests

# Module-level stores in the API routers read these on import
_TMP_DIR = tempfile.mkdtemp(prefix="itineria-tests-")
os.environ.setdefault("DB_PATH", os.path.join(_TMP_DIR, "data.sqlite3"))
os.environ.setdefault("log_dir", os.path.join(_TMP_DIR, "logs"))
os.environ.setdefault("PROFILE_PATH", os.path.join(_TMP_DIR, "profile.json"))
os.environ.setdefault("GOOGLE_MAPS_API_KEY", "test-key")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")

from itineria.db.itinerary_store import ItineraryStore  # noqa: E402


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, content=b"", headers=None, json_error=None):
        self.json_error = json_error
        self.status_code = status_code
        self._json_data = json_data
        self.content = content
        self.headers = headers or {}
        self.text = content.decode("utf-8", errors="replace") if content else ""

    def json(self):
        if self.json_error is not None:
            raise self.json_error
        if self._json_data is None:
            raise ValueError("No JSON object could be decoded")
        return self._json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Stands in for requests.Session; replays queued responses and records URLs."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if not self.responses:
            raise requests.exceptions.ConnectionError("no response queued")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def store(tmp_path):
    s = ItineraryStore(tmp_path / "itineraries.sqlite3")
    yield s
    s.close()
