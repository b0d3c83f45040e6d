import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from client.errors import AlreadyExistsError

logger = logging.getLogger(__name__)

USERS_KEY = "rtlite_users"
SESSION_KEY = "rtlite_auth_user"
NEWS_KEY = "news_suggestions"
ORDERS_KEY = "orders"


@dataclass(frozen=True)
class Session:
    name: str
    email: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class LocalStore:
    """Durable key-value store kept as one JSON document on disk.

    Values are JSON-serialisable objects. Every write rewrites the whole
    document through a temporary file so a crash never leaves it half written.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable local store %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get_item(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)


class LocalPersistence:
    def __init__(self, store: LocalStore):
        self.store = store

    # users

    def list_users(self) -> List[Dict[str, Any]]:
        return list(self.store.get_item(USERS_KEY, []))

    def append_user(self, user: Dict[str, Any]) -> Dict[str, Any]:
        email = user["email"].strip().lower()
        users = self.list_users()
        if any(u.get("email", "").lower() == email for u in users):
            raise AlreadyExistsError()
        record = dict(user, email=email)
        users.append(record)
        self.store.set_item(USERS_KEY, users)
        return record

    def find_user(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        email = email.strip().lower()
        for user in self.list_users():
            if user.get("email", "").lower() == email and user.get("password") == password:
                return user
        return None

    # session

    def get_session(self) -> Optional[Session]:
        raw = self.store.get_item(SESSION_KEY)
        if not raw or not raw.get("email"):
            return None
        return Session(name=raw.get("name") or raw["email"], email=raw["email"])

    def set_session(self, session: Session) -> Session:
        self.store.set_item(SESSION_KEY, session.to_dict())
        return session

    def clear_session(self) -> None:
        self.store.remove_item(SESSION_KEY)

    # append-only mirrors

    def list_news_suggestions(self) -> List[Dict[str, Any]]:
        return list(self.store.get_item(NEWS_KEY, []))

    def append_news_suggestion(self, record: Dict[str, Any]) -> Dict[str, Any]:
        records = self.list_news_suggestions()
        records.append(record)
        self.store.set_item(NEWS_KEY, records)
        return record

    def list_orders(self) -> List[Dict[str, Any]]:
        return list(self.store.get_item(ORDERS_KEY, []))

    def append_order(self, record: Dict[str, Any]) -> Dict[str, Any]:
        records = self.list_orders()
        records.append(record)
        self.store.set_item(ORDERS_KEY, records)
        return record
