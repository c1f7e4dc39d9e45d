"""Cart persistence backends.

Each store holds one keyed entry: a JSON array of cart bookings that is read
and replaced wholesale. ``clear`` removes the entry instead of writing an
empty array.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import sessionmaker

from ..core import get_settings
from .database import session_scope
from .repositories import CartEntryRepository

logger = logging.getLogger(__name__)


class CartStore(ABC):
    """Key/value storage for a single cart"""

    def __init__(self, key: Optional[str] = None):
        self.key = key or get_settings().CART_STORAGE_KEY

    @abstractmethod
    def load(self) -> List[Dict[str, Any]]:
        """Return the stored bookings, or an empty list"""
        pass

    @abstractmethod
    def save(self, bookings: List[Dict[str, Any]]) -> None:
        """Replace the stored bookings"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove the entry"""
        pass

    def exists(self) -> bool:
        return bool(self.load())


class MemoryCartStore(CartStore):
    """Process-local store; shares its dict when one is passed in"""

    def __init__(self, key: Optional[str] = None, data: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        super().__init__(key)
        self.data = {} if data is None else data

    def load(self) -> List[Dict[str, Any]]:
        return json.loads(json.dumps(self.data.get(self.key, [])))

    def save(self, bookings: List[Dict[str, Any]]) -> None:
        self.data[self.key] = json.loads(json.dumps(bookings))

    def clear(self) -> None:
        self.data.pop(self.key, None)

    def exists(self) -> bool:
        return self.key in self.data


class JsonFileCartStore(CartStore):
    """One JSON object on disk mapping keys to booking arrays"""

    def __init__(self, path: str, key: Optional[str] = None):
        super().__init__(key)
        self.path = path

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            logger.warning("Cart file %s is unreadable; starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Cart file %s does not hold an object; starting empty", self.path)
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp_path, self.path)

    def load(self) -> List[Dict[str, Any]]:
        value = self._read_all().get(self.key)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Cart entry %s in %s is not a list; ignoring it", self.key, self.path)
            return []
        return value

    def save(self, bookings: List[Dict[str, Any]]) -> None:
        data = self._read_all()
        data[self.key] = bookings
        self._write_all(data)

    def clear(self) -> None:
        data = self._read_all()
        if data.pop(self.key, None) is not None:
            self._write_all(data)

    def exists(self) -> bool:
        return self.key in self._read_all()


class SqlCartStore(CartStore):
    """Entry stored as a row in the ``cart_entries`` table"""

    def __init__(self, session_factory: sessionmaker, key: Optional[str] = None):
        super().__init__(key)
        self.session_factory = session_factory

    def load(self) -> List[Dict[str, Any]]:
        with session_scope(self.session_factory) as session:
            value = CartEntryRepository(session).read(self.key)
        if value is None:
            return []
        if not isinstance(value, list):
            logger.warning("Cart entry %s is not a list; ignoring it", self.key)
            return []
        return value

    def save(self, bookings: List[Dict[str, Any]]) -> None:
        with session_scope(self.session_factory) as session:
            CartEntryRepository(session).put(self.key, bookings)

    def clear(self) -> None:
        with session_scope(self.session_factory) as session:
            CartEntryRepository(session).delete(id=self.key)

    def exists(self) -> bool:
        with session_scope(self.session_factory) as session:
            return CartEntryRepository(session).get(self.key) is not None
