from typing import Any, List, Optional
from sqlalchemy.orm import Session

from ...core import BaseRepository
from ...models import CartEntry


class CartEntryRepository(BaseRepository[CartEntry]):
    """Key/value rows backing the SQL cart store"""

    def __init__(self, session: Session):
        super().__init__(CartEntry, session)

    def read(self, key: str) -> Optional[List[Any]]:
        entry = self.get(key)
        return None if entry is None else entry.value

    def put(self, key: str, value: List[Any]) -> CartEntry:
        """Replace the whole value stored under key"""
        entry = self.update(id=key, obj_in={"value": value})
        if entry is None:
            entry = self.create(obj_in={"key": key, "value": value})
        return entry
