from abc import ABC, abstractmethod
from typing import Generic, TypeVar, Optional, Any, Dict
from sqlalchemy.orm import Session, DeclarativeBase

ModelType = TypeVar('ModelType', bound=DeclarativeBase)


class IRepository(ABC, Generic[ModelType]):
    """Base repository interface"""

    @abstractmethod
    def get(self, id: Any) -> Optional[ModelType]:
        """Get entity by ID"""
        pass

    @abstractmethod
    def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create new entity"""
        pass

    @abstractmethod
    def update(self, *, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """Update existing entity"""
        pass

    @abstractmethod
    def delete(self, *, id: Any) -> bool:
        """Delete entity"""
        pass


class BaseRepository(IRepository[ModelType], Generic[ModelType]):
    """Base repository implementation with common CRUD operations"""

    def __init__(self, model: type[ModelType], session: Session):
        self.model = model
        self.session = session

    def get(self, id: Any) -> Optional[ModelType]:
        """Get entity by ID"""
        return self.session.get(self.model, id)

    def create(self, *, obj_in: Dict[str, Any]) -> ModelType:
        """Create new entity"""
        db_obj = self.model(**obj_in)
        self.session.add(db_obj)
        self.session.flush()
        return db_obj

    def update(self, *, id: Any, obj_in: Dict[str, Any]) -> Optional[ModelType]:
        """Update existing entity"""
        db_obj = self.get(id)
        if not db_obj:
            return None

        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        self.session.flush()
        return db_obj

    def delete(self, *, id: Any) -> bool:
        """Delete entity"""
        db_obj = self.get(id)
        if not db_obj:
            return False

        self.session.delete(db_obj)
        self.session.flush()
        return True
