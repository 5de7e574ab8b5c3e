from sqlalchemy.orm import Session
from typing import Generic, Type, TypeVar, List, Optional, Dict, Any
from app.models.base import BaseModel

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Base repository with common CRUD operations."""

    def __init__(self, model: Type[T], db: Session):
        """
        Initialize repository with model and database session.

        Args:
            model: The SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get(self, id: int) -> Optional[T]:
        """Get a single record by ID."""
        return self.db.query(self.model).filter(self.model.id == id).first()

    def get_by_uuid(self, uuid: str) -> Optional[T]:
        """Get a single record by UUID."""
        return self.db.query(self.model).filter(self.model.uuid == uuid).first()

    def get_in_room(self, id: int, room_id: int) -> Optional[T]:
        """Get a record by ID only if it belongs to the given room."""
        return (
            self.db.query(self.model)
            .filter(self.model.id == id, self.model.room_id == room_id)
            .first()
        )

    def list_in_room(self, room_id: int, skip: int = 0, limit: int = 100) -> List[T]:
        """Newest-first records of one room."""
        return (
            self.db.query(self.model)
            .filter(self.model.room_id == room_id)
            .order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_in_date_range(
        self,
        room_id: int,
        start_key: Optional[str] = None,
        end_key: Optional[str] = None,
        date_column: str = "date_key",
    ) -> List[T]:
        """
        Records of one room whose date key falls in [start_key, end_key].
        Either bound may be None for an open range.
        """
        column = getattr(self.model, date_column)
        query = self.db.query(self.model).filter(self.model.room_id == room_id)
        if start_key is not None:
            query = query.filter(column >= start_key)
        if end_key is not None:
            query = query.filter(column <= end_key)
        return query.order_by(column.desc(), self.model.id).all()

    def count_in_date_range(
        self, room_id: int, start_key: str, end_key: str, *filters
    ) -> int:
        """Number of a room's records with date_key in [start_key, end_key]."""
        return (
            self.db.query(self.model)
            .filter(
                self.model.room_id == room_id,
                self.model.date_key >= start_key,
                self.model.date_key <= end_key,
                *filters,
            )
            .count()
        )

    def create(self, obj: T) -> T:
        """Create a new record."""
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def update(self, id: int, data: Dict[str, Any]) -> Optional[T]:
        """Update a record by ID."""
        obj = self.get(id)
        if not obj:
            return None

        for key, value in data.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

        self.db.commit()
        self.db.refresh(obj)
        return obj

    def delete(self, id: int) -> bool:
        """Delete a record by ID. Returns True if deleted, False if not found."""
        obj = self.get(id)
        if not obj:
            return False

        self.db.delete(obj)
        self.db.commit()
        return True
