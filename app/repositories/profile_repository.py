from sqlalchemy.orm import Session
from typing import Dict, Iterable
from app.models.profile import Profile
from app.repositories.repository import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Repository for Profile operations."""

    def __init__(self, db: Session):
        super().__init__(Profile, db)

    def get_locales(self, profile_ids: Iterable[int]) -> Dict[int, str]:
        """Locale of each given profile in a single query, keyed by profile id."""
        ids = list(set(profile_ids))
        if not ids:
            return {}
        rows = self.db.query(Profile.id, Profile.locale).filter(Profile.id.in_(ids)).all()
        return {row.id: row.locale for row in rows}
