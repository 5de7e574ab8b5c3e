from sqlalchemy.orm import Session
from sqlalchemy import select, insert, func
from typing import List, Optional
from app.models.room import Room
from app.models.profile import Profile
from app.models.associations import room_members
from app.repositories.repository import BaseRepository
import secrets
import string


class RoomRepository(BaseRepository[Room]):
    """Repository for rooms and their membership."""

    def __init__(self, db: Session):
        super().__init__(Room, db)

    def get_by_invite_code(self, code: str) -> Optional[Room]:
        """Find room by invite code (codes are stored upper-case)."""
        return self.db.query(Room).filter(Room.invite_code == code.strip().upper()).first()

    def get_room_for_profile(self, profile_id: int) -> Optional[Room]:
        stmt = (
            select(Room)
            .join(room_members, Room.id == room_members.c.room_id)
            .where(room_members.c.profile_id == profile_id)
        )
        return self.db.execute(stmt).scalars().first()

    def get_all_ids(self) -> List[int]:
        return list(self.db.execute(select(Room.id).order_by(Room.id)).scalars().all())

    def get_with_anniversary(self) -> List[Room]:
        """Rooms that have an anniversary date set."""
        return (
            self.db.query(Room)
            .filter(Room.anniversary_date.isnot(None))
            .order_by(Room.id)
            .all()
        )

    def add_member(self, room_id: int, profile_id: int) -> bool:
        """
        Add a profile to a room.

        Returns:
            True if added, False if the profile was already a member
        """
        if self.is_member(room_id, profile_id):
            return False

        self.db.execute(insert(room_members).values(room_id=room_id, profile_id=profile_id))
        self.db.commit()
        return True

    def get_member_ids(self, room_id: int) -> List[int]:
        """Profile ids of a room's members in join order."""
        stmt = (
            select(room_members.c.profile_id)
            .where(room_members.c.room_id == room_id)
            .order_by(room_members.c.joined_at, room_members.c.profile_id)
        )
        return list(self.db.execute(stmt).scalars().all())

    def get_members(self, room_id: int) -> List[dict]:
        """Members of a room with their profile details."""
        stmt = (
            select(
                Profile.id,
                Profile.uuid,
                Profile.display_name,
                Profile.locale,
                room_members.c.joined_at,
            )
            .join(room_members, Profile.id == room_members.c.profile_id)
            .where(room_members.c.room_id == room_id)
            .order_by(room_members.c.joined_at, Profile.id)
        )
        return [
            {
                "profile_id": r.id,
                "uuid": r.uuid,
                "display_name": r.display_name,
                "locale": r.locale,
                "joined_at": r.joined_at,
            }
            for r in self.db.execute(stmt).all()
        ]

    def is_member(self, room_id: int, profile_id: int) -> bool:
        stmt = select(room_members).where(
            room_members.c.room_id == room_id,
            room_members.c.profile_id == profile_id,
        )
        return self.db.execute(stmt).first() is not None

    def get_member_count(self, room_id: int) -> int:
        stmt = select(func.count()).select_from(room_members).where(room_members.c.room_id == room_id)
        return self.db.execute(stmt).scalar_one()

    def generate_invite_code(self) -> str:
        """
        Generate a unique invite code.

        Returns:
            An 8-character alphanumeric code
        """
        while True:
            code = ''.join(secrets.choice(string.ascii_uppercase + string.digits) for _ in range(8))
            if not self.get_by_invite_code(code):
                return code
