import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exception import BadRequestException, ResourceNotFoundException
from app.models.profile import Profile
from app.models.room import MAX_ROOM_MEMBERS, Room
from app.repositories.room_repository import RoomRepository
from app.schemas.room import AnniversaryUpdate, RoomMemberResponse, RoomResponse
from app.utils.date_keys import local_date

logger = logging.getLogger(__name__)


class RoomService:
    """Service layer for rooms: creating, joining and the anniversary date."""

    def __init__(self, db: Session):
        self.db = db
        self.room_repo = RoomRepository(db)

    def create_room(self, profile: Profile) -> RoomResponse:
        """
        Create a room with the caller as its first member.

        Raises:
            BadRequestException: If the caller is already in a room
        """
        if self.room_repo.get_room_for_profile(profile.id):
            raise BadRequestException("You are already a member of a room")

        room = Room(invite_code=self.room_repo.generate_invite_code(), created_by_id=profile.id)
        room = self.room_repo.create(room)
        self.room_repo.add_member(room.id, profile.id)
        logger.info("Profile %s created room %s", profile.id, room.id)
        return self.to_response(room)

    def join_room(self, profile: Profile, invite_code: str) -> RoomResponse:
        """
        Join a partner's room by invite code.

        Raises:
            ResourceNotFoundException: If the invite code is unknown
            BadRequestException: If the caller is already in a room or the room is full
        """
        room = self.room_repo.get_by_invite_code(invite_code)
        if not room:
            raise ResourceNotFoundException("Room with invite code", invite_code)

        current = self.room_repo.get_room_for_profile(profile.id)
        if current:
            if current.id == room.id:
                raise BadRequestException("You are already a member of this room")
            raise BadRequestException("You are already a member of another room")

        if self.room_repo.get_member_count(room.id) >= MAX_ROOM_MEMBERS:
            raise BadRequestException("This room already has two members")

        self.room_repo.add_member(room.id, profile.id)
        logger.info("Profile %s joined room %s", profile.id, room.id)
        return self.to_response(room)

    def get_members(self, room: Room) -> List[RoomMemberResponse]:
        return [RoomMemberResponse(**member) for member in self.room_repo.get_members(room.id)]

    def set_anniversary(
        self, room: Room, data: AnniversaryUpdate, now: Optional[datetime] = None
    ) -> RoomResponse:
        """
        Set or clear the anniversary date.

        Raises:
            BadRequestException: If the date lies in the future
        """
        if data.anniversary_date and data.anniversary_date > local_date(now):
            raise BadRequestException("Anniversary date cannot be in the future")

        room = self.room_repo.update(room.id, {"anniversary_date": data.anniversary_date})
        return self.to_response(room)

    def to_response(self, room: Room) -> RoomResponse:
        members = self.get_members(room)
        return RoomResponse(
            id=room.id,
            uuid=room.uuid,
            invite_code=room.invite_code,
            anniversary_date=room.anniversary_date,
            created_by_id=room.created_by_id,
            created_at=room.created_at,
            member_count=len(members),
            members=members,
        )
