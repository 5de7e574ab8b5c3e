"""
Association tables for many-to-many relationships.
Kept separate to avoid circular imports between models.
"""
from sqlalchemy import Column, Integer, Table, ForeignKey, DateTime, func
from app.models.base import Base

# A profile belongs to at most one room; a room holds at most two profiles
room_members = Table(
    'room_members',
    Base.metadata,
    Column('room_id', Integer, ForeignKey('rooms.id', ondelete='CASCADE'), primary_key=True),
    Column('profile_id', Integer, ForeignKey('profiles.id', ondelete='CASCADE'), primary_key=True, unique=True),
    Column('joined_at', DateTime(timezone=True), server_default=func.now(), nullable=False)
)
