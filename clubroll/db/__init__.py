"""Database module."""

from clubroll.db.database import SessionLocal, engine, init_db
from clubroll.db.models import Base, Member, Membership, MembershipMember

__all__ = [
    "SessionLocal",
    "engine",
    "init_db",
    "Base",
    "Member",
    "Membership",
    "MembershipMember",
]
