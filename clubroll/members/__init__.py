"""Member persistence."""

from clubroll.members.repository import MemberFilters, MemberRepository, latest_membership

__all__ = ["MemberFilters", "MemberRepository", "latest_membership"]
