"""
Enumerations shared by the persistence layer, schemas and handlers.
"""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    MOTHER = "MOTHER"
    COLLABORATOR = "COLLABORATOR"
    ADMIN = "ADMIN"


class PregnancyStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    LOST = "LOST"


class GroupMemberRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class ReactionType(str, Enum):
    HEART = "HEART"
    SUPPORT = "SUPPORT"
    CELEBRATE = "CELEBRATE"


class ReportStatus(str, Enum):
    PENDING = "PENDING"
    REVIEWED = "REVIEWED"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class EventType(str, Enum):
    IN_PERSON = "IN_PERSON"
    ONLINE = "ONLINE"
    HYBRID = "HYBRID"


class RegistrationStatus(str, Enum):
    REGISTERED = "REGISTERED"
    WAITLIST = "WAITLIST"
    CANCELLED = "CANCELLED"


class MediaType(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"


class NotificationKind(str, Enum):
    COMMENT = "COMMENT"
    REACTION = "REACTION"
    VERIFICATION = "VERIFICATION"
    PUBLICATION = "PUBLICATION"
