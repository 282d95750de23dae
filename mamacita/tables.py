"""
SQLAlchemy table definitions.

One row class per entity. Many-to-one links that responses always render
(authors, organizers, profiles) load eagerly with ``selectin`` so rows stay
usable after their session closes; collections are loaded explicitly by the
gateway when a handler needs them.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.ext.hybrid import hybrid_property
from sqlalchemy.orm import declarative_base, relationship

from mamacita.enums import (
    GroupMemberRole,
    PregnancyStatus,
    RegistrationStatus,
    ReportStatus,
    Role,
)

Base = declarative_base()


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class SoftDeleteMixin:
    """
    Lifecycle for rows that are hidden rather than removed.

    A row is live until ``soft_delete`` stamps ``deleted_at``; queries filter
    with ``Model.live()``.
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True)

    @hybrid_property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @is_deleted.expression
    def is_deleted(cls):
        return cls.deleted_at.is_not(None)

    @classmethod
    def live(cls):
        return cls.deleted_at.is_(None)

    def soft_delete(self, when: datetime | None = None) -> None:
        if self.deleted_at is None:
            self.deleted_at = when or utcnow()


# --- Accounts ---------------------------------------------------------------


class AccountRow(TimestampMixin, Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=new_id)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=Role.MOTHER.value)
    is_verified = Column(Boolean, nullable=False, default=False)

    mother_profile = relationship(
        "MotherProfileRow", back_populates="account", uselist=False, lazy="selectin"
    )
    collaborator_profile = relationship(
        "CollaboratorProfileRow",
        back_populates="account",
        uselist=False,
        lazy="selectin",
    )
    admin_profile = relationship(
        "AdminProfileRow", back_populates="account", uselist=False, lazy="selectin"
    )

    @property
    def profile(self):
        """The single profile matching this account's role."""
        return {
            Role.MOTHER.value: self.mother_profile,
            Role.COLLABORATOR.value: self.collaborator_profile,
            Role.ADMIN.value: self.admin_profile,
        }.get(self.role)


class MotherProfileRow(TimestampMixin, Base):
    __tablename__ = "mother_profiles"

    id = Column(String, primary_key=True, default=new_id)
    account_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String, nullable=True)
    location = Column(String, nullable=True)
    onboarding_done = Column(Boolean, nullable=False, default=False)
    is_first_pregnancy = Column(Boolean, nullable=True)
    interests = Column(JSON, nullable=False, default=list)

    account = relationship("AccountRow", back_populates="mother_profile")

    @property
    def role(self) -> str:
        return Role.MOTHER.value


class CollaboratorProfileRow(TimestampMixin, Base):
    __tablename__ = "collaborator_profiles"

    id = Column(String, primary_key=True, default=new_id)
    account_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    bio = Column(Text, nullable=True)
    phone = Column(String, nullable=True)
    profession = Column(String, nullable=False)
    specialties = Column(JSON, nullable=False, default=list)
    credentials = Column(String, nullable=True)
    is_verified = Column(Boolean, nullable=False, default=False)

    account = relationship("AccountRow", back_populates="collaborator_profile")

    @property
    def role(self) -> str:
        return Role.COLLABORATOR.value


class AdminProfileRow(TimestampMixin, Base):
    __tablename__ = "admin_profiles"

    id = Column(String, primary_key=True, default=new_id)
    account_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    full_name = Column(String, nullable=False)
    avatar = Column(String, nullable=True)
    title = Column(String, nullable=False, default="admin")

    account = relationship("AccountRow", back_populates="admin_profile")

    @property
    def role(self) -> str:
        return Role.ADMIN.value


# --- Pregnancy --------------------------------------------------------------


class PregnancyRow(TimestampMixin, Base):
    __tablename__ = "pregnancies"
    __table_args__ = (
        # At most one ACTIVE pregnancy per mother.
        Index(
            "uq_pregnancies_one_active",
            "mother_profile_id",
            unique=True,
            postgresql_where=text("status = 'ACTIVE'"),
            sqlite_where=text("status = 'ACTIVE'"),
        ),
    )

    id = Column(String, primary_key=True, default=new_id)
    mother_profile_id = Column(
        String,
        ForeignKey("mother_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    due_date = Column(DateTime(timezone=True), nullable=False)
    current_week = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default=PregnancyStatus.ACTIVE.value)

    mother_profile = relationship("MotherProfileRow", lazy="selectin")
    symptom_logs = relationship(
        "SymptomLogRow",
        back_populates="pregnancy",
        order_by="SymptomLogRow.logged_at.desc()",
    )


class SymptomLogRow(Base):
    __tablename__ = "symptom_logs"

    id = Column(String, primary_key=True, default=new_id)
    pregnancy_id = Column(
        String,
        ForeignKey("pregnancies.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    week = Column(Integer, nullable=False)
    symptoms = Column(JSON, nullable=False, default=list)
    mood = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    logged_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    pregnancy = relationship("PregnancyRow", back_populates="symptom_logs")


class WeeklyContentRow(Base):
    __tablename__ = "weekly_content"

    id = Column(String, primary_key=True, default=new_id)
    week = Column(Integer, nullable=False, unique=True)
    baby_size = Column(String, nullable=True)
    baby_development = Column(Text, nullable=True)
    mother_body = Column(Text, nullable=True)
    tips = Column(Text, nullable=True)
    checklist = Column(JSON, nullable=False, default=list)


# --- Community --------------------------------------------------------------


class GroupRow(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "groups"

    id = Column(String, primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)
    category = Column(String, nullable=True, index=True)
    cover_image = Column(String, nullable=True)
    created_by_id = Column(
        String, ForeignKey("mother_profiles.id"), nullable=False, index=True
    )

    creator = relationship("MotherProfileRow", lazy="selectin")
    members = relationship("GroupMemberRow", back_populates="group")


class GroupMemberRow(Base):
    __tablename__ = "group_members"
    __table_args__ = (UniqueConstraint("group_id", "profile_id"),)

    id = Column(String, primary_key=True, default=new_id)
    group_id = Column(
        String, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    profile_id = Column(
        String,
        ForeignKey("mother_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(String, nullable=False, default=GroupMemberRole.MEMBER.value)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    group = relationship("GroupRow", back_populates="members")
    profile = relationship("MotherProfileRow", lazy="selectin")


class PostRow(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "posts"

    id = Column(String, primary_key=True, default=new_id)
    author_id = Column(
        String, ForeignKey("mother_profiles.id"), nullable=False, index=True
    )
    group_id = Column(String, ForeignKey("groups.id"), nullable=True, index=True)
    content = Column(Text, nullable=False)
    images = Column(JSON, nullable=False, default=list)

    author = relationship("MotherProfileRow", lazy="selectin")
    group = relationship("GroupRow", lazy="selectin")
    comments = relationship(
        "CommentRow", back_populates="post", order_by="CommentRow.created_at.asc()"
    )
    reactions = relationship("ReactionRow", back_populates="post")


class CommentRow(TimestampMixin, SoftDeleteMixin, Base):
    __tablename__ = "comments"

    id = Column(String, primary_key=True, default=new_id)
    post_id = Column(
        String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id = Column(String, ForeignKey("mother_profiles.id"), nullable=False)
    content = Column(Text, nullable=False)

    post = relationship("PostRow", back_populates="comments")
    author = relationship("MotherProfileRow", lazy="selectin")


class ReactionRow(Base):
    __tablename__ = "reactions"
    __table_args__ = (UniqueConstraint("post_id", "profile_id"),)

    id = Column(String, primary_key=True, default=new_id)
    post_id = Column(
        String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    profile_id = Column(
        String, ForeignKey("mother_profiles.id", ondelete="CASCADE"), nullable=False
    )
    type = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    post = relationship("PostRow", back_populates="reactions")
    profile = relationship("MotherProfileRow", lazy="selectin")


class ReportRow(TimestampMixin, Base):
    __tablename__ = "reports"

    id = Column(String, primary_key=True, default=new_id)
    post_id = Column(
        String, ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
    )
    reporter_id = Column(String, ForeignKey("mother_profiles.id"), nullable=False)
    reason = Column(Text, nullable=False)
    status = Column(
        String, nullable=False, default=ReportStatus.PENDING.value, index=True
    )

    post = relationship("PostRow", lazy="selectin")
    reporter = relationship("MotherProfileRow", lazy="selectin")


# --- Classes ----------------------------------------------------------------


class ClassRow(TimestampMixin, Base):
    __tablename__ = "classes"

    id = Column(String, primary_key=True, default=new_id)
    instructor_id = Column(
        String, ForeignKey("collaborator_profiles.id"), nullable=False, index=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String, nullable=False, index=True)
    difficulty = Column(String, nullable=False, default="Iniciante")
    thumbnail = Column(String, nullable=True)
    is_free = Column(Boolean, nullable=False, default=True)
    price = Column(Float, nullable=False, default=0.0)
    is_published = Column(Boolean, nullable=False, default=False)
    average_rating = Column(Float, nullable=False, default=0.0)
    review_count = Column(Integer, nullable=False, default=0)

    instructor = relationship("CollaboratorProfileRow", lazy="selectin")
    videos = relationship(
        "VideoRow", back_populates="klass", order_by="VideoRow.position.asc()"
    )
    reviews = relationship(
        "ClassReviewRow",
        back_populates="klass",
        order_by="ClassReviewRow.created_at.desc()",
    )


class VideoRow(Base):
    __tablename__ = "videos"

    id = Column(String, primary_key=True, default=new_id)
    class_id = Column(
        String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    video_url = Column(String, nullable=False)
    thumbnail_url = Column(String, nullable=True)
    duration = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=1)
    is_preview = Column(Boolean, nullable=False, default=False)
    resources = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    klass = relationship("ClassRow", back_populates="videos")


class EnrollmentRow(Base):
    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("class_id", "profile_id"),)

    id = Column(String, primary_key=True, default=new_id)
    class_id = Column(
        String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    profile_id = Column(
        String,
        ForeignKey("mother_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    progress = Column(Float, nullable=False, default=0.0)
    enrolled_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    klass = relationship("ClassRow", lazy="selectin")


class WatchHistoryRow(Base):
    __tablename__ = "watch_history"
    __table_args__ = (UniqueConstraint("video_id", "profile_id"),)

    id = Column(String, primary_key=True, default=new_id)
    video_id = Column(
        String, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False
    )
    profile_id = Column(
        String, ForeignKey("mother_profiles.id", ondelete="CASCADE"), nullable=False
    )
    progress = Column(Float, nullable=False, default=0.0)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class ClassReviewRow(TimestampMixin, Base):
    __tablename__ = "class_reviews"
    __table_args__ = (UniqueConstraint("class_id", "profile_id"),)

    id = Column(String, primary_key=True, default=new_id)
    class_id = Column(
        String, ForeignKey("classes.id", ondelete="CASCADE"), nullable=False
    )
    profile_id = Column(
        String, ForeignKey("mother_profiles.id", ondelete="CASCADE"), nullable=False
    )
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    klass = relationship("ClassRow", back_populates="reviews")
    author = relationship("MotherProfileRow", lazy="selectin")


# --- Events -----------------------------------------------------------------


class EventRow(TimestampMixin, Base):
    __tablename__ = "events"

    id = Column(String, primary_key=True, default=new_id)
    organizer_id = Column(
        String, ForeignKey("collaborator_profiles.id"), nullable=False, index=True
    )
    title = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    type = Column(String, nullable=False)
    category = Column(String, nullable=False, index=True)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    location = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    meeting_link = Column(String, nullable=True)
    meeting_password = Column(String, nullable=True)
    capacity = Column(Integer, nullable=True)
    waitlist_enabled = Column(Boolean, nullable=False, default=False)
    is_free = Column(Boolean, nullable=False, default=True)
    price = Column(Float, nullable=False, default=0.0)
    cover_image = Column(String, nullable=True)
    is_published = Column(Boolean, nullable=False, default=False)

    organizer = relationship("CollaboratorProfileRow", lazy="selectin")


class EventRegistrationRow(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "profile_id"),)

    id = Column(String, primary_key=True, default=new_id)
    event_id = Column(
        String, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
    )
    profile_id = Column(
        String,
        ForeignKey("mother_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status = Column(
        String, nullable=False, default=RegistrationStatus.REGISTERED.value
    )
    registered_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    event = relationship("EventRow", lazy="selectin")


# --- Media & notifications --------------------------------------------------


class MediaRow(Base):
    __tablename__ = "media"

    id = Column(String, primary_key=True, default=new_id)
    account_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    url = Column(String, nullable=False)
    public_id = Column(String, nullable=False, unique=True)
    type = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class NotificationRow(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, default=new_id)
    account_id = Column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind = Column(String, nullable=False)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    reference_id = Column(String, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
