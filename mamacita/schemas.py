"""
Pydantic schemas for the Mamacita API.

Request bodies keep their business fields optional so handlers can report
every missing field at once with a catalog message; response models read ORM
rows directly (``from_attributes``).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, Literal, Optional, TypeVar, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class OrmModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# --- Requests ---------------------------------------------------------------


class RegisterRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None
    full_name: Optional[str] = None
    profession: Optional[str] = None
    specialties: Optional[list[str]] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    full_name: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    interests: Optional[list[str]] = None
    profession: Optional[str] = None
    specialties: Optional[list[str]] = None
    credentials: Optional[str] = None


class PasswordChangeRequest(BaseModel):
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class OnboardingRequest(BaseModel):
    is_first_pregnancy: Optional[bool] = None
    interests: Optional[list[str]] = None


class PregnancyCreateRequest(BaseModel):
    due_date: Optional[datetime] = None


class PregnancyUpdateRequest(BaseModel):
    due_date: Optional[datetime] = None
    status: Optional[str] = None


class SymptomLogRequest(BaseModel):
    symptoms: list[str] = Field(default_factory=list)
    mood: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=2000)


class GroupCreateRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=120)
    description: Optional[str] = None
    is_public: bool = True
    category: Optional[str] = None
    cover_image: Optional[str] = None


class PostCreateRequest(BaseModel):
    content: Optional[str] = Field(default=None, max_length=5000)
    images: list[str] = Field(default_factory=list)
    group_id: Optional[str] = None


class CommentCreateRequest(BaseModel):
    content: Optional[str] = Field(default=None, max_length=2000)


class ReactionRequest(BaseModel):
    type: Optional[str] = None


class ReportCreateRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=1000)


class ClassCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    difficulty: Optional[str] = None
    thumbnail: Optional[str] = None
    is_free: bool = True
    price: float = 0.0


class VideoCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: Optional[int] = None
    order: Optional[int] = None
    is_preview: bool = False
    resources: Optional[Any] = None


class WatchProgressRequest(BaseModel):
    progress: Optional[float] = None


class ReviewRequest(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = Field(default=None, max_length=2000)


class EventCreateRequest(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    meeting_link: Optional[str] = None
    meeting_password: Optional[str] = None
    capacity: Optional[int] = None
    waitlist_enabled: bool = False
    is_free: bool = True
    price: float = 0.0
    cover_image: Optional[str] = None


class ReportStatusRequest(BaseModel):
    status: Optional[str] = None


# --- Accounts ---------------------------------------------------------------


class MotherProfileOut(OrmModel):
    id: str
    role: Literal["MOTHER"]
    full_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    onboarding_done: bool
    is_first_pregnancy: Optional[bool] = None
    interests: list[str] = Field(default_factory=list)


class CollaboratorProfileOut(OrmModel):
    id: str
    role: Literal["COLLABORATOR"]
    full_name: str
    avatar: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    profession: str
    specialties: list[str] = Field(default_factory=list)
    credentials: Optional[str] = None
    is_verified: bool


class AdminProfileOut(OrmModel):
    id: str
    role: Literal["ADMIN"]
    full_name: str
    avatar: Optional[str] = None
    title: str


ProfileOut = Union[MotherProfileOut, CollaboratorProfileOut, AdminProfileOut]


class AccountOut(OrmModel):
    id: str
    email: str
    role: str
    is_verified: bool
    created_at: datetime
    profile: Optional[ProfileOut] = None


class AuthOut(BaseModel):
    user: AccountOut
    token: str


class AuthorOut(OrmModel):
    id: str
    full_name: str
    avatar: Optional[str] = None


class InstructorOut(AuthorOut):
    profession: str
    bio: Optional[str] = None
    is_verified: bool = False


# --- Pregnancy --------------------------------------------------------------


class SymptomLogOut(OrmModel):
    id: str
    pregnancy_id: str
    week: int
    symptoms: list[str] = Field(default_factory=list)
    mood: Optional[str] = None
    notes: Optional[str] = None
    logged_at: datetime


class WeeklyContentOut(OrmModel):
    week: int
    baby_size: Optional[str] = None
    baby_development: Optional[str] = None
    mother_body: Optional[str] = None
    tips: Optional[str] = None
    checklist: list[str] = Field(default_factory=list)


class PregnancyOut(OrmModel):
    id: str
    mother_profile_id: str
    due_date: datetime
    current_week: int
    status: str
    created_at: datetime
    updated_at: datetime


class PregnancyDetailOut(PregnancyOut):
    recent_logs: list[SymptomLogOut] = Field(default_factory=list)
    weekly_content: Optional[WeeklyContentOut] = None


# --- Community --------------------------------------------------------------


class GroupRefOut(OrmModel):
    id: str
    name: str


class GroupOut(OrmModel):
    id: str
    name: str
    description: Optional[str] = None
    is_public: bool
    category: Optional[str] = None
    cover_image: Optional[str] = None
    created_at: datetime
    creator: AuthorOut
    member_count: int = 0
    post_count: int = 0


class GroupMemberOut(OrmModel):
    id: str
    group_id: str
    profile_id: str
    role: str
    joined_at: datetime
    profile: Optional[AuthorOut] = None


class GroupDetailOut(GroupOut):
    members: list[GroupMemberOut] = Field(default_factory=list)
    is_member: bool = False


class CommentOut(OrmModel):
    id: str
    post_id: str
    content: str
    created_at: datetime
    author: AuthorOut


class ReactionOut(OrmModel):
    id: str
    type: str
    profile_id: str
    profile: Optional[AuthorOut] = None


class PostOut(OrmModel):
    id: str
    content: str
    images: list[str] = Field(default_factory=list)
    created_at: datetime
    author: AuthorOut
    group: Optional[GroupRefOut] = None
    comment_count: int = 0
    reaction_count: int = 0


class PostDetailOut(PostOut):
    comments: list[CommentOut] = Field(
        default_factory=list,
        validation_alias=AliasChoices("live_comments", "comments"),
    )
    reactions: list[ReactionOut] = Field(default_factory=list)


class ReactionToggleOut(BaseModel):
    action: Literal["added", "changed", "removed"]
    type: Optional[str] = None
    reaction_count: int


class ReportOut(OrmModel):
    id: str
    post_id: str
    reason: str
    status: str
    created_at: datetime
    reporter: AuthorOut
    post: Optional[PostOut] = None


# --- Classes ----------------------------------------------------------------


class VideoOut(OrmModel):
    id: str
    class_id: str
    title: str
    description: Optional[str] = None
    video_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    duration: int
    order: int = Field(validation_alias=AliasChoices("position", "order"))
    is_preview: bool
    resources: Optional[Any] = None


class ReviewOut(OrmModel):
    id: str
    class_id: str
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    author: AuthorOut


class EnrollmentOut(OrmModel):
    id: str
    class_id: str
    profile_id: str
    progress: float
    enrolled_at: datetime
    completed_at: Optional[datetime] = None


class ClassOut(OrmModel):
    id: str
    title: str
    description: str
    category: str
    difficulty: str
    thumbnail: Optional[str] = None
    is_free: bool
    price: float
    is_published: bool
    average_rating: float
    review_count: int
    created_at: datetime
    instructor: InstructorOut
    video_count: int = 0
    enrollment_count: int = 0


class ClassDetailOut(ClassOut):
    videos: list[VideoOut] = Field(default_factory=list)
    reviews: list[ReviewOut] = Field(default_factory=list)
    enrollment: Optional[EnrollmentOut] = None


class EnrollmentWithClassOut(EnrollmentOut):
    class_: ClassOut = Field(
        validation_alias=AliasChoices("klass", "class"), serialization_alias="class"
    )


class WatchHistoryOut(OrmModel):
    id: str
    video_id: str
    profile_id: str
    progress: float
    updated_at: datetime


# --- Events -----------------------------------------------------------------


class RegistrationOut(OrmModel):
    id: str
    event_id: str
    profile_id: str
    status: str
    registered_at: datetime
    cancelled_at: Optional[datetime] = None


class EventOut(OrmModel):
    id: str
    title: str
    description: str
    type: str
    category: str
    start_date: datetime
    end_date: datetime
    location: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    capacity: Optional[int] = None
    waitlist_enabled: bool
    is_free: bool
    price: float
    cover_image: Optional[str] = None
    is_published: bool
    created_at: datetime
    organizer: InstructorOut
    registered_count: int = 0


class EventDetailOut(EventOut):
    meeting_link: Optional[str] = None
    meeting_password: Optional[str] = None
    is_full: bool = False
    spots_left: Optional[int] = None
    registration: Optional[RegistrationOut] = None


class RegistrationWithEventOut(RegistrationOut):
    event: EventOut


# --- Media, notifications, admin --------------------------------------------


class MediaOut(OrmModel):
    id: str
    url: str
    public_id: str
    type: str
    created_at: datetime


class NotificationOut(OrmModel):
    id: str
    kind: str
    title: str
    body: str
    reference_id: Optional[str] = None
    is_read: bool
    created_at: datetime


class MarkAllReadOut(BaseModel):
    updated: int
