"""
Persistence gateway.

``DbClient`` is the only code that touches the database. Each method runs in
its own short-lived session; returned rows are detached with their eager
relationships already loaded.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import create_engine, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload, sessionmaker
from sqlalchemy.pool import StaticPool

from mamacita.enums import (
    GroupMemberRole,
    PregnancyStatus,
    RegistrationStatus,
    ReportStatus,
    Role,
)
from mamacita.tables import (
    AccountRow,
    AdminProfileRow,
    Base,
    ClassReviewRow,
    ClassRow,
    CollaboratorProfileRow,
    CommentRow,
    EnrollmentRow,
    EventRegistrationRow,
    EventRow,
    GroupMemberRow,
    GroupRow,
    MediaRow,
    MotherProfileRow,
    NotificationRow,
    PostRow,
    PregnancyRow,
    ReactionRow,
    ReportRow,
    SymptomLogRow,
    VideoRow,
    WatchHistoryRow,
    WeeklyContentRow,
    utcnow,
)

logger = logging.getLogger(__name__)

IN_MEMORY_SQLITE_URL = "sqlite+pysqlite:///:memory:"

PROFILE_TABLES = {
    Role.MOTHER: MotherProfileRow,
    Role.COLLABORATOR: CollaboratorProfileRow,
    Role.ADMIN: AdminProfileRow,
}


class DuplicateRecord(Exception):
    """A unique constraint (or an equivalent state rule) rejected the write."""


class CapacityReached(Exception):
    """An event is full and does not keep a waitlist."""


class DbClient:
    """
    SQLAlchemy-backed gateway. Accepts any SQLAlchemy URL (e.g., Postgres, or SQLite for tests).
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("DATABASE_URL is required for DbClient")
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # Every connection to :memory: is a fresh database; share one.
            self.engine = create_engine(
                database_url,
                future=True,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        else:
            self.engine = create_engine(
                database_url,
                future=True,
                pool_pre_ping=True,
                pool_recycle=1800,
            )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        Base.metadata.create_all(self.engine)

    def reset(self) -> None:
        """Drop and recreate every table (useful in tests)."""
        Base.metadata.drop_all(self.engine)
        Base.metadata.create_all(self.engine)

    # --- Accounts -----------------------------------------------------------

    def get_account(self, account_id: str) -> Optional[AccountRow]:
        with self.Session() as session:
            return session.get(AccountRow, account_id)

    def get_account_by_email(self, email: str) -> Optional[AccountRow]:
        with self.Session() as session:
            stmt = select(AccountRow).where(AccountRow.email == email)
            return session.execute(stmt).scalar_one_or_none()

    def create_account(
        self,
        *,
        email: str,
        password_hash: str,
        role: Role,
        profile: dict,
        is_verified: bool = False,
    ) -> AccountRow:
        with self.Session() as session:
            account = AccountRow(
                email=email,
                password_hash=password_hash,
                role=role.value,
                is_verified=is_verified,
            )
            session.add(account)
            try:
                session.flush()
                session.add(PROFILE_TABLES[role](account_id=account.id, **profile))
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(email) from exc
            return session.get(AccountRow, account.id, populate_existing=True)

    def update_profile(self, account_id: str, fields: dict) -> Optional[AccountRow]:
        with self.Session() as session:
            account = session.get(AccountRow, account_id)
            if not account or not account.profile:
                return None
            for name, value in fields.items():
                setattr(account.profile, name, value)
            session.commit()
            return account

    def update_password(self, account_id: str, password_hash: str) -> None:
        with self.Session() as session:
            account = session.get(AccountRow, account_id)
            if not account:
                return
            account.password_hash = password_hash
            session.commit()

    def complete_onboarding(
        self, profile_id: str, fields: dict
    ) -> Optional[MotherProfileRow]:
        with self.Session() as session:
            profile = session.get(MotherProfileRow, profile_id)
            if not profile:
                return None
            profile.onboarding_done = True
            for name, value in fields.items():
                setattr(profile, name, value)
            session.commit()
            return profile

    def verify_collaborator(self, profile_id: str) -> Optional[CollaboratorProfileRow]:
        with self.Session() as session:
            profile = session.get(CollaboratorProfileRow, profile_id)
            if not profile:
                return None
            profile.is_verified = True
            account = session.get(AccountRow, profile.account_id)
            if account:
                account.is_verified = True
            session.commit()
            return profile

    # --- Pregnancy ----------------------------------------------------------

    def get_active_pregnancy(
        self, profile_id: str, *, with_logs: bool = False, log_limit: int = 10
    ) -> Optional[PregnancyRow]:
        with self.Session() as session:
            stmt = select(PregnancyRow).where(
                PregnancyRow.mother_profile_id == profile_id,
                PregnancyRow.status == PregnancyStatus.ACTIVE.value,
            )
            pregnancy = session.execute(stmt).scalar_one_or_none()
            if pregnancy and with_logs:
                logs = session.execute(
                    select(SymptomLogRow)
                    .where(SymptomLogRow.pregnancy_id == pregnancy.id)
                    .order_by(SymptomLogRow.logged_at.desc())
                    .limit(log_limit)
                ).scalars()
                pregnancy.recent_logs = list(logs)
            return pregnancy

    def get_pregnancy(self, pregnancy_id: str) -> Optional[PregnancyRow]:
        with self.Session() as session:
            return session.get(PregnancyRow, pregnancy_id)

    def _has_other_active(
        self, session: Session, profile_id: str, exclude_id: str | None = None
    ) -> bool:
        stmt = select(PregnancyRow.id).where(
            PregnancyRow.mother_profile_id == profile_id,
            PregnancyRow.status == PregnancyStatus.ACTIVE.value,
        )
        if exclude_id:
            stmt = stmt.where(PregnancyRow.id != exclude_id)
        return session.execute(stmt.limit(1)).first() is not None

    def create_pregnancy(
        self, profile_id: str, due_date: datetime, current_week: int
    ) -> PregnancyRow:
        with self.Session() as session:
            if self._has_other_active(session, profile_id):
                raise DuplicateRecord(profile_id)
            pregnancy = PregnancyRow(
                mother_profile_id=profile_id,
                due_date=due_date,
                current_week=current_week,
                status=PregnancyStatus.ACTIVE.value,
            )
            session.add(pregnancy)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(profile_id) from exc
            return pregnancy

    def update_pregnancy(self, pregnancy_id: str, fields: dict) -> Optional[PregnancyRow]:
        with self.Session() as session:
            pregnancy = session.get(PregnancyRow, pregnancy_id)
            if not pregnancy:
                return None
            becoming_active = (
                fields.get("status") == PregnancyStatus.ACTIVE.value
                and pregnancy.status != PregnancyStatus.ACTIVE.value
            )
            if becoming_active and self._has_other_active(
                session, pregnancy.mother_profile_id, exclude_id=pregnancy.id
            ):
                raise DuplicateRecord(pregnancy.mother_profile_id)
            for name, value in fields.items():
                setattr(pregnancy, name, value)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(pregnancy.mother_profile_id) from exc
            return pregnancy

    def set_current_week(self, pregnancy_id: str, week: int) -> None:
        with self.Session() as session:
            session.execute(
                update(PregnancyRow)
                .where(PregnancyRow.id == pregnancy_id)
                .values(current_week=week, updated_at=utcnow())
            )
            session.commit()

    def create_symptom_log(
        self,
        pregnancy_id: str,
        *,
        week: int,
        symptoms: list[str],
        mood: Optional[str],
        notes: Optional[str],
    ) -> SymptomLogRow:
        with self.Session() as session:
            log = SymptomLogRow(
                pregnancy_id=pregnancy_id,
                week=week,
                symptoms=symptoms,
                mood=mood,
                notes=notes,
            )
            session.add(log)
            session.commit()
            return log

    def list_symptom_logs(
        self, pregnancy_id: str, week: Optional[int] = None
    ) -> list[SymptomLogRow]:
        with self.Session() as session:
            stmt = select(SymptomLogRow).where(
                SymptomLogRow.pregnancy_id == pregnancy_id
            )
            if week is not None:
                stmt = stmt.where(SymptomLogRow.week == week)
            stmt = stmt.order_by(SymptomLogRow.logged_at.desc())
            return list(session.execute(stmt).scalars())

    def get_weekly_content(self, week: int) -> Optional[WeeklyContentRow]:
        with self.Session() as session:
            stmt = select(WeeklyContentRow).where(WeeklyContentRow.week == week)
            return session.execute(stmt).scalar_one_or_none()

    def upsert_weekly_content(self, week: int, fields: dict) -> WeeklyContentRow:
        with self.Session() as session:
            stmt = select(WeeklyContentRow).where(WeeklyContentRow.week == week)
            row = session.execute(stmt).scalar_one_or_none()
            if row:
                for name, value in fields.items():
                    setattr(row, name, value)
            else:
                row = WeeklyContentRow(week=week, **fields)
                session.add(row)
            session.commit()
            return row

    # --- Community: groups --------------------------------------------------

    @staticmethod
    def _membership_exists(profile_id: Optional[str]):
        return (
            select(GroupMemberRow.id)
            .where(
                GroupMemberRow.group_id == GroupRow.id,
                GroupMemberRow.profile_id == profile_id,
            )
            .exists()
        )

    def list_groups(
        self, profile_id: Optional[str], category: Optional[str] = None
    ) -> list[tuple[GroupRow, int, int]]:
        member_count = (
            select(func.count(GroupMemberRow.id))
            .where(GroupMemberRow.group_id == GroupRow.id)
            .correlate(GroupRow)
            .scalar_subquery()
        )
        post_count = (
            select(func.count(PostRow.id))
            .where(PostRow.group_id == GroupRow.id, PostRow.live())
            .correlate(GroupRow)
            .scalar_subquery()
        )
        visible = GroupRow.is_public.is_(True)
        if profile_id:
            visible = or_(visible, self._membership_exists(profile_id))
        with self.Session() as session:
            stmt = (
                select(GroupRow, member_count, post_count)
                .where(GroupRow.live(), visible)
                .order_by(GroupRow.created_at.desc())
            )
            if category:
                stmt = stmt.where(GroupRow.category == category)
            return [tuple(row) for row in session.execute(stmt).all()]

    def get_group(self, group_id: str, *, with_members: bool = False) -> Optional[GroupRow]:
        with self.Session() as session:
            stmt = select(GroupRow).where(GroupRow.id == group_id, GroupRow.live())
            if with_members:
                stmt = stmt.options(selectinload(GroupRow.members))
            return session.execute(stmt).scalar_one_or_none()

    def count_group_posts(self, group_id: str) -> int:
        with self.Session() as session:
            stmt = select(func.count(PostRow.id)).where(
                PostRow.group_id == group_id, PostRow.live()
            )
            return session.execute(stmt).scalar_one()

    def create_group(self, profile_id: str, fields: dict) -> GroupRow:
        with self.Session() as session:
            group = GroupRow(created_by_id=profile_id, **fields)
            session.add(group)
            session.flush()
            session.add(
                GroupMemberRow(
                    group_id=group.id,
                    profile_id=profile_id,
                    role=GroupMemberRole.ADMIN.value,
                )
            )
            session.commit()
            return session.get(GroupRow, group.id, populate_existing=True)

    def soft_delete_group(self, group_id: str) -> None:
        with self.Session() as session:
            group = session.get(GroupRow, group_id)
            if group:
                group.soft_delete()
                session.commit()

    def is_member(self, group_id: str, profile_id: Optional[str]) -> bool:
        if not profile_id:
            return False
        with self.Session() as session:
            stmt = select(GroupMemberRow.id).where(
                GroupMemberRow.group_id == group_id,
                GroupMemberRow.profile_id == profile_id,
            )
            return session.execute(stmt).first() is not None

    def add_member(self, group_id: str, profile_id: str) -> GroupMemberRow:
        with self.Session() as session:
            member = GroupMemberRow(
                group_id=group_id,
                profile_id=profile_id,
                role=GroupMemberRole.MEMBER.value,
            )
            session.add(member)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(group_id) from exc
            return session.get(GroupMemberRow, member.id, populate_existing=True)

    def remove_member(self, group_id: str, profile_id: str) -> bool:
        with self.Session() as session:
            stmt = select(GroupMemberRow).where(
                GroupMemberRow.group_id == group_id,
                GroupMemberRow.profile_id == profile_id,
            )
            member = session.execute(stmt).scalar_one_or_none()
            if not member:
                return False
            session.delete(member)
            session.commit()
            return True

    # --- Community: posts ---------------------------------------------------

    @staticmethod
    def _post_counts():
        comment_count = (
            select(func.count(CommentRow.id))
            .where(CommentRow.post_id == PostRow.id, CommentRow.live())
            .correlate(PostRow)
            .scalar_subquery()
        )
        reaction_count = (
            select(func.count(ReactionRow.id))
            .where(ReactionRow.post_id == PostRow.id)
            .correlate(PostRow)
            .scalar_subquery()
        )
        return comment_count, reaction_count

    def list_posts(
        self,
        profile_id: Optional[str],
        *,
        group_id: Optional[str] = None,
        limit: int = 50,
    ) -> list[tuple[PostRow, int, int]]:
        comment_count, reaction_count = self._post_counts()
        with self.Session() as session:
            stmt = (
                select(PostRow, comment_count, reaction_count)
                .outerjoin(GroupRow, PostRow.group_id == GroupRow.id)
                .where(PostRow.live())
            )
            if group_id:
                stmt = stmt.where(PostRow.group_id == group_id)
            else:
                in_visible_group = GroupRow.is_public.is_(True)
                if profile_id:
                    in_visible_group = or_(
                        in_visible_group, self._membership_exists(profile_id)
                    )
                stmt = stmt.where(
                    or_(
                        PostRow.group_id.is_(None),
                        GroupRow.live() & in_visible_group,
                    )
                )
            stmt = stmt.order_by(PostRow.created_at.desc()).limit(limit)
            return [tuple(row) for row in session.execute(stmt).all()]

    def get_post(self, post_id: str, *, with_thread: bool = False) -> Optional[PostRow]:
        with self.Session() as session:
            stmt = select(PostRow).where(PostRow.id == post_id, PostRow.live())
            if with_thread:
                stmt = stmt.options(
                    selectinload(PostRow.comments), selectinload(PostRow.reactions)
                )
            post = session.execute(stmt).scalar_one_or_none()
            if post and with_thread:
                post.live_comments = [c for c in post.comments if not c.is_deleted]
            return post

    def create_post(
        self,
        profile_id: str,
        *,
        content: str,
        images: list[str],
        group_id: Optional[str],
    ) -> PostRow:
        with self.Session() as session:
            post = PostRow(
                author_id=profile_id, content=content, images=images, group_id=group_id
            )
            session.add(post)
            session.commit()
            return session.get(PostRow, post.id, populate_existing=True)

    def soft_delete_post(self, post_id: str) -> None:
        with self.Session() as session:
            post = session.get(PostRow, post_id)
            if post:
                post.soft_delete()
                session.commit()

    def add_comment(self, post_id: str, profile_id: str, content: str) -> CommentRow:
        with self.Session() as session:
            comment = CommentRow(post_id=post_id, author_id=profile_id, content=content)
            session.add(comment)
            session.commit()
            return session.get(CommentRow, comment.id, populate_existing=True)

    def get_comment(self, comment_id: str) -> Optional[CommentRow]:
        with self.Session() as session:
            stmt = select(CommentRow).where(
                CommentRow.id == comment_id, CommentRow.live()
            )
            return session.execute(stmt).scalar_one_or_none()

    def soft_delete_comment(self, comment_id: str) -> None:
        with self.Session() as session:
            comment = session.get(CommentRow, comment_id)
            if comment:
                comment.soft_delete()
                session.commit()

    def count_reactions(self, post_id: str) -> int:
        with self.Session() as session:
            stmt = select(func.count(ReactionRow.id)).where(
                ReactionRow.post_id == post_id
            )
            return session.execute(stmt).scalar_one()

    def toggle_reaction(
        self, post_id: str, profile_id: str, reaction_type: str
    ) -> tuple[str, Optional[ReactionRow], int]:
        """
        Add, switch or remove the caller's reaction on a post.

        Returns ``(action, reaction, reaction_count)`` where action is one of
        ``added``, ``changed`` or ``removed``.
        """
        with self.Session() as session:
            stmt = select(ReactionRow).where(
                ReactionRow.post_id == post_id, ReactionRow.profile_id == profile_id
            )
            existing = session.execute(stmt).scalar_one_or_none()
            if existing and existing.type == reaction_type:
                session.delete(existing)
                action, reaction = "removed", None
            elif existing:
                existing.type = reaction_type
                action, reaction = "changed", existing
            else:
                reaction = ReactionRow(
                    post_id=post_id, profile_id=profile_id, type=reaction_type
                )
                session.add(reaction)
                action = "added"
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(post_id) from exc
            count = session.execute(
                select(func.count(ReactionRow.id)).where(
                    ReactionRow.post_id == post_id
                )
            ).scalar_one()
            return action, reaction, count

    def create_report(self, post_id: str, profile_id: str, reason: str) -> ReportRow:
        with self.Session() as session:
            report = ReportRow(post_id=post_id, reporter_id=profile_id, reason=reason)
            session.add(report)
            session.commit()
            return session.get(ReportRow, report.id, populate_existing=True)

    def list_reports(self, status: Optional[str] = None) -> list[ReportRow]:
        with self.Session() as session:
            stmt = select(ReportRow)
            if status:
                stmt = stmt.where(ReportRow.status == status)
            stmt = stmt.order_by(ReportRow.created_at.desc())
            return list(session.execute(stmt).scalars())

    def update_report_status(self, report_id: str, status: str) -> Optional[ReportRow]:
        with self.Session() as session:
            report = session.get(ReportRow, report_id)
            if not report:
                return None
            report.status = status
            session.commit()
            return report

    # --- Classes ------------------------------------------------------------

    def list_classes(
        self, *, category: Optional[str] = None, is_free: Optional[bool] = None
    ) -> list[tuple[ClassRow, int, int]]:
        video_count = (
            select(func.count(VideoRow.id))
            .where(VideoRow.class_id == ClassRow.id)
            .correlate(ClassRow)
            .scalar_subquery()
        )
        enrollment_count = (
            select(func.count(EnrollmentRow.id))
            .where(EnrollmentRow.class_id == ClassRow.id)
            .correlate(ClassRow)
            .scalar_subquery()
        )
        with self.Session() as session:
            stmt = select(ClassRow, video_count, enrollment_count).where(
                ClassRow.is_published.is_(True)
            )
            if category:
                stmt = stmt.where(ClassRow.category == category)
            if is_free is not None:
                stmt = stmt.where(ClassRow.is_free.is_(is_free))
            stmt = stmt.order_by(ClassRow.created_at.desc())
            return [tuple(row) for row in session.execute(stmt).all()]

    def get_class(
        self,
        class_id: str,
        *,
        published_only: bool = True,
        with_content: bool = False,
    ) -> Optional[ClassRow]:
        with self.Session() as session:
            stmt = select(ClassRow).where(ClassRow.id == class_id)
            if published_only:
                stmt = stmt.where(ClassRow.is_published.is_(True))
            if with_content:
                stmt = stmt.options(
                    selectinload(ClassRow.videos), selectinload(ClassRow.reviews)
                )
            return session.execute(stmt).scalar_one_or_none()

    def count_enrollments(self, class_id: str) -> int:
        with self.Session() as session:
            stmt = select(func.count(EnrollmentRow.id)).where(
                EnrollmentRow.class_id == class_id
            )
            return session.execute(stmt).scalar_one()

    def create_class(self, instructor_id: str, fields: dict) -> ClassRow:
        with self.Session() as session:
            klass = ClassRow(instructor_id=instructor_id, is_published=False, **fields)
            session.add(klass)
            session.commit()
            return session.get(ClassRow, klass.id, populate_existing=True)

    def publish_class(self, class_id: str) -> Optional[ClassRow]:
        with self.Session() as session:
            klass = session.get(ClassRow, class_id)
            if not klass:
                return None
            klass.is_published = True
            session.commit()
            return klass

    def get_enrollment(self, class_id: str, profile_id: str) -> Optional[EnrollmentRow]:
        with self.Session() as session:
            stmt = select(EnrollmentRow).where(
                EnrollmentRow.class_id == class_id,
                EnrollmentRow.profile_id == profile_id,
            )
            return session.execute(stmt).scalar_one_or_none()

    def enroll(self, class_id: str, profile_id: str) -> EnrollmentRow:
        with self.Session() as session:
            enrollment = EnrollmentRow(
                class_id=class_id, profile_id=profile_id, progress=0.0
            )
            session.add(enrollment)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(class_id) from exc
            return session.get(EnrollmentRow, enrollment.id, populate_existing=True)

    def list_enrollments(self, profile_id: str) -> list[tuple[EnrollmentRow, int]]:
        video_count = (
            select(func.count(VideoRow.id))
            .where(VideoRow.class_id == EnrollmentRow.class_id)
            .correlate(EnrollmentRow)
            .scalar_subquery()
        )
        with self.Session() as session:
            stmt = (
                select(EnrollmentRow, video_count)
                .where(EnrollmentRow.profile_id == profile_id)
                .order_by(EnrollmentRow.enrolled_at.desc())
            )
            return [tuple(row) for row in session.execute(stmt).all()]

    def add_video(self, class_id: str, fields: dict) -> VideoRow:
        with self.Session() as session:
            if fields.get("position") is None:
                last = session.execute(
                    select(func.max(VideoRow.position)).where(
                        VideoRow.class_id == class_id
                    )
                ).scalar_one()
                fields["position"] = (last or 0) + 1
            video = VideoRow(class_id=class_id, **fields)
            session.add(video)
            session.commit()
            return video

    def get_video(self, video_id: str) -> Optional[VideoRow]:
        with self.Session() as session:
            return session.get(VideoRow, video_id)

    def upsert_watch_history(
        self, video_id: str, profile_id: str, progress: float
    ) -> WatchHistoryRow:
        with self.Session() as session:
            stmt = select(WatchHistoryRow).where(
                WatchHistoryRow.video_id == video_id,
                WatchHistoryRow.profile_id == profile_id,
            )
            row = session.execute(stmt).scalar_one_or_none()
            if row:
                row.progress = progress
            else:
                row = WatchHistoryRow(
                    video_id=video_id, profile_id=profile_id, progress=progress
                )
                session.add(row)
            session.commit()
            return row

    def upsert_review(
        self,
        class_id: str,
        profile_id: str,
        *,
        rating: int,
        comment: Optional[str],
    ) -> ClassReviewRow:
        """Write the caller's review and refresh the class rating aggregate."""
        with self.Session() as session:
            stmt = select(ClassReviewRow).where(
                ClassReviewRow.class_id == class_id,
                ClassReviewRow.profile_id == profile_id,
            )
            review = session.execute(stmt).scalar_one_or_none()
            if review:
                review.rating = rating
                review.comment = comment
            else:
                review = ClassReviewRow(
                    class_id=class_id,
                    profile_id=profile_id,
                    rating=rating,
                    comment=comment,
                )
                session.add(review)
            session.flush()
            average, count = session.execute(
                select(func.avg(ClassReviewRow.rating), func.count(ClassReviewRow.id))
                .where(ClassReviewRow.class_id == class_id)
            ).one()
            klass = session.get(ClassRow, class_id)
            klass.average_rating = float(average or 0.0)
            klass.review_count = count
            session.commit()
            return session.get(ClassReviewRow, review.id, populate_existing=True)

    # --- Events -------------------------------------------------------------

    @staticmethod
    def _registered_count():
        return (
            select(func.count(EventRegistrationRow.id))
            .where(
                EventRegistrationRow.event_id == EventRow.id,
                EventRegistrationRow.status == RegistrationStatus.REGISTERED.value,
            )
            .correlate(EventRow)
            .scalar_subquery()
        )

    def list_events(
        self,
        *,
        category: Optional[str] = None,
        event_type: Optional[str] = None,
        city: Optional[str] = None,
        upcoming_after: Optional[datetime] = None,
    ) -> list[tuple[EventRow, int]]:
        with self.Session() as session:
            stmt = select(EventRow, self._registered_count()).where(
                EventRow.is_published.is_(True)
            )
            if category:
                stmt = stmt.where(EventRow.category == category)
            if event_type:
                stmt = stmt.where(EventRow.type == event_type)
            if city:
                stmt = stmt.where(EventRow.city == city)
            if upcoming_after:
                stmt = stmt.where(EventRow.start_date >= upcoming_after)
            stmt = stmt.order_by(EventRow.start_date.asc())
            return [tuple(row) for row in session.execute(stmt).all()]

    def get_event(
        self, event_id: str, *, published_only: bool = True
    ) -> Optional[tuple[EventRow, int]]:
        with self.Session() as session:
            stmt = select(EventRow, self._registered_count()).where(
                EventRow.id == event_id
            )
            if published_only:
                stmt = stmt.where(EventRow.is_published.is_(True))
            row = session.execute(stmt).first()
            return tuple(row) if row else None

    def create_event(self, organizer_id: str, fields: dict) -> EventRow:
        with self.Session() as session:
            event = EventRow(organizer_id=organizer_id, is_published=False, **fields)
            session.add(event)
            session.commit()
            return session.get(EventRow, event.id, populate_existing=True)

    def publish_event(self, event_id: str) -> Optional[EventRow]:
        with self.Session() as session:
            event = session.get(EventRow, event_id)
            if not event:
                return None
            event.is_published = True
            session.commit()
            return event

    def get_registration(
        self, event_id: str, profile_id: str
    ) -> Optional[EventRegistrationRow]:
        with self.Session() as session:
            stmt = select(EventRegistrationRow).where(
                EventRegistrationRow.event_id == event_id,
                EventRegistrationRow.profile_id == profile_id,
            )
            return session.execute(stmt).scalar_one_or_none()

    def register_for_event(
        self, event_id: str, profile_id: str
    ) -> Optional[EventRegistrationRow]:
        """
        Register a mother for a published event in a single transaction.

        The event row is locked while the registered seats are counted so
        concurrent registrations cannot overshoot capacity. A previously
        cancelled registration is reopened. Returns None when the event does
        not exist or is unpublished; raises DuplicateRecord for an existing
        live registration and CapacityReached when full without a waitlist.
        """
        with self.Session() as session:
            event = session.execute(
                select(EventRow)
                .where(EventRow.id == event_id, EventRow.is_published.is_(True))
                .with_for_update()
            ).scalar_one_or_none()
            if not event:
                return None

            existing = session.execute(
                select(EventRegistrationRow).where(
                    EventRegistrationRow.event_id == event_id,
                    EventRegistrationRow.profile_id == profile_id,
                )
            ).scalar_one_or_none()
            if existing and existing.status != RegistrationStatus.CANCELLED.value:
                raise DuplicateRecord(event_id)

            registered = session.execute(
                select(func.count(EventRegistrationRow.id)).where(
                    EventRegistrationRow.event_id == event_id,
                    EventRegistrationRow.status == RegistrationStatus.REGISTERED.value,
                )
            ).scalar_one()
            status = RegistrationStatus.REGISTERED
            if event.capacity and registered >= event.capacity:
                if not event.waitlist_enabled:
                    raise CapacityReached(event_id)
                status = RegistrationStatus.WAITLIST

            if existing:
                existing.status = status.value
                existing.cancelled_at = None
                existing.registered_at = utcnow()
                registration = existing
            else:
                registration = EventRegistrationRow(
                    event_id=event_id, profile_id=profile_id, status=status.value
                )
                session.add(registration)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecord(event_id) from exc
            logger.info(
                "Registration %s for event %s: %s",
                registration.id,
                event_id,
                status.value,
            )
            return session.get(
                EventRegistrationRow, registration.id, populate_existing=True
            )

    def cancel_registration(
        self, event_id: str, profile_id: str
    ) -> Optional[EventRegistrationRow]:
        with self.Session() as session:
            stmt = select(EventRegistrationRow).where(
                EventRegistrationRow.event_id == event_id,
                EventRegistrationRow.profile_id == profile_id,
                EventRegistrationRow.status != RegistrationStatus.CANCELLED.value,
            )
            registration = session.execute(stmt).scalar_one_or_none()
            if not registration:
                return None
            registration.status = RegistrationStatus.CANCELLED.value
            registration.cancelled_at = utcnow()
            session.commit()
            return registration

    def list_registrations(self, profile_id: str) -> list[EventRegistrationRow]:
        with self.Session() as session:
            stmt = (
                select(EventRegistrationRow)
                .where(
                    EventRegistrationRow.profile_id == profile_id,
                    EventRegistrationRow.status.in_(
                        [
                            RegistrationStatus.REGISTERED.value,
                            RegistrationStatus.WAITLIST.value,
                        ]
                    ),
                )
                .order_by(EventRegistrationRow.registered_at.desc())
            )
            return list(session.execute(stmt).scalars())

    # --- Media --------------------------------------------------------------

    def create_media(
        self, account_id: str, *, url: str, public_id: str, media_type: str
    ) -> MediaRow:
        with self.Session() as session:
            media = MediaRow(
                account_id=account_id, url=url, public_id=public_id, type=media_type
            )
            session.add(media)
            session.commit()
            return media

    def get_media_by_public_id(self, public_id: str) -> Optional[MediaRow]:
        with self.Session() as session:
            stmt = select(MediaRow).where(MediaRow.public_id == public_id)
            return session.execute(stmt).scalar_one_or_none()

    def delete_media(self, media_id: str) -> None:
        with self.Session() as session:
            media = session.get(MediaRow, media_id)
            if media:
                session.delete(media)
                session.commit()

    # --- Notifications ------------------------------------------------------

    def create_notification(
        self,
        account_id: str,
        *,
        kind: str,
        title: str,
        body: str,
        reference_id: Optional[str] = None,
    ) -> NotificationRow:
        with self.Session() as session:
            notification = NotificationRow(
                account_id=account_id,
                kind=kind,
                title=title,
                body=body,
                reference_id=reference_id,
            )
            session.add(notification)
            session.commit()
            return notification

    def list_notifications(
        self, account_id: str, *, unread_only: bool = False, limit: int = 50
    ) -> list[NotificationRow]:
        with self.Session() as session:
            stmt = select(NotificationRow).where(
                NotificationRow.account_id == account_id
            )
            if unread_only:
                stmt = stmt.where(NotificationRow.is_read.is_(False))
            stmt = stmt.order_by(NotificationRow.created_at.desc()).limit(limit)
            return list(session.execute(stmt).scalars())

    def get_notification(self, notification_id: str) -> Optional[NotificationRow]:
        with self.Session() as session:
            return session.get(NotificationRow, notification_id)

    def mark_notification_read(self, notification_id: str) -> None:
        with self.Session() as session:
            notification = session.get(NotificationRow, notification_id)
            if notification:
                notification.is_read = True
                session.commit()

    def mark_all_notifications_read(self, account_id: str) -> int:
        with self.Session() as session:
            result = session.execute(
                update(NotificationRow)
                .where(
                    NotificationRow.account_id == account_id,
                    NotificationRow.is_read.is_(False),
                )
                .values(is_read=True)
            )
            session.commit()
            return result.rowcount or 0

    # --- Administration -----------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        def count(stmt) -> int:
            return session.execute(stmt).scalar_one()

        with self.Session() as session:
            mothers = count(select(func.count(MotherProfileRow.id)))
            collaborators = count(select(func.count(CollaboratorProfileRow.id)))
            return {
                "users": {
                    "mothers": mothers,
                    "collaborators": collaborators,
                    "total": mothers + collaborators,
                },
                "pregnancy": {
                    "active": count(
                        select(func.count(PregnancyRow.id)).where(
                            PregnancyRow.status == PregnancyStatus.ACTIVE.value
                        )
                    )
                },
                "community": {
                    "groups": count(
                        select(func.count(GroupRow.id)).where(GroupRow.live())
                    ),
                    "posts": count(
                        select(func.count(PostRow.id)).where(PostRow.live())
                    ),
                },
                "learning": {
                    "classes": count(
                        select(func.count(ClassRow.id)).where(
                            ClassRow.is_published.is_(True)
                        )
                    )
                },
                "events": {
                    "total": count(
                        select(func.count(EventRow.id)).where(
                            EventRow.is_published.is_(True)
                        )
                    )
                },
                "moderation": {
                    "pending_reports": count(
                        select(func.count(ReportRow.id)).where(
                            ReportRow.status == ReportStatus.PENDING.value
                        )
                    )
                },
            }
