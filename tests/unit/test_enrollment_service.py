# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the enroll operation."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from registrar.domains.eligibility import RejectionReason
from registrar.domains.enrollment import (
    CapacityArbiter,
    EnrollmentOutcome,
    OutcomeStatus,
    SeatDecision,
)
from registrar.domains.enrollment.service import EnrollmentService
from registrar.domains.waitlist import PromotionStatus, WaitlistService
from registrar.infrastructure.database.models import (
    ENROLLMENT_STATUS_ENROLLED,
    ENROLLMENT_STATUS_WITHDRAWN,
    Enrollment,
    Notification,
    Student,
    WaitlistEntry,
)
from registrar.infrastructure.notifications import (
    BaseChannel,
    ChannelResult,
    ChannelType,
    NotificationEmitter,
    NotificationPayload,
)

T0 = datetime(2025, 9, 5, 9, 0, tzinfo=timezone.utc)


class FailingChannel(BaseChannel):
    """Channel whose deliveries always fail."""

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.IN_APP

    def set_session(self, session) -> None:
        pass

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        return self.create_failure_result("delivery backend unavailable")


@pytest.fixture
def enrollment_service(db_session) -> EnrollmentService:
    """Create enrollment service bound to the test session."""
    return EnrollmentService(db_session)


class TestEnrollSuccess:
    """Tests for enrollments that take a seat."""

    @pytest.mark.asyncio
    async def test_fills_section_then_waitlists(
        self, enrollment_service, catalog, campus, today
    ) -> None:
        """Test two students fill a two-seat section and a third is queued."""
        section = campus["section"]
        x = campus["student"]
        y = await catalog.student("student-y", department=campus["department"], level=campus["level"])
        z = await catalog.student("student-z", department=campus["department"], level=campus["level"])

        first = await enrollment_service.enroll(x, section.id, today=today)
        assert first.status == OutcomeStatus.ENROLLED
        assert first.enrollment_id is not None
        assert await catalog.enrolled_count(section.id) == 1

        second = await enrollment_service.enroll(y, section.id, today=today)
        assert second.status == OutcomeStatus.ENROLLED
        assert await catalog.enrolled_count(section.id) == 2

        third = await enrollment_service.enroll(z, section.id, today=today)
        assert third.status == OutcomeStatus.WAITLISTED
        assert third.waitlist_position == 1
        assert third.message == "Section is full. You have been added to the waitlist."
        assert await catalog.enrolled_count(section.id) == 2
        assert await catalog.count(
            WaitlistEntry,
            WaitlistEntry.student_id == z.id,
            WaitlistEntry.course_section_id == section.id,
        ) == 1

    @pytest.mark.asyncio
    async def test_full_section_blocks_promotion(
        self, db_session, enrollment_service, catalog, campus, today
    ) -> None:
        """Test promoting from a full section reports SECTION_FULL."""
        section = campus["section"]
        for user_id in ("student-a", "student-b", "student-c"):
            student = await catalog.student(
                user_id, department=campus["department"], level=campus["level"]
            )
            await enrollment_service.enroll(student, section.id, today=today)

        result = await WaitlistService(db_session).promote_next(section.id)

        assert result.status == PromotionStatus.SECTION_FULL
        assert await catalog.enrolled_count(section.id) == 2
        assert await catalog.count(WaitlistEntry) == 1

    @pytest.mark.asyncio
    async def test_emits_one_confirmation(self, enrollment_service, catalog, campus, today) -> None:
        """Test an enrollment produces exactly one notification."""
        await enrollment_service.enroll(campus["student"], campus["section"].id, today=today)

        notifications = await catalog.notifications_for("student-main")

        assert len(notifications) == 1
        assert notifications[0].title == "Enrollment confirmed"
        assert notifications[0].message == (
            f"You are enrolled in CS201 - Section {campus['section'].id}."
        )
        assert notifications[0].type == "success"
        assert notifications[0].is_read is False

    @pytest.mark.asyncio
    async def test_reenrolls_after_withdrawal(
        self, enrollment_service, catalog, campus, today
    ) -> None:
        """Test a withdrawn student can take a seat again."""
        await catalog.enroll(campus["student"], campus["section"], status=ENROLLMENT_STATUS_WITHDRAWN)

        outcome = await enrollment_service.enroll(
            campus["student"], campus["section"].id, today=today
        )

        assert outcome.status == OutcomeStatus.ENROLLED
        assert await catalog.count(Enrollment) == 1
        assert await catalog.enrolled_count(campus["section"].id) == 1


class TestEnrollWaitlist:
    """Tests for full sections."""

    @pytest.mark.asyncio
    async def test_already_waitlisted(self, enrollment_service, catalog, campus, today) -> None:
        """Test repeating a request for a full section keeps one entry."""
        section = await catalog.section(campus["course"], campus["semester"], capacity=0)

        first = await enrollment_service.enroll(campus["student"], section.id, today=today)
        second = await enrollment_service.enroll(campus["student"], section.id, today=today)

        assert first.status == OutcomeStatus.WAITLISTED
        assert second.status == OutcomeStatus.ALREADY_WAITLISTED
        assert second.is_success is True
        assert second.waitlist_entry_id == first.waitlist_entry_id
        assert second.waitlist_position == 1
        assert await catalog.count(WaitlistEntry) == 1

        titles = [n.title for n in await catalog.notifications_for("student-main")]
        assert titles == ["Added to waitlist", "Already on waitlist"]

    @pytest.mark.asyncio
    async def test_queued_student_cannot_skip_queue(
        self, db_session, enrollment_service, catalog, campus, today
    ) -> None:
        """Test a freed seat goes to the queue head, not to a later entry re-requesting."""
        section = await catalog.section(campus["course"], campus["semester"], capacity=1)
        section_id = section.id
        holder = await catalog.student()
        holding = await catalog.enroll(holder, section)
        head = await catalog.student("student-head", department=campus["department"], level=campus["level"])
        later = await catalog.student("student-later", department=campus["department"], level=campus["level"])
        await catalog.waitlist(head, section, T0)
        later_entry = await catalog.waitlist(later, section, T0 + timedelta(minutes=1))
        head_id = head.id
        later_id = later.id
        later_entry_id = later_entry.id

        # Withdrawal recorded by the administration flow
        holding.status = ENROLLMENT_STATUS_WITHDRAWN
        section.enrolled_count = 0
        await db_session.commit()

        outcome = await enrollment_service.enroll(later, section_id, today=today)

        assert outcome.status == OutcomeStatus.ALREADY_WAITLISTED
        assert outcome.waitlist_entry_id == later_entry_id
        assert outcome.waitlist_position == 2
        assert await catalog.enrolled_count(section_id) == 0
        assert await catalog.count(Enrollment, Enrollment.student_id == later_id) == 0
        assert await catalog.count(WaitlistEntry) == 2

        promotion = await WaitlistService(db_session).promote_next(section_id)

        assert promotion.status == PromotionStatus.PROMOTED
        assert promotion.student_id == head_id
        assert await catalog.enrolled_count(section_id) == 1

    @pytest.mark.asyncio
    async def test_last_seat_taken_concurrently(
        self, enrollment_service, catalog, campus, today, monkeypatch
    ) -> None:
        """Test a stale 'seat free' reading falls through to the waitlist."""
        section = await catalog.section(campus["course"], campus["semester"], capacity=1)
        await catalog.enroll(await catalog.student(), section)

        # Simulates a request that read the section before the last seat went
        monkeypatch.setattr(
            CapacityArbiter,
            "try_reserve_seat",
            staticmethod(lambda s: SeatDecision.RESERVED),
        )

        outcome = await enrollment_service.enroll(campus["student"], section.id, today=today)

        assert outcome.status == OutcomeStatus.WAITLISTED
        assert await catalog.enrolled_count(section.id) == 1
        assert await catalog.count(Enrollment, Enrollment.course_section_id == section.id) == 1
        assert await catalog.count(WaitlistEntry) == 1


class TestEnrollRejections:
    """Tests for rejected requests."""

    @pytest.mark.asyncio
    async def test_no_current_term(self, enrollment_service, catalog, today) -> None:
        """Test enrollment is closed when no semester is current."""
        semester = await catalog.term(is_current=False)
        course = await catalog.course("CS201")
        section = await catalog.section(course, semester)
        student = await catalog.student("student-closed")

        outcome = await enrollment_service.enroll(student, section.id, today=today)

        assert outcome.status == OutcomeStatus.REJECTED
        assert outcome.reason == RejectionReason.ENROLLMENT_CLOSED
        assert outcome.message == "Enrollment is currently closed."
        assert await catalog.count(Enrollment) == 0
        assert await catalog.count(WaitlistEntry) == 0
        assert await catalog.enrolled_count(section.id) == 0
        # Only the declined-request notice is stored
        notices = await catalog.notifications_for("student-closed")
        assert [n.title for n in notices] == ["Enrollment request declined"]
        assert await catalog.count(Notification) == 1

    @pytest.mark.asyncio
    async def test_section_not_found(self, enrollment_service, campus, today) -> None:
        """Test an unknown section is rejected."""
        outcome = await enrollment_service.enroll(campus["student"], 999, today=today)

        assert outcome.reason == RejectionReason.SECTION_NOT_FOUND
        assert outcome.message == "Selected section was not found."

    @pytest.mark.asyncio
    async def test_missing_prerequisite_cited(
        self, enrollment_service, catalog, campus, today
    ) -> None:
        """Test only the uncompleted prerequisite is cited."""
        intro = await catalog.course("CS101")
        await catalog.course("CS102")
        course = await catalog.course(
            "CS230", department=campus["department"], level=campus["level"], prerequisites="CS101,CS102"
        )
        section = await catalog.section(course, campus["semester"])
        await catalog.completed(campus["student"], intro)

        outcome = await enrollment_service.enroll(campus["student"], section.id, today=today)

        assert outcome.status == OutcomeStatus.REJECTED
        assert outcome.reason == RejectionReason.MISSING_PREREQUISITES
        assert outcome.missing_prerequisites == ("CS102",)
        assert await catalog.enrolled_count(section.id) == 0

    @pytest.mark.asyncio
    async def test_rejection_is_notified(self, enrollment_service, catalog, campus, today) -> None:
        """Test a rejection produces one error notification."""
        await catalog.enroll(campus["student"], campus["section"])

        outcome = await enrollment_service.enroll(
            campus["student"], campus["section"].id, today=today
        )

        assert outcome.reason == RejectionReason.ALREADY_ENROLLED
        notifications = await catalog.notifications_for("student-main")
        assert len(notifications) == 1
        assert notifications[0].title == "Enrollment request declined"
        assert notifications[0].type == "error"
        assert notifications[0].message == outcome.message


class TestEnrollNotificationFailures:
    """Tests for best-effort notification delivery."""

    @pytest.mark.asyncio
    async def test_failed_delivery_keeps_enrollment(
        self, db_session, catalog, campus, today
    ) -> None:
        """Test a failing channel does not undo the enrollment."""
        emitter = NotificationEmitter(db_session, channel=FailingChannel())
        service = EnrollmentService(db_session, emitter=emitter)
        section_id = campus["section"].id

        outcome = await service.enroll(campus["student"], section_id, today=today)

        assert outcome.status == OutcomeStatus.ENROLLED
        assert await catalog.enrolled_count(section_id) == 1
        assert await catalog.count(Enrollment) == 1
        assert await catalog.count(Notification) == 0


class TestEnrollmentOutcome:
    """Tests for the outcome value object."""

    def test_waitlisted_flags(self) -> None:
        """Test created controls WAITLISTED versus ALREADY_WAITLISTED."""
        assert EnrollmentOutcome.waitlisted(1, 2, 3, True).status == OutcomeStatus.WAITLISTED
        assert (
            EnrollmentOutcome.waitlisted(1, 2, 3, False).status
            == OutcomeStatus.ALREADY_WAITLISTED
        )

    def test_rejection_is_not_success(self) -> None:
        """Test rejected outcomes are not successes."""
        outcome = EnrollmentOutcome.rejected(1, RejectionReason.LEVEL_MISMATCH, "No")

        assert outcome.is_success is False


class TestConcurrentEnroll:
    """Tests for enroll requests racing on separate connections."""

    @pytest.mark.asyncio
    @pytest.mark.slow
    async def test_last_seat_race(self, file_catalog, file_session_factory, today) -> None:
        """Test two requests for the last seat yield one enrollment and one waitlist entry."""
        semester = await file_catalog.term()
        department = await file_catalog.department()
        level = await file_catalog.level(100)
        course = await file_catalog.course("CS201", department=department, level=level)
        section = await file_catalog.section(course, semester, capacity=2)
        await file_catalog.enroll(await file_catalog.student(), section)
        first = await file_catalog.student("student-first", department=department, level=level)
        second = await file_catalog.student("student-second", department=department, level=level)
        section_id = section.id

        async def request(student_id: int) -> EnrollmentOutcome:
            async with file_session_factory() as session:
                student = await session.get(Student, student_id)
                return await EnrollmentService(session).enroll(student, section_id, today=today)

        outcomes = await asyncio.gather(request(first.id), request(second.id))

        assert sorted(o.status.value for o in outcomes) == ["enrolled", "waitlisted"]
        assert await file_catalog.enrolled_count(section_id) == 2
        assert await file_catalog.count(
            Enrollment,
            Enrollment.course_section_id == section_id,
            Enrollment.status == ENROLLMENT_STATUS_ENROLLED,
        ) == 2
        assert await file_catalog.count(WaitlistEntry) == 1
