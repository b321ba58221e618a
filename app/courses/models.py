"""
Course and Enrollment models.

Course is the product sold on an invoice line. Enrollment is the
entitlement a paid invoice unlocks: exactly one row per (user, course),
re-activated rather than duplicated on repeat purchases.

Usage:
    from courses.models import Course, Enrollment

    course = Course.objects.create(title="TypeScript Fundamentals", slug="ts-fundamentals")

    # Create-or-reactivate access for a learner
    enrollment = Enrollment.objects.upsert_active(user.id, course.id)
    enrollment.status  # EnrollmentStatus.ACTIVE
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone

from django_fsm import FSMField, transition

from core.models import BaseModel
from core.model_mixins import UUIDPrimaryKeyMixin

from courses.constants import EnrollmentStatus


class Course(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchasable course.

    Fields:
        title: Display title (also used as the PayFast item_name)
        slug: Unique URL slug
        price: List price in ZAR
        is_published: Whether the course is on sale
    """

    title = models.CharField(max_length=200)

    slug = models.SlugField(
        max_length=200,
        unique=True,
        help_text="Unique URL slug",
    )

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="List price in ZAR",
    )

    is_published = models.BooleanField(default=True)

    class Meta:
        ordering = ["title"]
        verbose_name = "Course"
        verbose_name_plural = "Courses"

    def __str__(self) -> str:
        return self.title


class EnrollmentManager(models.Manager):
    """Manager with the entitlement upsert used by settlement."""

    def upsert_active(self, user_id, course_id) -> Enrollment:
        """
        Create or re-activate the enrollment for (user, course).

        The (user, course) unique constraint makes this an upsert:
        an existing row is moved to ACTIVE with a fresh enrolled_at,
        a missing one is created directly in ACTIVE.

        Args:
            user_id: Primary key of the learner
            course_id: Primary key of the purchased course

        Returns:
            The ACTIVE enrollment
        """
        with transaction.atomic():
            enrollment, _created = self.select_for_update().get_or_create(
                user_id=user_id,
                course_id=course_id,
            )
            enrollment.activate()
            enrollment.save()
        return enrollment


class Enrollment(UUIDPrimaryKeyMixin, BaseModel):
    """
    A user's access to a course.

    State Flow:
        PENDING -> ACTIVE
        any -> ACTIVE (re-activation)

    Fields:
        user: Learner holding the entitlement
        course: Course the entitlement grants
        status: Current FSM state
        enrolled_at: When access was (last) activated
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="enrollments",
    )

    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="enrollments",
    )

    status = FSMField(
        default=EnrollmentStatus.PENDING,
        choices=EnrollmentStatus.choices,
        db_index=True,
        help_text="Current state of the enrollment (managed by FSM)",
    )

    enrolled_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When access was last activated",
    )

    objects = EnrollmentManager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Enrollment"
        verbose_name_plural = "Enrollments"
        constraints = [
            models.UniqueConstraint(
                fields=["user", "course"],
                name="enrollment_unique_user_course",
            ),
        ]

    def __str__(self) -> str:
        return f"Enrollment({self.user_id}, {self.course_id}, {self.status})"

    @property
    def is_active(self) -> bool:
        return self.status == EnrollmentStatus.ACTIVE

    @transition(field=status, source="*", target=EnrollmentStatus.ACTIVE)
    def activate(self):
        """
        Grant access to the course.

        Transition: any -> ACTIVE

        Called once per invoice line item when an invoice is paid.
        """
        self.enrolled_at = timezone.now()
