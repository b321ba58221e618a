"""
Admin configuration for courses and enrollments.
"""

from django.contrib import admin

from courses.models import Course, Enrollment


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ["title", "slug", "price", "is_published"]
    list_filter = ["is_published"]
    search_fields = ["title", "slug"]
    prepopulated_fields = {"slug": ("title",)}


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    """Enrollments are written by settlement; the admin shows them read-only."""

    list_display = ["user", "course", "status", "enrolled_at", "created_at"]
    list_filter = ["status"]
    search_fields = ["user__email", "course__title"]
    readonly_fields = ["id", "user", "course", "status", "enrolled_at", "created_at", "updated_at"]

    def has_add_permission(self, request):
        return False
