"""
Courses app: the catalogue and the entitlements purchased against it.

Models:
    - Course: A purchasable course
    - Enrollment: A user's access to a course (unique per user/course)

Usage:
    from courses.models import Enrollment

    # Grant access after a paid invoice
    Enrollment.objects.upsert_active(user_id, course_id)
"""
