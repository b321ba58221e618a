"""
Authentication application.

Provides the custom email-based User model. Learners own invoices and
receive course enrollments once their payments settle.

Usage:
    from authentication.models import User
"""
