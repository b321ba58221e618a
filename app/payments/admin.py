"""
Payment admin configuration.

Payments are written only by the ITN pipeline, so the admin shows the
gateway data read-only and never deletes rows (audit trail).
"""

from django.contrib import admin

from payments.models import Payment

__all__ = [
    "PaymentAdmin",
]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Admin configuration for Payment.

    Provides visibility into what PayFast reported for each invoice.
    """

    list_display = [
        "id",
        "invoice",
        "amount",
        "status",
        "gateway_payment_id",
        "gateway_status",
        "processed_at",
        "created_at",
    ]
    list_filter = ["status", "payment_method", "created_at"]
    search_fields = ["id", "gateway_payment_id", "invoice__invoice_number", "invoice__user__email"]
    list_select_related = ["invoice"]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "status",
        "gateway_payment_id",
        "gateway_reference",
        "gateway_status",
        "raw_payload",
        "processed_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "invoice", "amount", "payment_method", "status"),
            },
        ),
        (
            "Gateway",
            {
                "fields": (
                    "gateway_payment_id",
                    "gateway_reference",
                    "gateway_status",
                    "processed_at",
                ),
            },
        ),
        (
            "Payload",
            {
                "fields": ("raw_payload",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for payments (audit trail)."""
        return False
