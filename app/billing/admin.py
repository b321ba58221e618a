"""
Admin configuration for invoices.
"""

from django.contrib import admin

from billing.models import Invoice, InvoiceItem


class InvoiceItemInline(admin.TabularInline):
    model = InvoiceItem
    extra = 0
    fields = ["position", "course", "quantity", "unit_price", "line_total"]
    readonly_fields = ["line_total"]


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ["invoice_number", "user", "status", "total", "paid_at", "created_at"]
    list_filter = ["status"]
    search_fields = ["invoice_number", "user__email"]
    readonly_fields = ["id", "status", "paid_at", "created_at", "updated_at"]
    inlines = [InvoiceItemInline]
    date_hierarchy = "created_at"
