from django.contrib import admin
from django.utils.html import format_html
from .models import Payment, PaymentStatus


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """
    Payments are recorded, settled and refunded through the API; the admin
    shows them and lets staff correct descriptive fields only.
    """

    list_display = [
        'id',
        'user',
        'rental',
        'amount',
        'currency',
        'payment_method',
        'status_badge',
        'payment_reference',
        'processed_at',
        'created_at',
    ]
    list_filter = ['status', 'payment_method', 'currency', 'created_at']
    search_fields = ['user__email', 'payment_reference', 'mpesa_receipt_number']
    raw_id_fields = ['user', 'rental']
    date_hierarchy = 'created_at'
    readonly_fields = [
        'user',
        'rental',
        'amount',
        'currency',
        'status',
        'payment_reference',
        'metadata',
        'processed_at',
        'processed_by',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        colors = {
            PaymentStatus.PENDING: ('#E5C49A', '#2C1810'),
            PaymentStatus.COMPLETED: ('#6B8E5E', 'white'),
            PaymentStatus.FAILED: ('#B85C5C', 'white'),
            PaymentStatus.CANCELLED: ('#999', 'white'),
            PaymentStatus.REFUNDED: ('#A47449', 'white'),
        }
        bg, fg = colors.get(obj.status, ('#ccc', '#666'))
        return format_html(
            '<span style="background: {}; color: {}; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            bg, fg, obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def has_add_permission(self, request):
        return False
