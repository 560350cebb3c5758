from django.contrib import admin
from django.utils.html import format_html
from .models import Rental, RentalStatus


@admin.register(Rental)
class RentalAdmin(admin.ModelAdmin):
    """
    Read-mostly view of rentals.

    Rentals are opened, returned and cancelled through the API so that the
    battery status moves with them; nothing here edits lifecycle fields.
    """

    list_display = [
        'id',
        'user',
        'battery',
        'pickup_station',
        'return_station',
        'status_badge',
        'payment_status',
        'rental_date',
        'return_date',
        'total_cost',
    ]
    list_filter = ['status', 'payment_status', 'pickup_station', 'rental_date']
    search_fields = ['user__email', 'user__full_name', 'battery__serial_number']
    raw_id_fields = ['user', 'battery']
    date_hierarchy = 'rental_date'
    readonly_fields = [
        'status',
        'payment_status',
        'rental_date',
        'return_date',
        'hourly_rate',
        'total_cost',
        'return_station',
        'created_at',
        'updated_at',
    ]

    def status_badge(self, obj):
        colors = {
            RentalStatus.ACTIVE: '#2E86AB',
            RentalStatus.COMPLETED: '#6B8E5E',
            RentalStatus.CANCELLED: '#B85C5C',
        }
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#999'), obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def has_add_permission(self, request):
        return False
