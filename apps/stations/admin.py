from django.contrib import admin
from .models import Station, Battery


class BatteryInline(admin.TabularInline):
    model = Battery
    fields = ['serial_number', 'battery_type', 'status', 'current_charge_percentage']
    readonly_fields = ['status']
    extra = 0
    show_change_link = True


@admin.register(Station)
class StationAdmin(admin.ModelAdmin):
    list_display = ['name', 'location', 'manager', 'capacity', 'accepts_plastic', 'is_active']
    list_filter = ['is_active', 'accepts_plastic']
    search_fields = ['name', 'location']
    raw_id_fields = ['manager']
    inlines = [BatteryInline]


@admin.register(Battery)
class BatteryAdmin(admin.ModelAdmin):
    """Batteries are provisioned here; status belongs to the rental engine."""

    list_display = ['serial_number', 'battery_type', 'status', 'current_station', 'current_charge_percentage']
    list_filter = ['status', 'battery_type', 'current_station']
    search_fields = ['serial_number', 'model']
    readonly_fields = ['status', 'created_at', 'updated_at']
