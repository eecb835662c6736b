from django.contrib import admin

from .models import AvailabilityWindow, CalendarBusyBlock, CalendarConnection


@admin.register(AvailabilityWindow)
class AvailabilityWindowAdmin(admin.ModelAdmin):
    list_display = ['window_type', 'profile', 'posting', 'day_of_week', 'start_minutes', 'end_minutes']
    list_filter = ['window_type', 'day_of_week']
    raw_id_fields = ['profile', 'posting']


@admin.register(CalendarConnection)
class CalendarConnectionAdmin(admin.ModelAdmin):
    list_display = ['profile', 'provider', 'sync_status', 'last_synced_at']
    list_filter = ['provider', 'sync_status']
    raw_id_fields = ['profile']


@admin.register(CalendarBusyBlock)
class CalendarBusyBlockAdmin(admin.ModelAdmin):
    list_display = ['connection', 'profile', 'canonical_range']
    raw_id_fields = ['connection', 'profile']
