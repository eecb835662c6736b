from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ['recipient', 'kind', 'title', 'is_read', 'created_at']
    list_filter = ['kind', 'is_read']
    raw_id_fields = ['recipient', 'related_posting', 'related_application', 'related_profile']
