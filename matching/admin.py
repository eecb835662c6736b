from django.contrib import admin

from .models import Match


@admin.register(Match)
class MatchAdmin(admin.ModelAdmin):
    list_display = ['profile', 'posting', 'score', 'status', 'responded_at']
    list_filter = ['status']
    raw_id_fields = ['profile', 'posting']
    readonly_fields = ['score', 'score_breakdown']
