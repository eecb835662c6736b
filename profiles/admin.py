from django.contrib import admin

from .models import Profile, ProfileSkill


class ProfileSkillInline(admin.TabularInline):
    model = ProfileSkill
    extra = 0
    raw_id_fields = ['skill']


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ['full_name', 'user', 'timezone', 'location_mode', 'needs_embedding']
    list_filter = ['location_mode', 'needs_embedding']
    search_fields = ['full_name', 'user__username', 'user__email']
    inlines = [ProfileSkillInline]
