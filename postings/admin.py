from django.contrib import admin

from .models import Application, MeetingProposal, MeetingResponse, Posting, PostingSkill


class PostingSkillInline(admin.TabularInline):
    model = PostingSkill
    extra = 0
    raw_id_fields = ['skill']


class ApplicationInline(admin.TabularInline):
    model = Application
    extra = 0
    raw_id_fields = ['applicant']
    readonly_fields = ['created_at', 'decided_at']


@admin.register(Posting)
class PostingAdmin(admin.ModelAdmin):
    list_display = ['title', 'creator', 'status', 'team_size_max', 'auto_accept', 'expires_at']
    list_filter = ['status', 'mode', 'auto_accept']
    search_fields = ['title', 'description', 'category']
    raw_id_fields = ['creator']
    inlines = [PostingSkillInline, ApplicationInline]


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ['applicant', 'posting', 'status', 'created_at', 'decided_at']
    list_filter = ['status']
    raw_id_fields = ['applicant', 'posting']


class MeetingResponseInline(admin.TabularInline):
    model = MeetingResponse
    extra = 0
    raw_id_fields = ['responder']


@admin.register(MeetingProposal)
class MeetingProposalAdmin(admin.ModelAdmin):
    list_display = ['posting', 'title', 'start_time', 'end_time', 'status']
    list_filter = ['status']
    raw_id_fields = ['posting', 'proposed_by']
    inlines = [MeetingResponseInline]
