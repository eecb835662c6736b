from django.contrib import admin

from .models import SkillNode


@admin.register(SkillNode)
class SkillNodeAdmin(admin.ModelAdmin):
    list_display = ['name', 'parent', 'depth', 'is_leaf']
    list_filter = ['depth', 'is_leaf']
    search_fields = ['name']
    raw_id_fields = ['parent']
