import django_filters

from .models import SkillNode


class SkillNodeFilter(django_filters.FilterSet):
    """Filter for skill nodes."""
    q = django_filters.CharFilter(method='filter_q')
    parent = django_filters.UUIDFilter(field_name='parent_id')
    is_root = django_filters.BooleanFilter(method='filter_is_root')

    class Meta:
        model = SkillNode
        fields = ['q', 'parent', 'is_leaf', 'depth', 'is_root']

    def filter_q(self, queryset, name, value):
        return queryset.filter(name__icontains=value.strip())

    def filter_is_root(self, queryset, name, value):
        if value:
            return queryset.filter(parent__isnull=True)
        return queryset.filter(parent__isnull=False)
