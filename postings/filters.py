import django_filters
from django.db.models import Q

from .models import Application, Posting


class PostingFilter(django_filters.FilterSet):
    """Filter for postings."""
    q = django_filters.CharFilter(method='filter_q')
    status = django_filters.MultipleChoiceFilter(choices=Posting.PostingStatus.choices)
    mode = django_filters.ChoiceFilter(choices=Posting.WorkMode.choices)
    category = django_filters.CharFilter(lookup_expr='iexact')
    skill = django_filters.UUIDFilter(field_name='required_skills__skill_id', distinct=True)
    mine = django_filters.BooleanFilter(method='filter_mine')

    class Meta:
        model = Posting
        fields = ['q', 'status', 'mode', 'category', 'skill', 'auto_accept', 'mine']

    def filter_q(self, queryset, name, value):
        value = value.strip()
        return queryset.filter(Q(title__icontains=value) | Q(description__icontains=value))

    def filter_mine(self, queryset, name, value):
        profile = getattr(self.request.user, 'profile', None) if self.request else None
        if not value or profile is None:
            return queryset
        return queryset.filter(creator=profile)


class ApplicationFilter(django_filters.FilterSet):
    status = django_filters.MultipleChoiceFilter(choices=Application.ApplicationStatus.choices)
    posting = django_filters.UUIDFilter(field_name='posting_id')

    class Meta:
        model = Application
        fields = ['status', 'posting']
