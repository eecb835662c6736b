from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import AvailabilityWindow, CalendarBusyBlock, CalendarConnection
from .normalizer import DAY_KEYS, MINUTES_PER_DAY, QUICK_MODE_BUCKETS


class AvailabilityWindowSerializer(serializers.ModelSerializer):

    class Meta:
        model = AvailabilityWindow
        fields = [
            'id', 'window_type', 'day_of_week', 'start_minutes', 'end_minutes',
            'specific_date', 'start_at', 'end_at',
        ]
        read_only_fields = fields


class WindowInputSerializer(serializers.Serializer):
    window_type = serializers.ChoiceField(
        choices=AvailabilityWindow.WindowType.choices,
        default=AvailabilityWindow.WindowType.RECURRING
    )
    day_of_week = serializers.IntegerField(min_value=0, max_value=6, required=False)
    start_minutes = serializers.IntegerField(min_value=0, max_value=MINUTES_PER_DAY, required=False)
    end_minutes = serializers.IntegerField(min_value=0, max_value=MINUTES_PER_DAY, required=False)
    specific_date = serializers.DateField(required=False)
    start_at = serializers.DateTimeField(required=False)
    end_at = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if attrs['window_type'] == AvailabilityWindow.WindowType.RECURRING:
            missing = [f for f in ('day_of_week', 'start_minutes', 'end_minutes') if f not in attrs]
            if missing:
                raise serializers.ValidationError(f"Recurring windows need {', '.join(missing)}")
        else:
            if 'start_at' not in attrs or 'end_at' not in attrs:
                raise serializers.ValidationError("Specific windows need start_at and end_at")
        return attrs


class AvailabilityReplaceSerializer(serializers.Serializer):
    """Either explicit windows or a quick-mode grid ({'mon': ['morning']})."""
    windows = WindowInputSerializer(many=True, required=False)
    grid = serializers.DictField(
        child=serializers.ListField(child=serializers.ChoiceField(choices=list(QUICK_MODE_BUCKETS))),
        required=False
    )

    def validate_grid(self, value):
        unknown = [day for day in value if day not in DAY_KEYS]
        if unknown:
            raise serializers.ValidationError(f"Unknown days: {', '.join(unknown)}")
        return value

    def validate(self, attrs):
        if ('windows' in attrs) == ('grid' in attrs):
            raise serializers.ValidationError("Provide either windows or grid")
        return attrs


class CalendarConnectionSerializer(serializers.ModelSerializer):

    class Meta:
        model = CalendarConnection
        fields = ['id', 'provider', 'sync_status', 'sync_error', 'last_synced_at', 'created_at']
        read_only_fields = ['id', 'sync_status', 'sync_error', 'last_synced_at', 'created_at']


class BusyPeriodSerializer(serializers.Serializer):
    start = serializers.DateTimeField()
    end = serializers.DateTimeField()

    def validate(self, attrs):
        if attrs['end'] <= attrs['start']:
            raise serializers.ValidationError("end must be after start")
        return attrs


class CalendarSyncSerializer(serializers.Serializer):
    """Busy periods pushed as a list, or a raw iCal document."""
    busy = BusyPeriodSerializer(many=True, allow_empty=True, required=False)
    ics = serializers.CharField(required=False, trim_whitespace=False)

    def validate(self, attrs):
        if ('busy' in attrs) == ('ics' in attrs):
            raise serializers.ValidationError("Provide either busy or ics")
        return attrs


class CalendarBusyBlockSerializer(serializers.ModelSerializer):
    window = serializers.SerializerMethodField()

    class Meta:
        model = CalendarBusyBlock
        fields = ['id', 'connection', 'canonical_range', 'window']

    @extend_schema_field(OpenApiTypes.OBJECT)
    def get_window(self, obj):
        interval = obj.interval
        return interval.to_day_window().to_dict() if interval else None
