from rest_framework import serializers

from availability.serializers import AvailabilityWindowSerializer
from skills.models import SkillNode

from .models import Profile, ProfileSkill, validate_timezone_name


class ProfileSkillSerializer(serializers.ModelSerializer):
    skill_id = serializers.UUIDField(source='skill.id', read_only=True)
    name = serializers.CharField(source='skill.name', read_only=True)

    class Meta:
        model = ProfileSkill
        fields = ['skill_id', 'name', 'level']


class ProfileSerializer(serializers.ModelSerializer):
    """Full profile including skills and availability windows."""
    skills = ProfileSkillSerializer(many=True, read_only=True)
    availability_windows = AvailabilityWindowSerializer(many=True, read_only=True)

    class Meta:
        model = Profile
        fields = [
            'id', 'full_name', 'headline', 'bio', 'interests', 'languages',
            'latitude', 'longitude', 'location_mode', 'remote_preference',
            'timezone', 'hours_per_week', 'skills', 'availability_windows',
            'notification_preferences', 'needs_embedding', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class ProfilePublicSerializer(serializers.ModelSerializer):
    """What other members may see."""
    skills = ProfileSkillSerializer(many=True, read_only=True)

    class Meta:
        model = Profile
        fields = ['id', 'full_name', 'headline', 'bio', 'interests', 'languages', 'location_mode', 'skills']


class SkillLevelInputSerializer(serializers.Serializer):
    skill = serializers.PrimaryKeyRelatedField(queryset=SkillNode.objects.all())
    level = serializers.IntegerField(min_value=0, max_value=10, default=5)


class ProfileUpdateSerializer(serializers.ModelSerializer):
    skills = SkillLevelInputSerializer(many=True, required=False)
    timezone = serializers.CharField(max_length=64, required=False, validators=[validate_timezone_name])

    class Meta:
        model = Profile
        fields = [
            'full_name', 'headline', 'bio', 'interests', 'languages',
            'latitude', 'longitude', 'location_mode', 'remote_preference',
            'timezone', 'hours_per_week', 'skills',
        ]

    def validate_skills(self, value):
        seen = set()
        for item in value:
            if item['skill'].pk in seen:
                raise serializers.ValidationError(f"Duplicate skill {item['skill'].name}")
            seen.add(item['skill'].pk)
        return value

    def validate_latitude(self, value):
        if value is not None and not -90 <= value <= 90:
            raise serializers.ValidationError("Latitude must be between -90 and 90")
        return value

    def validate_longitude(self, value):
        if value is not None and not -180 <= value <= 180:
            raise serializers.ValidationError("Longitude must be between -180 and 180")
        return value
