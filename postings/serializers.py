"""
Posting serializers.

Read serializers expose postings, applications and meeting proposals;
input serializers validate request bodies before they reach the services.
"""

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from availability.serializers import AvailabilityWindowSerializer, WindowInputSerializer
from profiles.serializers import ProfilePublicSerializer
from skills.models import SkillNode

from .models import Application, MeetingProposal, MeetingResponse, Posting, PostingSkill


# =============================================================================
# POSTINGS
# =============================================================================

class PostingSkillSerializer(serializers.ModelSerializer):
    skill_id = serializers.UUIDField(source='skill.id', read_only=True)
    name = serializers.CharField(source='skill.name', read_only=True)

    class Meta:
        model = PostingSkill
        fields = ['skill_id', 'name', 'min_level']


class PostingSkillInputSerializer(serializers.Serializer):
    skill = serializers.PrimaryKeyRelatedField(queryset=SkillNode.objects.all())
    min_level = serializers.IntegerField(min_value=0, max_value=10, required=False, allow_null=True)


class PostingListSerializer(serializers.ModelSerializer):
    creator_name = serializers.CharField(source='creator.display_name', read_only=True)

    class Meta:
        model = Posting
        fields = [
            'id', 'title', 'category', 'mode', 'status', 'creator', 'creator_name',
            'team_size_min', 'team_size_max', 'expires_at', 'created_at',
        ]
        read_only_fields = fields


class PostingSerializer(serializers.ModelSerializer):
    """Posting detail with requirements, declared windows and seat count."""
    creator = ProfilePublicSerializer(read_only=True)
    required_skills = PostingSkillSerializer(many=True, read_only=True)
    availability_windows = AvailabilityWindowSerializer(many=True, read_only=True)
    accepted_count = serializers.SerializerMethodField()

    class Meta:
        model = Posting
        fields = [
            'id', 'creator', 'title', 'description', 'category', 'mode',
            'latitude', 'longitude', 'team_size_min', 'team_size_max',
            'skill_level_min', 'hours_per_week', 'auto_accept', 'status',
            'expires_at', 'reposted_at', 'required_skills', 'availability_windows',
            'accepted_count', 'needs_embedding', 'created_at', 'updated_at',
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.INT)
    def get_accepted_count(self, obj):
        return obj.accepted_count()


class PostingWriteSerializer(serializers.ModelSerializer):
    required_skills = PostingSkillInputSerializer(many=True, required=False)
    availability_windows = WindowInputSerializer(many=True, required=False)

    class Meta:
        model = Posting
        fields = [
            'title', 'description', 'category', 'mode', 'latitude', 'longitude',
            'team_size_min', 'team_size_max', 'skill_level_min', 'hours_per_week',
            'auto_accept', 'expires_at', 'required_skills', 'availability_windows',
        ]
        extra_kwargs = {'title': {'required': False, 'allow_blank': True}}

    def validate_required_skills(self, value):
        seen = set()
        for item in value:
            if item['skill'].pk in seen:
                raise serializers.ValidationError(f"Duplicate skill {item['skill'].name}")
            seen.add(item['skill'].pk)
        return value

    def validate(self, attrs):
        instance = self.instance
        size_min = attrs.get('team_size_min', instance.team_size_min if instance else 1)
        size_max = attrs.get('team_size_max', instance.team_size_max if instance else 1)
        if size_max < size_min:
            raise serializers.ValidationError({'team_size_max': "Maximum team size cannot be below the minimum"})
        if not instance and not (attrs.get('title') or attrs.get('description')):
            raise serializers.ValidationError("Provide a title or a description")
        return attrs


class DeadlineSerializer(serializers.Serializer):
    """New deadline: a number of days from now or an explicit instant."""
    days = serializers.IntegerField(min_value=1, max_value=365, required=False)
    expires_at = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        if 'days' in attrs and 'expires_at' in attrs:
            raise serializers.ValidationError("Provide either days or expires_at, not both")
        return attrs


# =============================================================================
# APPLICATIONS
# =============================================================================

class ApplicationSerializer(serializers.ModelSerializer):
    applicant = ProfilePublicSerializer(read_only=True)
    posting_title = serializers.CharField(source='posting.title', read_only=True)
    waitlist_position = serializers.SerializerMethodField()

    class Meta:
        model = Application
        fields = [
            'id', 'posting', 'posting_title', 'applicant', 'cover_message',
            'status', 'waitlist_position', 'decided_at', 'created_at',
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.INT)
    def get_waitlist_position(self, obj):
        if obj.status != Application.ApplicationStatus.WAITLISTED:
            return None
        return obj.waitlist_position()


class ApplicationCreateSerializer(serializers.Serializer):
    posting = serializers.PrimaryKeyRelatedField(queryset=Posting.objects.all())
    cover_message = serializers.CharField(required=False, allow_blank=True, max_length=2000, default='')


class ApplicationDecisionSerializer(serializers.Serializer):
    status = serializers.CharField()


# =============================================================================
# MEETING PROPOSALS
# =============================================================================

class MeetingResponseSerializer(serializers.ModelSerializer):
    responder_name = serializers.CharField(source='responder.display_name', read_only=True)

    class Meta:
        model = MeetingResponse
        fields = ['id', 'responder', 'responder_name', 'response', 'updated_at']
        read_only_fields = fields


class MeetingProposalSerializer(serializers.ModelSerializer):
    responses = MeetingResponseSerializer(many=True, read_only=True)

    class Meta:
        model = MeetingProposal
        fields = [
            'id', 'posting', 'proposed_by', 'title', 'description',
            'start_time', 'end_time', 'status', 'responses', 'created_at',
        ]
        read_only_fields = fields


class MeetingProposalCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()


class ProposalStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class ProposalRespondSerializer(serializers.Serializer):
    response = serializers.CharField()
