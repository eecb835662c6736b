from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from .models import SkillNode
from .tree import SkillTreeResolver


class SkillNodeListSerializer(serializers.ModelSerializer):
    """Lightweight skill serializer for lists."""

    class Meta:
        model = SkillNode
        fields = ['id', 'name', 'parent', 'depth', 'is_leaf']


class SkillNodeSerializer(serializers.ModelSerializer):
    """Skill serializer with ancestry path."""
    ancestry = serializers.SerializerMethodField()
    children_count = serializers.SerializerMethodField()

    class Meta:
        model = SkillNode
        fields = [
            'id', 'name', 'parent', 'depth', 'is_leaf', 'aliases',
            'description', 'ancestry', 'children_count',
        ]
        read_only_fields = fields

    @extend_schema_field(serializers.ListField(child=serializers.CharField()))
    def get_ancestry(self, obj):
        return SkillTreeResolver().resolve_ancestry(obj.pk)

    @extend_schema_field(OpenApiTypes.INT)
    def get_children_count(self, obj):
        return obj.children.count()


class SkillNormalizeSerializer(serializers.Serializer):
    names = serializers.ListField(
        child=serializers.CharField(max_length=100, allow_blank=True),
        allow_empty=False,
        max_length=100,
    )
