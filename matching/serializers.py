from rest_framework import serializers

from .models import Match


class MatchSerializer(serializers.ModelSerializer):
    posting_title = serializers.CharField(source='posting.title', read_only=True)
    profile_name = serializers.CharField(source='profile.display_name', read_only=True)

    class Meta:
        model = Match
        fields = [
            'id', 'profile', 'profile_name', 'posting', 'posting_title',
            'score', 'score_breakdown', 'status', 'responded_at', 'created_at',
        ]
        read_only_fields = fields


class RankedMatchSerializer(serializers.Serializer):
    """
    One row of a ranking, keyed in camelCase: {matchId, profileId, score,
    scoreBreakdown, status} for a posting, postingId instead of profileId
    for a profile.
    """
    matchId = serializers.UUIDField(source='match_id')
    profileId = serializers.UUIDField(source='profile_id', required=False)
    postingId = serializers.UUIDField(source='posting_id', required=False)
    status = serializers.CharField()
    score = serializers.FloatField()
    scoreBreakdown = serializers.DictField(source='score_breakdown')


class MatchLimitSerializer(serializers.Serializer):
    limit = serializers.IntegerField(min_value=1, max_value=100, required=False)


class EmbeddingBatchSerializer(serializers.Serializer):
    batch_size = serializers.IntegerField(min_value=1, max_value=50, required=False)
