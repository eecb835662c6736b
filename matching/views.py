"""
Matching API.

- GET  /api/matching/postings/{id}/matches/   ranked profiles (creator only)
- GET  /api/matching/profile/matches/         ranked postings for the current profile
- GET  /api/matching/matches/                 matches involving the current profile
- POST /api/matching/matches/{id}/apply|accept|decline/
- POST /api/matching/embeddings/process/      embed a batch of flagged rows (staff)
"""

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from postings.models import Posting
from profiles.services import get_actor_profile

from .embeddings import process_pending
from .models import Match
from .serializers import (
    EmbeddingBatchSerializer,
    MatchLimitSerializer,
    MatchSerializer,
    RankedMatchSerializer,
)
from .services import MatchingService, match_service

logger = logging.getLogger(__name__)

LIMIT_PARAMETER = OpenApiParameter(
    'limit', OpenApiTypes.INT, description='Maximum number of ranked rows (1-100)'
)


def _limit_from(request):
    serializer = MatchLimitSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data.get('limit')


class PostingMatchesView(APIView):
    """Candidate profiles for one of the current profile's postings."""
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Rank candidate profiles",
        parameters=[LIMIT_PARAMETER],
        responses=RankedMatchSerializer(many=True),
        tags=['Matching'],
    )
    def get(self, request, posting_id):
        actor = get_actor_profile(request.user)
        posting = get_object_or_404(Posting, pk=posting_id)
        rows = MatchingService().matches_for_posting(posting, actor, limit=_limit_from(request))
        return Response(RankedMatchSerializer(rows, many=True).data)


class ProfileMatchesView(APIView):
    """Open postings that fit the current profile."""
    permission_classes = [permissions.IsAuthenticated]

    @extend_schema(
        summary="Rank open postings for the current profile",
        parameters=[LIMIT_PARAMETER],
        responses=RankedMatchSerializer(many=True),
        tags=['Matching'],
    )
    def get(self, request):
        profile = get_actor_profile(request.user)
        rows = MatchingService().matches_for_profile(profile, limit=_limit_from(request))
        return Response(RankedMatchSerializer(rows, many=True).data)


class MatchViewSet(mixins.ListModelMixin,
                   mixins.RetrieveModelMixin,
                   viewsets.GenericViewSet):
    """
    ViewSet for matches the current profile is part of.

    Actions:
    - apply: the matched profile asks to join
    - accept / decline: the posting creator responds
    """
    serializer_class = MatchSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        profile = get_actor_profile(self.request.user)
        return Match.objects.filter(
            Q(profile=profile) | Q(posting__creator=profile)
        ).select_related('profile', 'posting')

    def _get_match(self, pk) -> Match:
        return get_object_or_404(Match.objects.select_related('profile', 'posting'), pk=pk)

    @action(detail=True, methods=['post'])
    def apply(self, request, pk=None):
        match = match_service.apply(self._get_match(pk), get_actor_profile(request.user))
        return Response(MatchSerializer(match).data)

    @action(detail=True, methods=['post'])
    def accept(self, request, pk=None):
        match = match_service.accept(self._get_match(pk), get_actor_profile(request.user))
        return Response(MatchSerializer(match).data)

    @action(detail=True, methods=['post'])
    def decline(self, request, pk=None):
        match = match_service.decline(self._get_match(pk), get_actor_profile(request.user))
        return Response(MatchSerializer(match).data)


class EmbeddingProcessView(APIView):
    """Run one embedding batch inline."""
    permission_classes = [permissions.IsAdminUser]

    @extend_schema(
        summary="Embed a batch of flagged profiles and postings",
        request=EmbeddingBatchSerializer,
        responses={200: OpenApiTypes.OBJECT},
        tags=['Matching'],
    )
    def post(self, request):
        serializer = EmbeddingBatchSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        stats = process_pending(batch_size=serializer.validated_data.get('batch_size'))
        logger.info(f"Embedding batch triggered by user {request.user.pk}: {stats}")
        return Response(stats)
