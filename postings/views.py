"""
Posting API.

Postings:
- CRUD under /api/postings/ (edits and deletes by the creator)
- POST {id}/reactivate/, {id}/extend-deadline/, {id}/repost/
- GET  {id}/common-availability/
- GET  {id}/applications/ (creator only)
- GET/POST {id}/proposals/, PATCH {id}/proposals/{pid}/,
  POST {id}/proposals/{pid}/respond/, GET {id}/proposals/{pid}/ics/

Applications:
- GET/POST /api/postings/applications/
- PATCH applications/{id}/decide/, applications/{id}/withdraw/
"""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import Q
from django.http import HttpResponse
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import filters, mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from api.exceptions import ForbiddenError, NotFoundError
from availability.services import common_availability_for_posting
from profiles.services import get_actor_profile

from .filters import ApplicationFilter, PostingFilter
from .ics import ical_filename, proposal_to_ical
from .models import Application, MeetingProposal, Posting
from .serializers import (
    ApplicationCreateSerializer,
    ApplicationDecisionSerializer,
    ApplicationSerializer,
    DeadlineSerializer,
    MeetingProposalCreateSerializer,
    MeetingProposalSerializer,
    MeetingResponseSerializer,
    PostingListSerializer,
    PostingSerializer,
    PostingWriteSerializer,
    ProposalRespondSerializer,
    ProposalStatusSerializer,
)
from .services import (
    application_service,
    lifecycle_service,
    posting_service,
    proposal_service,
)

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(summary="Browse postings", tags=['Postings']),
    create=extend_schema(
        summary="Publish a posting",
        request=PostingWriteSerializer,
        responses={201: PostingSerializer},
        tags=['Postings'],
    ),
    retrieve=extend_schema(summary="Posting detail", tags=['Postings']),
    partial_update=extend_schema(
        summary="Edit a posting",
        request=PostingWriteSerializer,
        responses=PostingSerializer,
        tags=['Postings'],
    ),
    destroy=extend_schema(summary="Delete a posting", tags=['Postings']),
)
class PostingViewSet(viewsets.ModelViewSet):
    """
    ViewSet for postings.

    list: Browse postings
    create: Publish a posting as the current profile
    retrieve/partial_update/destroy: Posting detail (writes by the creator)

    Actions:
    - reactivate / extend_deadline / repost: bring an expired posting back
    - common_availability: weekly windows when the whole team is free
    - applications: join requests for this posting (creator only)
    - proposals / proposal_detail / respond / ics: team meeting scheduling
    """
    queryset = Posting.objects.select_related('creator').prefetch_related('required_skills__skill')
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = PostingFilter
    ordering_fields = ['created_at', 'expires_at', 'title']
    ordering = ['-created_at']
    http_method_names = ['get', 'post', 'patch', 'delete', 'head', 'options']

    def get_serializer_class(self):
        if self.action == 'list':
            return PostingListSerializer
        if self.action in ('create', 'partial_update'):
            return PostingWriteSerializer
        return PostingSerializer

    def create(self, request, *args, **kwargs):
        actor = get_actor_profile(request.user)
        serializer = PostingWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        posting = posting_service.create(actor, serializer.validated_data)
        return Response(PostingSerializer(posting).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, *args, **kwargs):
        posting = self.get_object()
        actor = get_actor_profile(request.user)
        serializer = PostingWriteSerializer(posting, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        posting = posting_service.update(posting, actor, serializer.validated_data)
        return Response(PostingSerializer(posting).data)

    def destroy(self, request, *args, **kwargs):
        posting = self.get_object()
        posting_service.delete(posting, get_actor_profile(request.user))
        return Response(status=status.HTTP_204_NO_CONTENT)

    # ----- lifecycle -----

    @action(detail=True, methods=['post'])
    def reactivate(self, request, pk=None):
        posting = lifecycle_service.reactivate(self.get_object(), get_actor_profile(request.user))
        return Response(PostingSerializer(posting).data)

    @action(detail=True, methods=['post'], url_path='extend-deadline')
    def extend_deadline(self, request, pk=None):
        posting = self.get_object()
        serializer = DeadlineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        posting = lifecycle_service.extend_deadline(
            posting, get_actor_profile(request.user), **serializer.validated_data
        )
        return Response(PostingSerializer(posting).data)

    @action(detail=True, methods=['post'])
    def repost(self, request, pk=None):
        posting = self.get_object()
        serializer = DeadlineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        posting = lifecycle_service.repost(
            posting, get_actor_profile(request.user), **serializer.validated_data
        )
        return Response(PostingSerializer(posting).data)

    # ----- team -----

    @action(detail=True, methods=['get'], url_path='common-availability')
    def common_availability(self, request, pk=None):
        """Weekly windows when the creator and all accepted members are free."""
        posting = self.get_object()
        proposal_service.require_team_member(posting, get_actor_profile(request.user))
        include_specific = request.query_params.get('scope') == 'week'
        windows = common_availability_for_posting(posting, include_specific=include_specific)
        return Response({'windows': [w.to_dict() for w in windows]})

    @action(detail=True, methods=['get'])
    def applications(self, request, pk=None):
        posting = self.get_object()
        if posting.creator_id != get_actor_profile(request.user).pk:
            raise ForbiddenError("Only the posting creator can list applications")
        queryset = posting.applications.select_related('applicant', 'posting')
        return Response(ApplicationSerializer(queryset, many=True).data)

    # ----- meeting proposals -----

    def _get_proposal(self, posting, proposal_pk) -> MeetingProposal:
        try:
            return posting.meeting_proposals.get(pk=proposal_pk)
        except (MeetingProposal.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError('Proposal')

    @action(detail=True, methods=['get', 'post'])
    def proposals(self, request, pk=None):
        posting = self.get_object()
        actor = get_actor_profile(request.user)

        if request.method == 'GET':
            proposal_service.require_team_member(posting, actor)
            queryset = posting.meeting_proposals.prefetch_related('responses__responder').order_by('-created_at')
            return Response(MeetingProposalSerializer(queryset, many=True).data)

        serializer = MeetingProposalCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        proposal = proposal_service.create(posting, actor, **serializer.validated_data)
        return Response(MeetingProposalSerializer(proposal).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['patch'], url_path=r'proposals/(?P<proposal_pk>[^/.]+)')
    def proposal_detail(self, request, pk=None, proposal_pk=None):
        posting = self.get_object()
        proposal = self._get_proposal(posting, proposal_pk)
        serializer = ProposalStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        proposal = proposal_service.update_status(
            proposal, get_actor_profile(request.user), serializer.validated_data['status']
        )
        return Response(MeetingProposalSerializer(proposal).data)

    @action(detail=True, methods=['post'], url_path=r'proposals/(?P<proposal_pk>[^/.]+)/respond')
    def respond(self, request, pk=None, proposal_pk=None):
        posting = self.get_object()
        proposal = self._get_proposal(posting, proposal_pk)
        serializer = ProposalRespondSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = proposal_service.respond(
            proposal, get_actor_profile(request.user), serializer.validated_data['response']
        )
        return Response(MeetingResponseSerializer(record).data)

    @action(detail=True, methods=['get'], url_path=r'proposals/(?P<proposal_pk>[^/.]+)/ics')
    def ics(self, request, pk=None, proposal_pk=None):
        """Download a proposal as an .ics calendar file."""
        posting = self.get_object()
        proposal_service.require_team_member(posting, get_actor_profile(request.user))
        proposal = self._get_proposal(posting, proposal_pk)
        response = HttpResponse(proposal_to_ical(proposal), content_type='text/calendar; charset=utf-8')
        response['Content-Disposition'] = f'attachment; filename="{ical_filename(proposal)}"'
        return response


@extend_schema_view(
    list=extend_schema(summary="Applications sent or received", tags=['Applications']),
    create=extend_schema(
        summary="Apply to a posting",
        request=ApplicationCreateSerializer,
        responses={201: ApplicationSerializer},
        tags=['Applications'],
    ),
)
class ApplicationViewSet(mixins.ListModelMixin,
                         mixins.RetrieveModelMixin,
                         viewsets.GenericViewSet):
    """
    ViewSet for join requests.

    list/retrieve: applications the current profile sent or received
    create: apply to a posting

    Actions:
    - decide: creator accepts or rejects
    - withdraw: applicant withdraws
    """
    serializer_class = ApplicationSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = ApplicationFilter
    ordering_fields = ['created_at', 'status']
    ordering = ['-created_at']

    def get_queryset(self):
        profile = get_actor_profile(self.request.user)
        return Application.objects.filter(
            Q(applicant=profile) | Q(posting__creator=profile)
        ).select_related('posting', 'posting__creator', 'applicant')

    def create(self, request, *args, **kwargs):
        actor = get_actor_profile(request.user)
        serializer = ApplicationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = application_service.create(
            serializer.validated_data['posting'],
            actor,
            serializer.validated_data['cover_message'],
        )
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)

    def _get_application(self, pk) -> Application:
        try:
            return Application.objects.select_related('posting', 'applicant').get(pk=pk)
        except (Application.DoesNotExist, ValueError, DjangoValidationError):
            raise NotFoundError('Application')

    @action(detail=True, methods=['patch'])
    def decide(self, request, pk=None):
        serializer = ApplicationDecisionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        application = self._get_application(pk)
        application = application_service.decide(
            application, get_actor_profile(request.user), serializer.validated_data['status']
        )
        return Response(ApplicationSerializer(application).data)

    @action(detail=True, methods=['patch'])
    def withdraw(self, request, pk=None):
        application = application_service.withdraw(
            self._get_application(pk), get_actor_profile(request.user)
        )
        return Response(ApplicationSerializer(application).data)
