"""
Skill taxonomy API.

Read-only endpoints over the skill tree:
- list/search skills (?q=, ?parent=, ?is_root=)
- children of a node
- ancestry (breadcrumb) of a node
- normalization of free-text skill names
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from .filters import SkillNodeFilter
from .models import SkillNode
from .normalize import normalize_skill_names
from .serializers import SkillNodeListSerializer, SkillNodeSerializer, SkillNormalizeSerializer
from .tree import SkillTreeResolver


class SkillNodeViewSet(viewsets.ReadOnlyModelViewSet):
    """
    ViewSet for skill nodes.

    list: Search the taxonomy
    retrieve: Skill detail with ancestry

    Actions:
    - children: direct children of a node
    - ancestry: ancestor names and breadcrumb string
    - search: name search by ?q=
    - normalize: map free-text names onto taxonomy nodes
    """
    queryset = SkillNode.objects.all()
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_class = SkillNodeFilter
    ordering_fields = ['name', 'depth']
    ordering = ['depth', 'name']

    def get_serializer_class(self):
        if self.action in ('list', 'children', 'search'):
            return SkillNodeListSerializer
        return SkillNodeSerializer

    @action(detail=True, methods=['get'])
    def children(self, request, pk=None):
        """Direct children of this skill, alphabetically."""
        node = self.get_object()
        serializer = SkillNodeListSerializer(node.children.order_by('name'), many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['get'])
    def ancestry(self, request, pk=None):
        node = self.get_object()
        resolver = SkillTreeResolver()
        ancestors = resolver.resolve_ancestry(node.pk)
        return Response({
            'id': str(node.pk),
            'name': node.name,
            'ancestors': ancestors,
            'breadcrumb': ' > '.join(ancestors + [node.name]),
        })

    @action(detail=False, methods=['get'])
    def search(self, request):
        """Name search; an empty query returns no results."""
        query = request.query_params.get('q', '').strip()
        if not query:
            return Response([])
        nodes = self.filter_queryset(self.get_queryset()).filter(name__icontains=query)[:25]
        return Response(SkillNodeListSerializer(nodes, many=True).data)

    @action(detail=False, methods=['post'])
    def normalize(self, request):
        serializer = SkillNormalizeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = normalize_skill_names(serializer.validated_data['names'])
        return Response(result.to_dict())
