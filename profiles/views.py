"""
Profile API.

- GET/PATCH /api/profiles/me/
- GET/PUT   /api/profiles/me/availability/
- GET       /api/profiles/{id}/
"""

from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from availability.normalizer import DayWindow, grid_to_windows, windows_to_grid, windows_to_grid_with_partial
from availability.serializers import AvailabilityReplaceSerializer, AvailabilityWindowSerializer
from availability.services import replace_windows

from .models import Profile
from .serializers import ProfilePublicSerializer, ProfileSerializer, ProfileUpdateSerializer
from .services import get_actor_profile, get_or_create_profile, update_profile


class ProfileMeView(APIView):
    """The current user's own profile; PATCH creates it on first save."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        profile = get_actor_profile(request.user)
        return Response(ProfileSerializer(profile).data)

    def patch(self, request):
        profile = get_or_create_profile(request.user)
        serializer = ProfileUpdateSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        profile = update_profile(profile, dict(serializer.validated_data))
        return Response(ProfileSerializer(profile).data)


class ProfileAvailabilityView(APIView):
    """Replace the current profile's availability windows."""
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        profile = get_actor_profile(request.user)
        windows = profile.availability_windows.all()
        recurring = _as_day_windows(w for w in windows if w.window_type == 'recurring')
        return Response({
            'windows': AvailabilityWindowSerializer(windows, many=True).data,
            'grid': windows_to_grid(recurring),
            'grid_cells': windows_to_grid_with_partial(recurring),
        })

    def put(self, request):
        profile = get_actor_profile(request.user)
        serializer = AvailabilityReplaceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        if 'grid' in serializer.validated_data:
            windows = [
                dict(w.to_dict(), window_type='recurring')
                for w in grid_to_windows(serializer.validated_data['grid'])
            ]
        else:
            windows = serializer.validated_data['windows']

        replace_windows(profile=profile, windows=windows)
        return Response({
            'windows': AvailabilityWindowSerializer(profile.availability_windows.all(), many=True).data,
        })


class ProfileDetailView(generics.RetrieveAPIView):
    queryset = Profile.objects.prefetch_related('skills__skill')
    serializer_class = ProfilePublicSerializer
    permission_classes = [permissions.IsAuthenticated]


def _as_day_windows(windows):
    return [DayWindow(w.day_of_week, w.start_minutes, w.end_minutes) for w in windows]
