from django.urls import path

from .views import ProfileAvailabilityView, ProfileDetailView, ProfileMeView

app_name = 'profiles'

urlpatterns = [
    path('me/', ProfileMeView.as_view(), name='me'),
    path('me/availability/', ProfileAvailabilityView.as_view(), name='me-availability'),
    path('<uuid:pk>/', ProfileDetailView.as_view(), name='detail'),
]
