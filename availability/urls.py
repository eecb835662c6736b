"""
Availability URLs

- /api/availability/connections/            list, create
- /api/availability/connections/{id}/       retrieve, delete
- /api/availability/connections/{id}/sync/  store busy periods
- /api/availability/busy-blocks/            list
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import CalendarBusyBlockViewSet, CalendarConnectionViewSet

app_name = 'availability'

router = DefaultRouter()
router.register(r'connections', CalendarConnectionViewSet, basename='connection')
router.register(r'busy-blocks', CalendarBusyBlockViewSet, basename='busy-block')

urlpatterns = [
    path('', include(router.urls)),
]
