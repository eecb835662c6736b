"""
Skills URLs

- GET  /api/skills/?q=react
- GET  /api/skills/{id}/
- GET  /api/skills/{id}/children/
- GET  /api/skills/{id}/ancestry/
- GET  /api/skills/search/?q=react
- POST /api/skills/normalize/
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from .views import SkillNodeViewSet

app_name = 'skills'

router = SimpleRouter()
router.register(r'', SkillNodeViewSet, basename='skill')

urlpatterns = [
    path('', include(router.urls)),
]
