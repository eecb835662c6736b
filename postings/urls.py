from rest_framework.routers import SimpleRouter

from .views import ApplicationViewSet, PostingViewSet

app_name = 'postings'

# Applications are registered first so "applications/" is not read as a posting id.
router = SimpleRouter()
router.register(r'applications', ApplicationViewSet, basename='application')
router.register(r'', PostingViewSet, basename='posting')

urlpatterns = router.urls
