from django.urls import path
from rest_framework.routers import SimpleRouter

from .views import EmbeddingProcessView, MatchViewSet, PostingMatchesView, ProfileMatchesView

app_name = 'matching'

router = SimpleRouter()
router.register(r'matches', MatchViewSet, basename='match')

urlpatterns = [
    path('postings/<uuid:posting_id>/matches/', PostingMatchesView.as_view(), name='posting-matches'),
    path('profile/matches/', ProfileMatchesView.as_view(), name='profile-matches'),
    path('embeddings/process/', EmbeddingProcessView.as_view(), name='embeddings-process'),
] + router.urls
