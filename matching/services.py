"""
Matching services.

- MatchingService ranks candidates for a posting (or postings for a
  profile) and persists the results as Match rows, idempotently
- MatchService drives a Match through pending -> applied -> accepted | declined
"""

import logging
from typing import Dict, List, Optional

from django.conf import settings
from django.db import transaction

from api.exceptions import ConflictError, ForbiddenError, InvalidTransitionError
from notifications.models import Notification
from notifications.preferences import NotificationType
from notifications.services import notification_service
from postings.models import Posting
from postings.services import sync_capacity_status
from profiles.models import Profile

from .models import Match
from .scoring import MatchScore, MatchScorer

logger = logging.getLogger(__name__)

MatchStatus = Match.MatchStatus


def _threshold() -> float:
    return settings.MESHIT.get('MATCH_SCORE_THRESHOLD', 0.0)


def _limit(limit: Optional[int]) -> int:
    return limit or settings.MESHIT.get('MATCH_LIMIT', 20)


class MatchingService:
    """Ranks and persists matches. Scoring itself never writes."""

    def __init__(self, scorer: MatchScorer = None):
        self.scorer = scorer or MatchScorer()

    def _rank(self, pairs, limit: int):
        """Score (profile, posting) pairs, drop those below the threshold, best first."""
        threshold = _threshold()
        scored = []
        for profile, posting in pairs:
            result = self.scorer.score(profile, posting)
            if result.overall >= threshold:
                scored.append((profile, posting, result))
        scored.sort(key=lambda item: (-item[2].overall, str(item[0].pk), str(item[1].pk)))
        return scored[:limit]

    def persist(self, profile: Profile, posting: Posting, result: MatchScore):
        """
        Create the Match row once.

        An existing row keeps its score and status; only a missing
        breakdown is filled in. Returns (match, created).
        """
        match, created = Match.objects.get_or_create(
            profile=profile,
            posting=posting,
            defaults={'score': round(result.overall, 4), 'score_breakdown': result.breakdown},
        )
        if not created and match.score_breakdown is None:
            match.score_breakdown = result.breakdown
            match.save(update_fields=['score_breakdown', 'updated_at'])
        return match, created

    def matches_for_posting(self, posting: Posting, actor, limit: int = None) -> List[Dict]:
        """Ranked candidate profiles for a posting (creator only)."""
        if posting.creator_id != actor.pk:
            raise ForbiddenError("Only the posting creator can view matches")

        excluded = posting.accepted_member_ids() | {posting.creator_id}
        candidates = Profile.objects.exclude(pk__in=excluded).prefetch_related('skills')
        ranked = self._rank(((profile, posting) for profile in candidates), _limit(limit))

        results = []
        for profile, _posting, result in ranked:
            match, created = self.persist(profile, posting, result)
            if created:
                notification_service.schedule(
                    profile,
                    Notification.Kind.MATCH_FOUND,
                    "New match",
                    f'You look like a good fit for "{posting.title}"',
                    preference=NotificationType.MATCH_FOUND,
                    related_posting=posting,
                )
            results.append(self._as_row(match, result, profile_id=profile.pk))
        logger.info(f"Ranked {len(results)} matches for posting {posting.pk}")
        return results

    def matches_for_profile(self, profile: Profile, limit: int = None) -> List[Dict]:
        """Ranked open postings for a profile, excluding its own and those it applied to."""
        applied = profile.applications.values_list('posting_id', flat=True)
        postings = (
            Posting.objects.filter(status=Posting.PostingStatus.OPEN)
            .exclude(creator=profile)
            .exclude(pk__in=applied)
        )
        ranked = self._rank(((profile, posting) for posting in postings), _limit(limit))

        results = []
        for _profile, posting, result in ranked:
            match, _created = self.persist(profile, posting, result)
            results.append(self._as_row(match, result, posting_id=posting.pk))
        return results

    @staticmethod
    def _as_row(match: Match, result: MatchScore, **ids) -> Dict:
        return {
            **ids,
            'match_id': match.pk,
            'status': match.status,
            'score': round(result.overall, 4),
            'score_breakdown': result.breakdown,
        }


class MatchService:
    """
    Match state machine.

    pending -> applied   (the matched profile applies)
    applied -> accepted  (creator; fills the posting at capacity)
    applied -> declined  (creator)
    """

    def apply(self, match: Match, actor) -> Match:
        if match.profile_id != actor.pk:
            raise ForbiddenError("Only the matched profile can apply")
        if match.status != MatchStatus.PENDING:
            raise InvalidTransitionError('apply', match.status)

        match.set_status(MatchStatus.APPLIED)
        notification_service.schedule(
            match.posting.creator,
            Notification.Kind.APPLICATION_RECEIVED,
            "New join request",
            f'{actor.display_name} wants to join "{match.posting.title}"',
            preference=NotificationType.INTEREST_RECEIVED,
            related_posting=match.posting,
            related_profile=actor,
        )
        return match

    def accept(self, match: Match, actor) -> Match:
        self._require_creator(match, actor)

        with transaction.atomic():
            posting = Posting.objects.select_for_update().get(pk=match.posting_id)
            match = Match.objects.select_for_update().get(pk=match.pk)
            if match.status != MatchStatus.APPLIED:
                raise InvalidTransitionError('accept', match.status)
            if match.profile_id in posting.accepted_member_ids():
                raise ConflictError("Profile is already a member of this team")
            if posting.is_at_capacity():
                raise ConflictError("Posting is already at capacity")

            match.set_status(MatchStatus.ACCEPTED)
            sync_capacity_status(posting)

        logger.info(f"Match {match.pk} accepted")
        notification_service.schedule(
            match.profile,
            Notification.Kind.APPLICATION_ACCEPTED,
            "Request accepted",
            f'You have joined "{posting.title}"',
            preference=NotificationType.APPLICATION_ACCEPTED,
            related_posting=posting,
        )
        match.posting = posting
        return match

    def decline(self, match: Match, actor) -> Match:
        self._require_creator(match, actor)
        if match.status != MatchStatus.APPLIED:
            raise InvalidTransitionError('decline', match.status)

        match.set_status(MatchStatus.DECLINED)
        notification_service.schedule(
            match.profile,
            Notification.Kind.APPLICATION_REJECTED,
            "Request declined",
            f'Your request to join "{match.posting.title}" was declined',
            preference=NotificationType.APPLICATION_REJECTED,
            related_posting=match.posting,
        )
        return match

    @staticmethod
    def _require_creator(match: Match, actor) -> None:
        if match.posting.creator_id != actor.pk:
            raise ForbiddenError("Only the posting creator can respond to matches")


match_service = MatchService()
