"""
Match Scoring - profile/posting fit

This module scores how well a profile fits a posting:
- SemanticScorer: similarity of the stored text embeddings
- SkillOverlapScorer: share of required skills the profile covers, where a
  more specific skill satisfies a broader requirement (React covers JavaScript)
- ExperienceScorer: profile skill level against the posting's minimum level
- CommitmentScorer: weekly hours of both sides
- MatchScorer: combines the weighted scorers and adds informational
  availability and location terms that do not affect the overall score

Every component lies in [0, 1] and the weights sum to 1, so the overall
score lies in [0, 1] as well. Scoring reads data only; it never writes.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from statistics import mean
from typing import Any, Dict, List, Optional

from availability.normalizer import InvalidWindowError
from availability.services import coverage_fraction, posting_intervals, profile_intervals
from skills.models import SkillNode
from skills.tree import SkillTreeIntegrityError, SkillTreeResolver

from .similarity import MODE_REMOTE_PREFERENCE, haversine_distance, location_score, vector_similarity

logger = logging.getLogger(__name__)


DEFAULT_WEIGHTS = {
    'semantic': 0.4,
    'skills_overlap': 0.3,
    'experience_match': 0.15,
    'commitment_match': 0.15,
}

INFORMATIONAL_TERMS = ('availability', 'location')


class ScoringConfigurationError(Exception):
    """Raised when scorer weights do not sum to 1."""


def validate_weights(weights: Dict[str, float]) -> Dict[str, float]:
    total = sum(weights.values())
    if abs(total - 1.0) > 1e-9:
        raise ScoringConfigurationError(f"Scorer weights must sum to 1.0, got {total}")
    return weights


validate_weights(DEFAULT_WEIGHTS)


# ==================== DATA CLASSES ====================

@dataclass
class ScoreComponent:
    """One weighted scoring dimension with details."""
    name: str
    score: float  # 0-1
    weight: float  # 0-1
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def weighted_score(self) -> float:
        return self.score * self.weight


@dataclass
class MatchScore:
    """Overall score plus its per-dimension breakdown."""
    overall: float
    components: List[ScoreComponent]
    availability: Optional[float] = None
    location: Optional[float] = None

    @property
    def breakdown(self) -> Dict[str, Optional[float]]:
        result = {c.name: round(c.score, 4) for c in self.components}
        result['availability'] = None if self.availability is None else round(self.availability, 4)
        result['location'] = None if self.location is None else round(self.location, 4)
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            'score': round(self.overall, 4),
            'score_breakdown': self.breakdown,
            'details': {c.name: c.details for c in self.components if c.details},
        }


@dataclass
class ScoringContext:
    """Data shared by every scorer for one (profile, posting) pair."""
    profile_levels: Dict[Any, int]
    requirements: List[Any]
    resolver: SkillTreeResolver

    def satisfying_levels(self, requirement) -> List[int]:
        """Levels of held skills that lie within the requirement's subtree."""
        try:
            subtree = self.resolver.resolve_descendants(requirement.skill_id)
        except SkillNode.DoesNotExist:
            return []
        except SkillTreeIntegrityError as e:
            logger.warning(f"Skipping requirement {requirement.skill_id}: {e}")
            return []
        return [level for skill_id, level in self.profile_levels.items() if skill_id in subtree]


# ==================== SCORERS ====================

class BaseScorer(ABC):
    """
    Abstract base class for all weighted scorers.

    Each scorer evaluates one aspect of fit and returns a ScoreComponent.
    """

    name = ''

    def __init__(self, weight: float):
        self.weight = weight

    @abstractmethod
    def calculate_score(self, profile, posting, context: ScoringContext) -> ScoreComponent:
        pass

    def _component(self, score: float, **details) -> ScoreComponent:
        return ScoreComponent(
            name=self.name,
            score=max(0.0, min(1.0, score)),
            weight=self.weight,
            details=details,
        )


class SemanticScorer(BaseScorer):
    name = 'semantic'

    def calculate_score(self, profile, posting, context):
        return self._component(vector_similarity(profile, posting))


class SkillOverlapScorer(BaseScorer):
    """Satisfied requirements over all requirements; no requirements scores 1."""

    name = 'skills_overlap'

    def calculate_score(self, profile, posting, context):
        if not context.requirements:
            return self._component(1.0)

        matched, missing = [], []
        for requirement in context.requirements:
            floor = requirement.min_level or 0
            levels = context.satisfying_levels(requirement)
            if any(level >= floor for level in levels):
                matched.append(requirement.skill.name)
            else:
                missing.append(requirement.skill.name)

        return self._component(
            len(matched) / len(context.requirements),
            matched=matched,
            missing=missing,
        )


class ExperienceScorer(BaseScorer):
    """
    Best level among skills that satisfy a requirement (mean level of all
    skills when none does) against the posting's minimum level.
    """

    name = 'experience_match'

    def calculate_score(self, profile, posting, context):
        minimum = posting.skill_level_min
        if not minimum:
            return self._component(1.0)

        relevant = []
        for requirement in context.requirements:
            relevant.extend(context.satisfying_levels(requirement))

        if relevant:
            level = max(relevant)
        elif context.profile_levels:
            level = mean(context.profile_levels.values())
        else:
            level = 0
        return self._component(min(1.0, level / minimum), level=level, minimum=minimum)


class CommitmentScorer(BaseScorer):
    name = 'commitment_match'

    def calculate_score(self, profile, posting, context):
        a, b = profile.hours_per_week, posting.hours_per_week
        if a is None or b is None:
            return self._component(1.0)
        if max(a, b) == 0:
            return self._component(1.0)
        return self._component(min(a, b) / max(a, b))


# ==================== INFORMATIONAL TERMS ====================

def availability_term(profile, posting) -> Optional[float]:
    """Share of the posting's recurring windows the profile covers; None without windows."""
    try:
        target = posting_intervals(posting)
        available = profile_intervals(profile)
    except InvalidWindowError as e:
        logger.warning(f"Availability term skipped for posting {posting.pk}: {e}")
        return None
    if not target or not available:
        return None
    return coverage_fraction(target, available)


def location_term(profile, posting) -> Optional[float]:
    distance = haversine_distance(profile.latitude, profile.longitude, posting.latitude, posting.longitude)
    if distance is None:
        return None
    return location_score(
        distance,
        profile.remote_preference,
        MODE_REMOTE_PREFERENCE.get(posting.mode),
    )


# ==================== COMPOSITE ====================

class MatchScorer:
    """
    Combines the weighted scorers for one (profile, posting) pair.

    Reuse one instance across a scoring pass so the skill-tree lookups are
    cached.
    """

    scorer_classes = (SemanticScorer, SkillOverlapScorer, ExperienceScorer, CommitmentScorer)

    def __init__(self, weights: Dict[str, float] = None, resolver: SkillTreeResolver = None):
        self.weights = validate_weights(dict(weights or DEFAULT_WEIGHTS))
        self.resolver = resolver or SkillTreeResolver()
        self.scorers = [cls(weight=self.weights.get(cls.name, 0.0)) for cls in self.scorer_classes]

    def build_context(self, profile, posting) -> ScoringContext:
        return ScoringContext(
            profile_levels=profile.skill_levels(),
            requirements=list(posting.required_skills.select_related('skill')),
            resolver=self.resolver,
        )

    def score(self, profile, posting) -> MatchScore:
        context = self.build_context(profile, posting)
        components = [scorer.calculate_score(profile, posting, context) for scorer in self.scorers]
        overall = sum(c.weighted_score for c in components)
        return MatchScore(
            overall=max(0.0, min(1.0, overall)),
            components=components,
            availability=availability_term(profile, posting),
            location=location_term(profile, posting),
        )


def score_match(profile, posting) -> MatchScore:
    """Score one pair with the default weights."""
    return MatchScorer().score(profile, posting)
