"""
Vector and geographic similarity.

Pure functions over stored embeddings and coordinates; no database writes.
"""

import math
from typing import Optional, Sequence

EARTH_RADIUS_KM = 6371.0
MAX_REFERENCE_DISTANCE_KM = 5000.0
DEFAULT_REMOTE_PREFERENCE = 50

# Remote preference implied by a posting's work mode (0 = on-site only, 100 = remote only).
MODE_REMOTE_PREFERENCE = {
    'remote': 100,
    'hybrid': 50,
    'onsite': 0,
}


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between two vectors; 0.0 for zero vectors."""
    if len(a) != len(b):
        raise ValueError(f"Vector dimensions must match: {len(a)} vs {len(b)}")
    if not a:
        raise ValueError("Vectors cannot be empty")

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    magnitude = norm_a * norm_b
    if magnitude == 0:
        return 0.0
    return dot / magnitude


def vector_similarity(profile, posting) -> float:
    """
    Semantic similarity of the stored embeddings, in [0, 1].

    Missing or mismatched embeddings score 0.0; opposite directions clamp
    to 0.0.
    """
    a, b = profile.embedding, posting.embedding
    if not a or not b or len(a) != len(b):
        return 0.0
    return max(0.0, min(1.0, cosine_similarity(a, b)))


def haversine_distance(lat1: Optional[float], lng1: Optional[float],
                       lat2: Optional[float], lng2: Optional[float]) -> Optional[float]:
    """Great-circle distance in kilometres; None when any coordinate is missing."""
    if None in (lat1, lng1, lat2, lng2):
        return None

    lat1_rad, lat2_rad = math.radians(lat1), math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def location_score(distance_km: Optional[float], remote_preference_a: Optional[int],
                   remote_preference_b: Optional[int],
                   max_reference_km: float = MAX_REFERENCE_DISTANCE_KM) -> float:
    """
    Location fit in [0, 1].

    Distance counts less as the parties' average remote preference rises;
    no distance data means no penalty.
    """
    if distance_km is None:
        return 1.0
    pref_a = DEFAULT_REMOTE_PREFERENCE if remote_preference_a is None else remote_preference_a
    pref_b = DEFAULT_REMOTE_PREFERENCE if remote_preference_b is None else remote_preference_b
    remote_factor = (pref_a + pref_b) / 200
    effective_distance = distance_km * (1 - remote_factor)
    return max(0.0, 1 - effective_distance / max_reference_km)
