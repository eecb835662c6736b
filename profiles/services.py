"""
Profile services.

The acting user's profile is resolved once per request and passed
explicitly into every service call that needs an actor.
"""

import logging
from typing import Dict, Iterable, Mapping

from django.db import transaction

from api.exceptions import NotFoundError, UnauthorizedError
from matching.embeddings import schedule_embedding

from .models import Profile, ProfileSkill

logger = logging.getLogger(__name__)

EMBEDDED_FIELDS = {'headline', 'bio', 'interests'}


def get_actor_profile(user) -> Profile:
    """Profile of the authenticated user; NOT_FOUND until onboarding created one."""
    if user is None or not user.is_authenticated:
        raise UnauthorizedError()
    try:
        return user.profile
    except Profile.DoesNotExist:
        raise NotFoundError('Profile')


def get_or_create_profile(user, **defaults) -> Profile:
    """Profiles are created on first sign-in or first profile save."""
    profile, created = Profile.objects.get_or_create(user=user, defaults=defaults)
    if created:
        logger.info(f"Created profile {profile.pk} for user {user.pk}")
    return profile


def set_profile_skills(profile: Profile, skills: Iterable[Mapping]) -> None:
    """Replace the profile's skills with [{'skill': SkillNode, 'level': int}, ...]."""
    with transaction.atomic():
        profile.skills.all().delete()
        ProfileSkill.objects.bulk_create([
            ProfileSkill(profile=profile, skill=item['skill'], level=item.get('level', 5))
            for item in skills
        ])


def update_profile(profile: Profile, data: Dict) -> Profile:
    """
    Apply a profile edit.

    Changes to text that feeds the embedding (headline, bio, interests,
    skills) flag the profile for re-embedding and schedule it in the
    background.
    """
    skills = data.pop('skills', None)
    needs_embedding = skills is not None or bool(EMBEDDED_FIELDS & set(data))

    with transaction.atomic():
        for field, value in data.items():
            setattr(profile, field, value)
        if needs_embedding:
            profile.needs_embedding = True
        profile.full_clean(exclude=['user'])
        profile.save()
        if skills is not None:
            set_profile_skills(profile, skills)

    if needs_embedding:
        schedule_embedding('profile', profile.pk)
    return profile
