"""
Skill Tree Resolver

Resolves a skill node to its ancestor path (breadcrumbs) and to its
descendant set (tree-aware matching). A posting that requires "Frontend"
is satisfied by a profile holding "React" because React lies in the
subtree rooted at Frontend.

Usage:
    resolver = SkillTreeResolver()
    resolver.resolve_ancestry(react.id)        # ['Technology', 'Frontend', 'JavaScript']
    resolver.resolve_descendants(frontend.id)  # {frontend.id, javascript.id, react.id, ...}
    resolver.satisfies(react.id, frontend.id)  # True
"""

import logging
from typing import Dict, List, Set
from uuid import UUID

from skills.models import SkillNode

logger = logging.getLogger(__name__)

MAX_ANCESTRY_DEPTH = 10


class SkillTreeIntegrityError(Exception):
    """The parent chain is deeper than allowed or loops back on itself."""

    def __init__(self, node_id, message: str):
        self.node_id = node_id
        super().__init__(f"Skill tree integrity error at {node_id}: {message}")


class SkillTreeResolver:
    """
    Read-only view over the skill taxonomy.

    Descendant sets are cached on the instance, so one resolver should be
    shared across a single scoring pass and then discarded.
    """

    def __init__(self, max_depth: int = MAX_ANCESTRY_DEPTH):
        self.max_depth = max_depth
        self._descendants: Dict[UUID, Set[UUID]] = {}

    def resolve_ancestry(self, node_id) -> List[str]:
        """Ancestor names from the root down to the immediate parent."""
        node = SkillNode.objects.only('id', 'name', 'parent_id').get(pk=node_id)
        names = []
        seen = {node.pk}
        parent_id = node.parent_id
        while parent_id is not None:
            if len(names) >= self.max_depth:
                raise SkillTreeIntegrityError(
                    node_id, f"more than {self.max_depth} ancestor hops"
                )
            if parent_id in seen:
                raise SkillTreeIntegrityError(node_id, "parent chain contains a cycle")
            seen.add(parent_id)
            parent = SkillNode.objects.only('id', 'name', 'parent_id').get(pk=parent_id)
            names.append(parent.name)
            parent_id = parent.parent_id
        names.reverse()
        return names

    def resolve_descendants(self, node_id) -> Set[UUID]:
        """All node ids in the subtree rooted at node_id, node_id included."""
        node_id = _as_uuid(node_id)
        cached = self._descendants.get(node_id)
        if cached is not None:
            return cached

        if not SkillNode.objects.filter(pk=node_id).exists():
            raise SkillNode.DoesNotExist(f"Skill {node_id} does not exist")

        result = {node_id}
        frontier = {node_id}
        for _level in range(self.max_depth + 1):
            children = set(
                SkillNode.objects.filter(parent_id__in=frontier).values_list('id', flat=True)
            ) - result
            if not children:
                break
            result |= children
            frontier = children
        else:
            raise SkillTreeIntegrityError(
                node_id, f"subtree deeper than {self.max_depth} levels"
            )

        self._descendants[node_id] = result
        return result

    def satisfies(self, held_skill_id, required_skill_id) -> bool:
        """True when the held skill is the required skill or lies beneath it."""
        return _as_uuid(held_skill_id) in self.resolve_descendants(required_skill_id)

    def breadcrumb(self, node_id, separator: str = ' > ') -> str:
        node = SkillNode.objects.only('id', 'name').get(pk=node_id)
        return separator.join(self.resolve_ancestry(node_id) + [node.name])


def _as_uuid(value) -> UUID:
    return value if isinstance(value, UUID) else UUID(str(value))


def resolve_ancestry(node_id) -> List[str]:
    return SkillTreeResolver().resolve_ancestry(node_id)


def resolve_descendants(node_id) -> Set[UUID]:
    return SkillTreeResolver().resolve_descendants(node_id)
