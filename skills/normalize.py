"""
Skill name normalization.

Free-text skill names typed by users (or extracted from onboarding text)
are mapped onto taxonomy nodes in two passes:
1. case-insensitive exact match on the node name
2. case-insensitive match against the node's aliases

Names that match neither are returned as unresolved so the caller can
decide whether to ask the user or leave them out.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from skills.models import SkillNode


@dataclass
class NormalizedSkill:
    input: str
    skill: SkillNode
    matched_by: str  # 'name' or 'alias'

    def to_dict(self) -> Dict:
        return {
            'input': self.input,
            'skill_id': str(self.skill.id),
            'name': self.skill.name,
            'matched_by': self.matched_by,
        }


@dataclass
class NormalizationResult:
    matched: List[NormalizedSkill] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            'matched': [m.to_dict() for m in self.matched],
            'unresolved': list(self.unresolved),
        }


def normalize_skill_names(names: Iterable[str]) -> NormalizationResult:
    result = NormalizationResult()
    cleaned = []
    seen = set()
    for raw in names:
        name = (raw or '').strip()
        if name and name.lower() not in seen:
            seen.add(name.lower())
            cleaned.append(name)
    if not cleaned:
        return result

    by_name: Dict[str, SkillNode] = {}
    by_alias: Dict[str, SkillNode] = {}
    for node in SkillNode.objects.order_by('depth', 'name'):
        by_name.setdefault(node.name.lower(), node)
        for alias in node.aliases or []:
            by_alias.setdefault(str(alias).strip().lower(), node)

    for name in cleaned:
        key = name.lower()
        if key in by_name:
            result.matched.append(NormalizedSkill(name, by_name[key], 'name'))
        elif key in by_alias:
            result.matched.append(NormalizedSkill(name, by_alias[key], 'alias'))
        else:
            result.unresolved.append(name)
    return result
