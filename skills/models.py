"""
Skill taxonomy models.

SkillNode is immutable reference data: a tree of skills where leaves are
concrete technologies ("React") and inner nodes are families ("Frontend",
"JavaScript").
"""

from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import TimestampedModel


class SkillNode(TimestampedModel):
    """A node in the hierarchical skill taxonomy."""

    name = models.CharField(max_length=100, db_index=True)
    parent = models.ForeignKey(
        'self',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='children'
    )
    depth = models.PositiveSmallIntegerField(default=0)
    is_leaf = models.BooleanField(default=True)
    aliases = models.JSONField(default=list, blank=True, help_text=_('Alternative spellings'))
    description = models.TextField(blank=True)

    class Meta:
        verbose_name = _('Skill')
        verbose_name_plural = _('Skills')
        ordering = ['depth', 'name']
        constraints = [
            models.UniqueConstraint(
                fields=['parent', 'name'],
                name='skills_skillnode_unique_parent_name'
            )
        ]

    def __str__(self):
        if self.parent_id:
            return f"{self.parent.name} > {self.name}"
        return self.name

    def clean(self):
        """Reject self-parenting and circular references."""
        super().clean()
        if self.parent:
            if self.parent == self:
                raise ValidationError({'parent': _('A skill cannot be its own parent.')})
            ancestor = self.parent
            visited = {self.pk} if self.pk else set()
            while ancestor:
                if ancestor.pk in visited:
                    raise ValidationError({'parent': _('Circular parent reference detected.')})
                visited.add(ancestor.pk)
                ancestor = ancestor.parent

    def save(self, *args, **kwargs):
        self.depth = self.parent.depth + 1 if self.parent_id else 0
        super().save(*args, **kwargs)
        if self.parent_id:
            SkillNode.objects.filter(pk=self.parent_id, is_leaf=True).update(is_leaf=False)
