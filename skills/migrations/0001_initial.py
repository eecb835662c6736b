import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SkillNode',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('name', models.CharField(db_index=True, max_length=100)),
                ('depth', models.PositiveSmallIntegerField(default=0)),
                ('is_leaf', models.BooleanField(default=True)),
                ('aliases', models.JSONField(blank=True, default=list, help_text='Alternative spellings')),
                ('description', models.TextField(blank=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='children', to='skills.skillnode')),
            ],
            options={
                'verbose_name': 'Skill',
                'verbose_name_plural': 'Skills',
                'ordering': ['depth', 'name'],
            },
        ),
        migrations.AddConstraint(
            model_name='skillnode',
            constraint=models.UniqueConstraint(fields=('parent', 'name'), name='skills_skillnode_unique_parent_name'),
        ),
    ]
