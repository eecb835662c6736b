import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import postings.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('profiles', '0001_initial'),
        ('skills', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Posting',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('category', models.CharField(blank=True, db_index=True, max_length=100)),
                ('mode', models.CharField(choices=[('remote', 'Remote'), ('hybrid', 'Hybrid'), ('onsite', 'On-site')], default='remote', max_length=20)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('team_size_min', models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('team_size_max', models.PositiveSmallIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('skill_level_min', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MaxValueValidator(10)])),
                ('hours_per_week', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('auto_accept', models.BooleanField(default=False, help_text='Accept join requests immediately while seats remain')),
                ('status', models.CharField(choices=[('open', 'Open'), ('filled', 'Filled'), ('closed', 'Closed'), ('expired', 'Expired')], db_index=True, default='open', max_length=20)),
                ('expires_at', models.DateTimeField(db_index=True, default=postings.models.default_expiry)),
                ('reposted_at', models.DateTimeField(blank=True, null=True)),
                ('embedding', models.JSONField(blank=True, null=True)),
                ('needs_embedding', models.BooleanField(db_index=True, default=True)),
                ('creator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='postings', to='profiles.profile')),
            ],
            options={
                'verbose_name': 'Posting',
                'verbose_name_plural': 'Postings',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='PostingSkill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('min_level', models.PositiveSmallIntegerField(blank=True, null=True, validators=[django.core.validators.MaxValueValidator(10)])),
                ('posting', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='required_skills', to='postings.posting')),
                ('skill', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='posting_requirements', to='skills.skillnode')),
            ],
            options={
                'verbose_name': 'Posting Skill',
                'verbose_name_plural': 'Posting Skills',
            },
        ),
        migrations.CreateModel(
            name='Application',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('cover_message', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('accepted', 'Accepted'), ('rejected', 'Rejected'), ('waitlisted', 'Waitlisted'), ('withdrawn', 'Withdrawn')], db_index=True, default='pending', max_length=20)),
                ('decided_at', models.DateTimeField(blank=True, null=True)),
                ('applicant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='profiles.profile')),
                ('posting', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='applications', to='postings.posting')),
            ],
            options={
                'verbose_name': 'Application',
                'verbose_name_plural': 'Applications',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='MeetingProposal',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('title', models.CharField(blank=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField()),
                ('status', models.CharField(choices=[('proposed', 'Proposed'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled')], default='proposed', max_length=20)),
                ('posting', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meeting_proposals', to='postings.posting')),
                ('proposed_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meeting_proposals', to='profiles.profile')),
            ],
            options={
                'verbose_name': 'Meeting Proposal',
                'verbose_name_plural': 'Meeting Proposals',
                'ordering': ['start_time'],
            },
        ),
        migrations.CreateModel(
            name='MeetingResponse',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('response', models.CharField(choices=[('available', 'Available'), ('unavailable', 'Unavailable')], max_length=20)),
                ('proposal', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='responses', to='postings.meetingproposal')),
                ('responder', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meeting_responses', to='profiles.profile')),
            ],
            options={
                'verbose_name': 'Meeting Response',
                'verbose_name_plural': 'Meeting Responses',
            },
        ),
        migrations.AddConstraint(
            model_name='postingskill',
            constraint=models.UniqueConstraint(fields=('posting', 'skill'), name='postings_postingskill_unique'),
        ),
        migrations.AddConstraint(
            model_name='application',
            constraint=models.UniqueConstraint(fields=('posting', 'applicant'), name='postings_application_unique'),
        ),
        migrations.AddConstraint(
            model_name='meetingresponse',
            constraint=models.UniqueConstraint(fields=('proposal', 'responder'), name='postings_meetingresponse_unique'),
        ),
    ]
