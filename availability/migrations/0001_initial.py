import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('postings', '0001_initial'),
        ('profiles', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='AvailabilityWindow',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('window_type', models.CharField(choices=[('recurring', 'Recurring'), ('specific', 'Specific date')], default='recurring', max_length=20)),
                ('day_of_week', models.PositiveSmallIntegerField(blank=True, help_text='0=Monday', null=True)),
                ('start_minutes', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('end_minutes', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('specific_date', models.DateField(blank=True, null=True)),
                ('start_at', models.DateTimeField(blank=True, null=True)),
                ('end_at', models.DateTimeField(blank=True, null=True)),
                ('posting', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='availability_windows', to='postings.posting')),
                ('profile', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='availability_windows', to='profiles.profile')),
            ],
            options={
                'verbose_name': 'Availability Window',
                'verbose_name_plural': 'Availability Windows',
                'ordering': ['day_of_week', 'start_minutes', 'start_at'],
            },
        ),
        migrations.CreateModel(
            name='CalendarConnection',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('provider', models.CharField(choices=[('google', 'Google Calendar'), ('ical', 'iCal feed')], max_length=20)),
                ('sync_status', models.CharField(choices=[('pending', 'Pending'), ('syncing', 'Syncing'), ('synced', 'Synced'), ('error', 'Error')], default='pending', max_length=20)),
                ('sync_error', models.TextField(blank=True)),
                ('last_synced_at', models.DateTimeField(blank=True, null=True)),
                ('profile', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='calendar_connections', to='profiles.profile')),
            ],
            options={
                'verbose_name': 'Calendar Connection',
                'verbose_name_plural': 'Calendar Connections',
            },
        ),
        migrations.CreateModel(
            name='CalendarBusyBlock',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='Updated at')),
                ('canonical_range', models.CharField(help_text='"[start,end)" in week minutes', max_length=32)),
                ('connection', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='busy_blocks', to='availability.calendarconnection')),
                ('profile', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='busy_blocks', to='profiles.profile')),
            ],
            options={
                'verbose_name': 'Calendar Busy Block',
                'verbose_name_plural': 'Calendar Busy Blocks',
            },
        ),
        migrations.AddConstraint(
            model_name='availabilitywindow',
            constraint=models.CheckConstraint(condition=models.Q(models.Q(('posting__isnull', True), ('profile__isnull', False)), models.Q(('posting__isnull', False), ('profile__isnull', True)), _connector='OR'), name='availability_window_single_owner'),
        ),
    ]
