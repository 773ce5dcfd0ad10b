import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PracticeSession',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('target_sequence', models.TextField(editable=False)),
                ('nominal_duration_seconds', models.PositiveIntegerField(default=60)),
                ('status', models.CharField(choices=[('in_progress', 'In progress'), ('completed', 'Completed'), ('abandoned', 'Abandoned')], default='in_progress', max_length=16)),
                ('started_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('ended_at', models.DateTimeField(blank=True, null=True)),
                ('owner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='practice_sessions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-started_at', '-id'],
                'indexes': [models.Index(fields=['owner', 'status'], name='idx_owner_status')],
                'constraints': [models.UniqueConstraint(condition=models.Q(('status', 'in_progress')), fields=('owner',), name='uq_one_active_session_per_owner')],
            },
        ),
        migrations.CreateModel(
            name='KeystrokeResult',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('target_key', models.CharField(max_length=1)),
                ('pressed_key', models.CharField(blank=True, max_length=1, null=True)),
                ('is_correct', models.BooleanField()),
                ('response_time_ms', models.PositiveIntegerField()),
                ('recorded_at', models.DateTimeField(auto_now_add=True)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='results', to='practice.practicesession')),
            ],
            options={
                'ordering': ['recorded_at', 'id'],
                'indexes': [models.Index(fields=['session', 'recorded_at'], name='idx_session_recorded')],
            },
        ),
        migrations.CreateModel(
            name='UserStatistics',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('total_sessions', models.PositiveIntegerField(default=0)),
                ('total_key_presses', models.PositiveIntegerField(default=0)),
                ('correct_key_presses', models.PositiveIntegerField(default=0)),
                ('average_kpm', models.FloatField(default=0.0)),
                ('best_kpm', models.FloatField(default=0.0)),
                ('average_accuracy', models.FloatField(default=0.0)),
                ('best_accuracy', models.FloatField(default=0.0)),
                ('average_response_time_ms', models.FloatField(default=0.0)),
                ('best_response_time_ms', models.FloatField(default=0.0)),
                ('last_session_at', models.DateTimeField(blank=True, null=True)),
                ('version', models.PositiveIntegerField(default=0)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='typing_statistics', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'user statistics',
            },
        ),
    ]
