import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Form',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=500)),
                ('description', models.TextField(blank=True)),
                ('content', models.JSONField(blank=True, help_text='Embedded form definition document', null=True)),
                ('published', models.BooleanField(default=False)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='forms', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'forms',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['user', '-created_at'], name='forms_user_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='FormSubmission',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('data', models.JSONField(default=dict, help_text='Field id to submitted value')),
                ('completion_time', models.FloatField(blank=True, help_text='Seconds the respondent spent filling the form', null=True)),
                ('form', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='submissions', to='builder.form')),
            ],
            options={
                'db_table': 'form_submissions',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['form', '-created_at'], name='submissions_form_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='AnalyticsCache',
            fields=[
                ('form', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, primary_key=True, related_name='analytics_cache', serialize=False, to='builder.form')),
                ('analysis', models.JSONField()),
                ('generated_at', models.DateTimeField()),
            ],
            options={
                'db_table': 'analytics_cache',
            },
        ),
    ]
