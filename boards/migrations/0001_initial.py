# Generated manually for boards and check-ins

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Board',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Unique per owner', max_length=50)),
                ('description', models.CharField(blank=True, max_length=500, null=True)),
                ('emoji', models.CharField(default='📊', max_length=10)),
                ('color', models.CharField(default='#3B82F6', help_text='Hex color code for board visualization', max_length=7)),
                ('unit_type', models.CharField(choices=[('boolean', 'Done / not done'), ('quantity', 'Quantity'), ('duration', 'Duration')], default='boolean', max_length=20)),
                ('unit', models.CharField(blank=True, help_text='Unit label (e.g., pages, minutes)', max_length=20, null=True)),
                ('target_amount', models.DecimalField(blank=True, decimal_places=2, help_text='Daily target used for heatmap intensity', max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('current_streak', models.PositiveIntegerField(default=0)),
                ('longest_streak', models.PositiveIntegerField(default=0)),
                ('total_check_ins', models.PositiveIntegerField(default=0)),
                ('last_check_in_date', models.DateField(blank=True, null=True)),
                ('is_archived', models.BooleanField(default=False)),
                ('archived_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='boards', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-updated_at'],
            },
        ),
        migrations.CreateModel(
            name='CheckIn',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('date', models.DateField(help_text="Calendar date in the owner's timezone")),
                ('timestamp', models.DateTimeField(default=django.utils.timezone.now)),
                ('amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('note', models.CharField(blank=True, max_length=500, null=True)),
                ('session_number', models.PositiveIntegerField(default=1, help_text='1-based ordinal among same-day check-ins; never renumbered')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('board', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='check_ins', to='boards.board')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='check_ins', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-date', '-timestamp'],
            },
        ),
        migrations.CreateModel(
            name='UserPreference',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timezone', models.CharField(default='UTC', help_text='IANA timezone name, e.g. Europe/Berlin', max_length=64)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='board_preferences', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'User Preference',
                'verbose_name_plural': 'User Preferences',
            },
        ),
        migrations.AddConstraint(
            model_name='board',
            constraint=models.UniqueConstraint(fields=('user', 'name'), name='unique_board_name_per_user'),
        ),
        migrations.AddIndex(
            model_name='board',
            index=models.Index(fields=['user', 'is_archived'], name='board_user_archived_idx'),
        ),
        migrations.AddConstraint(
            model_name='checkin',
            constraint=models.UniqueConstraint(fields=('board', 'date', 'session_number'), name='unique_session_per_board_day'),
        ),
        migrations.AddIndex(
            model_name='checkin',
            index=models.Index(fields=['board', 'date'], name='checkin_board_date_idx'),
        ),
        migrations.AddIndex(
            model_name='checkin',
            index=models.Index(fields=['user', 'date'], name='checkin_user_date_idx'),
        ),
        migrations.AddIndex(
            model_name='checkin',
            index=models.Index(fields=['board', 'timestamp'], name='checkin_board_timestamp_idx'),
        ),
    ]
