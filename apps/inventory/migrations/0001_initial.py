# Generated manually on 2026-10-19

import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Article',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive records stay in history but leave the pickers.', verbose_name='Is Active')),
                ('article_name', models.CharField(max_length=255, verbose_name='Article Name')),
                ('article_name_tk', models.CharField(blank=True, help_text='Article name printed on tokens.', max_length=255, verbose_name='Token Name')),
                ('cost_per_unit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Cost Per Unit')),
                ('item_type', models.CharField(choices=[('Article', 'Article'), ('Aid', 'Aid'), ('Project', 'Project')], db_index=True, default='Article', max_length=10, verbose_name='Item Type')),
                ('category', models.CharField(blank=True, max_length=100, verbose_name='Category')),
                ('master_category', models.CharField(blank=True, max_length=100, verbose_name='Master Category')),
                ('comments', models.TextField(blank=True, verbose_name='Comments')),
                ('combo', models.BooleanField(default=False, help_text='Marks split articles created for order management.', verbose_name='Split / Combo')),
                ('created_by', models.ForeignKey(blank=True, help_text='Staff member who entered the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='article_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='Staff member who last changed the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='article_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Article',
                'verbose_name_plural': 'Articles',
                'ordering': ['article_name'],
            },
        ),
    ]
