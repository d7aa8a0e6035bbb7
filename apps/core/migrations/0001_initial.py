# Generated manually on 2026-10-19

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
            name='District',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Inactive records stay in history but leave the pickers.', verbose_name='Is Active')),
                ('district_name', models.CharField(max_length=100, unique=True, verbose_name='District Name')),
                ('president_name', models.CharField(blank=True, max_length=150, verbose_name='President Name')),
                ('mobile_number', models.CharField(blank=True, max_length=20, verbose_name='Mobile Number')),
                ('allotted_budget', models.DecimalField(decimal_places=2, default=Decimal('0.00'), help_text='Budget ceiling for district beneficiary entries.', max_digits=15, verbose_name='Allotted Budget')),
                ('application_number', models.CharField(blank=True, default='', help_text='Application number issued on the first district submission.', max_length=20, verbose_name='Application Number')),
                ('created_by', models.ForeignKey(blank=True, help_text='Staff member who entered the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='district_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='Staff member who last changed the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='district_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'District',
                'verbose_name_plural': 'Districts',
                'ordering': ['district_name'],
            },
        ),
        migrations.CreateModel(
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action_type', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('DELETE', 'Delete'), ('LOGIN', 'Login'), ('LOGOUT', 'Logout'), ('EXPORT', 'Export'), ('STATUS_CHANGE', 'Status Change')], max_length=20, verbose_name='Action')),
                ('entity_type', models.CharField(choices=[('article', 'Article'), ('district', 'District'), ('district_beneficiary', 'District Beneficiary'), ('public_beneficiary', 'Public Beneficiary'), ('institution_beneficiary', 'Institution Beneficiary'), ('fund_request', 'Fund Request'), ('order', 'Order'), ('user', 'User'), ('system', 'System')], max_length=30, verbose_name='Entity Type')),
                ('entity_id', models.CharField(blank=True, default='', max_length=64, verbose_name='Entity ID')),
                ('details', models.JSONField(blank=True, default=dict, verbose_name='Details')),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True, verbose_name='IP Address')),
                ('user_agent', models.TextField(blank=True, verbose_name='User Agent')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='Timestamp')),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL, verbose_name='User')),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['entity_type', 'entity_id'], name='core_audit_entity_idx')],
            },
        ),
    ]
