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
        ('core', '0001_initial'),
        ('inventory', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='DistrictBeneficiaryEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('application_number', models.CharField(blank=True, db_index=True, default='', max_length=20, verbose_name='Application Number')),
                ('quantity', models.PositiveIntegerField(default=1, verbose_name='Quantity')),
                ('article_cost_per_unit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Cost Per Unit')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Total Amount')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed')], default='pending', max_length=10, verbose_name='Status')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='districtbeneficiaryentry_rows', to='inventory.article', verbose_name='Article')),
                ('district', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='beneficiary_entries', to='core.district', verbose_name='District')),
                ('created_by', models.ForeignKey(blank=True, help_text='Staff member who entered the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='districtbeneficiaryentry_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='Staff member who last changed the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='districtbeneficiaryentry_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'District Beneficiary Entry',
                'verbose_name_plural': 'District Beneficiary Entries',
                'ordering': ['-created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='PublicBeneficiaryEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('application_number', models.CharField(blank=True, db_index=True, default='', max_length=20, verbose_name='Application Number')),
                ('quantity', models.PositiveIntegerField(default=1, verbose_name='Quantity')),
                ('article_cost_per_unit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Cost Per Unit')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Total Amount')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed')], default='pending', max_length=10, verbose_name='Status')),
                ('name', models.CharField(max_length=255, verbose_name='Name')),
                ('aadhar_number', models.CharField(db_index=True, help_text='12-digit Aadhaar number.', max_length=20, verbose_name='Aadhaar Number')),
                ('is_handicapped', models.BooleanField(default=False, verbose_name='Is Handicapped')),
                ('gender', models.CharField(blank=True, choices=[('Male', 'Male'), ('Female', 'Female'), ('Transgender', 'Transgender')], max_length=15, verbose_name='Gender')),
                ('female_status', models.CharField(blank=True, choices=[('Single Mother', 'Single Mother'), ('Widow', 'Widow'), ('Married', 'Married'), ('Unmarried', 'Unmarried')], max_length=15, verbose_name='Female Status')),
                ('address', models.TextField(blank=True, verbose_name='Address')),
                ('mobile', models.CharField(blank=True, max_length=20, verbose_name='Mobile')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='publicbeneficiaryentry_rows', to='inventory.article', verbose_name='Article')),
                ('created_by', models.ForeignKey(blank=True, help_text='Staff member who entered the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='publicbeneficiaryentry_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='Staff member who last changed the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='publicbeneficiaryentry_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Public Beneficiary Entry',
                'verbose_name_plural': 'Public Beneficiary Entries',
                'ordering': ['-created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='InstitutionBeneficiaryEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('application_number', models.CharField(blank=True, db_index=True, default='', max_length=20, verbose_name='Application Number')),
                ('quantity', models.PositiveIntegerField(default=1, verbose_name='Quantity')),
                ('article_cost_per_unit', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))], verbose_name='Cost Per Unit')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Total Amount')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed')], default='pending', max_length=10, verbose_name='Status')),
                ('institution_name', models.CharField(max_length=255, verbose_name='Institution Name')),
                ('institution_type', models.CharField(choices=[('institutions', 'Institutions'), ('others', 'Others')], db_index=True, default='institutions', max_length=15, verbose_name='Institution Type')),
                ('address', models.TextField(blank=True, verbose_name='Address')),
                ('mobile', models.CharField(blank=True, max_length=20, verbose_name='Mobile')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='institutionbeneficiaryentry_rows', to='inventory.article', verbose_name='Article')),
                ('created_by', models.ForeignKey(blank=True, help_text='Staff member who entered the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='institutionbeneficiaryentry_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='Staff member who last changed the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='institutionbeneficiaryentry_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Institution Beneficiary Entry',
                'verbose_name_plural': 'Institution Beneficiary Entries',
                'ordering': ['-created_at', 'id'],
            },
        ),
    ]
