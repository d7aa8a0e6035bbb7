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
        ('inventory', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='FundRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('fund_request_type', models.CharField(choices=[('Aid', 'Aid'), ('Article', 'Article')], max_length=10, verbose_name='Fund Request Type')),
                ('fund_request_number', models.CharField(max_length=30, unique=True, verbose_name='Fund Request Number')),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('submitted', 'Submitted'), ('approved', 'Approved'), ('rejected', 'Rejected'), ('completed', 'Completed')], db_index=True, default='draft', max_length=10, verbose_name='Status')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Total Amount')),
                ('aid_type', models.CharField(blank=True, max_length=100, verbose_name='Aid Type')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('gst_number', models.CharField(blank=True, max_length=30, verbose_name='GST Number')),
                ('supplier_name', models.CharField(blank=True, max_length=255, verbose_name='Supplier Name')),
                ('supplier_address', models.TextField(blank=True, verbose_name='Supplier Address')),
                ('supplier_city', models.CharField(blank=True, max_length=100, verbose_name='Supplier City')),
                ('supplier_state', models.CharField(blank=True, max_length=100, verbose_name='Supplier State')),
                ('supplier_pincode', models.CharField(blank=True, max_length=10, verbose_name='Supplier Pincode')),
                ('purchase_order_number', models.CharField(blank=True, max_length=30, verbose_name='Purchase Order Number')),
                ('created_by', models.ForeignKey(blank=True, help_text='Staff member who entered the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fundrequest_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='Staff member who last changed the record.', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='fundrequest_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Fund Request',
                'verbose_name_plural': 'Fund Requests',
                'ordering': ['-created_at', '-id'],
            },
        ),
        migrations.CreateModel(
            name='FundRequestRecipient',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('beneficiary_type', models.CharField(choices=[('District', 'District'), ('Public', 'Public'), ('Institutions', 'Institutions'), ('Others', 'Others')], max_length=15, verbose_name='Beneficiary Type')),
                ('beneficiary', models.CharField(blank=True, max_length=255, null=True, verbose_name='Beneficiary')),
                ('application_number', models.CharField(blank=True, db_index=True, max_length=20, verbose_name='Application Number')),
                ('recipient_name', models.CharField(max_length=255, verbose_name='Recipient Name')),
                ('name_of_beneficiary', models.CharField(blank=True, max_length=255, verbose_name='Name of Beneficiary')),
                ('name_of_institution', models.CharField(blank=True, max_length=255, verbose_name='Name of Institution')),
                ('details', models.TextField(blank=True, verbose_name='Details')),
                ('fund_requested', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Fund Requested')),
                ('aadhar_number', models.CharField(blank=True, max_length=20, verbose_name='Aadhaar Number')),
                ('address', models.TextField(blank=True, verbose_name='Address')),
                ('cheque_in_favour', models.CharField(blank=True, max_length=255, verbose_name='Cheque in Favour')),
                ('cheque_no', models.CharField(blank=True, max_length=50, verbose_name='Cheque No')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('district_name', models.CharField(blank=True, max_length=100, verbose_name='District Name')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('fund_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recipients', to='fund_requests.fundrequest', verbose_name='Fund Request')),
            ],
            options={
                'verbose_name': 'Fund Request Recipient',
                'verbose_name_plural': 'Fund Request Recipients',
                'ordering': ['fund_request', 'id'],
            },
        ),
        migrations.CreateModel(
            name='FundRequestArticle',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sl_no', models.PositiveIntegerField(default=1, verbose_name='Sl. No')),
                ('beneficiary', models.CharField(blank=True, max_length=255, verbose_name='Beneficiary')),
                ('article_name', models.CharField(max_length=255, verbose_name='Article Name')),
                ('gst_no', models.CharField(blank=True, max_length=30, verbose_name='GST No')),
                ('quantity', models.PositiveIntegerField(default=1, verbose_name='Quantity')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Unit Price')),
                ('price_including_gst', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Price Including GST')),
                ('value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Value')),
                ('cumulative', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Cumulative')),
                ('supplier_article_name', models.CharField(blank=True, max_length=255, verbose_name='Supplier Article Name')),
                ('cheque_in_favour', models.CharField(blank=True, max_length=255, verbose_name='Cheque in Favour')),
                ('cheque_no', models.CharField(blank=True, max_length=50, verbose_name='Cheque No')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('created_at', models.DateTimeField(auto_now_add=True, verbose_name='Created At')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='fund_request_lines', to='inventory.article', verbose_name='Article')),
                ('fund_request', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='articles', to='fund_requests.fundrequest', verbose_name='Fund Request')),
            ],
            options={
                'verbose_name': 'Fund Request Article',
                'verbose_name_plural': 'Fund Request Articles',
                'ordering': ['fund_request', 'sl_no'],
            },
        ),
    ]
