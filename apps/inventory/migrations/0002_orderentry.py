# Generated manually on 2026-10-19

import django.core.validators
import django.db.models.deletion
import uuid
from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('inventory', '0001_initial'),
        ('fund_requests', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='OrderEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Stable reference used in exports and audit entries.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='When the record was entered.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='When the record was last changed.', verbose_name='Updated At')),
                ('quantity_ordered', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)], verbose_name='Quantity Ordered')),
                ('order_date', models.DateField(verbose_name='Order Date')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('ordered', 'Ordered'), ('received', 'Received'), ('cancelled', 'Cancelled')], db_index=True, default='pending', max_length=10, verbose_name='Status')),
                ('supplier_name', models.CharField(blank=True, max_length=255, verbose_name='Supplier Name')),
                ('unit_price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Unit Price')),
                ('total_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=15, verbose_name='Total Amount')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('article', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='order_entries', to='inventory.article', verbose_name='Article')),
                ('fund_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='order_entries', to='fund_requests.fundrequest', verbose_name='Fund Request')),
            ],
            options={
                'verbose_name': 'Order Entry',
                'verbose_name_plural': 'Order Entries',
                'ordering': ['-order_date', '-created_at'],
            },
        ),
    ]
