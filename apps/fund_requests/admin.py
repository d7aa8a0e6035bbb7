"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for fund requests.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.fund_requests.models import FundRequest, FundRequestArticle, FundRequestRecipient


class FundRequestRecipientInline(admin.TabularInline):
    """Inline admin for Aid recipients."""
    model = FundRequestRecipient
    extra = 0
    fields = ['beneficiary_type', 'beneficiary', 'application_number', 'recipient_name',
              'fund_requested', 'cheque_in_favour', 'cheque_no']


class FundRequestArticleInline(admin.TabularInline):
    """Inline admin for Article lines."""
    model = FundRequestArticle
    extra = 0
    fields = ['sl_no', 'article', 'article_name', 'quantity', 'price_including_gst', 'value', 'cumulative']
    readonly_fields = ['value', 'cumulative']
    autocomplete_fields = ['article']


@admin.register(FundRequest)
class FundRequestAdmin(admin.ModelAdmin):
    """
    Admin configuration for FundRequest model.

    Totals are derived from the lines and shown read-only.
    """

    list_display = ['fund_request_number', 'fund_request_type', 'status', 'aid_type',
                    'supplier_name', 'total_amount', 'created_at']
    list_filter = ['fund_request_type', 'status']
    search_fields = ['fund_request_number', 'aid_type', 'supplier_name', 'purchase_order_number']
    date_hierarchy = 'created_at'
    readonly_fields = ['total_amount', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']
    inlines = [FundRequestRecipientInline, FundRequestArticleInline]

    fieldsets = (
        (None, {
            'fields': ('fund_request_number', 'fund_request_type', 'status', 'total_amount', 'aid_type', 'notes')
        }),
        (_('Supplier'), {
            'fields': ('gst_number', 'supplier_name', 'supplier_address', 'supplier_city',
                       'supplier_state', 'supplier_pincode', 'purchase_order_number'),
            'classes': ('collapse',)
        }),
        (_('Audit Trail'), {
            'fields': ('public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )
