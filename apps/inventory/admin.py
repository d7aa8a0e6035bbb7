"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for the article catalog and
             order entries.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.inventory.models import Article, OrderEntry


@admin.register(Article)
class ArticleAdmin(admin.ModelAdmin):
    """
    Admin configuration for Article model.

    Articles are deactivated, never deleted.
    """

    list_display = ['article_name', 'item_type', 'category', 'master_category',
                    'cost_per_unit', 'combo', 'is_active']
    list_filter = ['item_type', 'is_active', 'combo', 'master_category']
    search_fields = ['article_name', 'category', 'master_category']
    ordering = ['article_name']
    readonly_fields = ['public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']
    actions = ['activate_articles', 'deactivate_articles']

    fieldsets = (
        (None, {
            'fields': ('article_name', 'article_name_tk', 'item_type', 'cost_per_unit')
        }),
        (_('Classification'), {
            'fields': ('category', 'master_category', 'combo', 'comments')
        }),
        (_('Status'), {
            'fields': ('is_active',)
        }),
        (_('Audit Trail'), {
            'fields': ('public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        return False

    @admin.action(description=_('Activate selected articles'))
    def activate_articles(self, request, queryset):
        updated = queryset.update(is_active=True)
        self.message_user(request, f'{updated} articles activated.')

    @admin.action(description=_('Deactivate selected articles'))
    def deactivate_articles(self, request, queryset):
        updated = queryset.update(is_active=False)
        self.message_user(request, f'{updated} articles deactivated.')


@admin.register(OrderEntry)
class OrderEntryAdmin(admin.ModelAdmin):
    """Admin configuration for OrderEntry model."""

    list_display = ['article', 'quantity_ordered', 'order_date', 'status',
                    'supplier_name', 'total_amount', 'fund_request']
    list_filter = ['status', 'order_date']
    search_fields = ['article__article_name', 'supplier_name', 'fund_request__fund_request_number']
    date_hierarchy = 'order_date'
    autocomplete_fields = ['article']
    raw_id_fields = ['fund_request']
