"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for core models: District
             master and the audit trail.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.core.models import District, AuditLog


@admin.register(District)
class DistrictAdmin(admin.ModelAdmin):
    """Admin configuration for District model."""
    
    list_display = ['district_name', 'president_name', 'mobile_number',
                    'allotted_budget', 'application_number', 'entry_count', 'is_active']
    list_filter = ['is_active']
    search_fields = ['district_name', 'president_name', 'application_number']
    ordering = ['district_name']
    readonly_fields = ['public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']
    
    def entry_count(self, obj: District) -> int:
        """Count beneficiary entry rows recorded for this district."""
        return obj.beneficiary_entries.count()
    entry_count.short_description = _('Entries')


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    """Read-only admin for the audit trail."""
    
    list_display = ['created_at', 'user', 'action_type', 'entity_type', 'entity_id']
    list_filter = ['action_type', 'entity_type']
    search_fields = ['entity_id', 'user__email']
    date_hierarchy = 'created_at'
    readonly_fields = ['user', 'action_type', 'entity_type', 'entity_id',
                       'details', 'ip_address', 'user_agent', 'created_at']
    
    def has_add_permission(self, request) -> bool:
        return False
    
    def has_change_permission(self, request, obj=None) -> bool:
        return False
