"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for beneficiary entries.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.beneficiaries.models import (
    DistrictBeneficiaryEntry,
    InstitutionBeneficiaryEntry,
    PublicBeneficiaryEntry,
)


class BeneficiaryEntryAdmin(admin.ModelAdmin):
    """Shared list settings; total_amount is derived on save."""

    list_filter = ['status']
    readonly_fields = ['total_amount', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']
    autocomplete_fields = ['article']
    ordering = ['-created_at']


@admin.register(DistrictBeneficiaryEntry)
class DistrictBeneficiaryEntryAdmin(BeneficiaryEntryAdmin):
    """Admin configuration for district entries."""

    list_display = ['application_number', 'district', 'article', 'quantity',
                    'article_cost_per_unit', 'total_amount', 'status']
    list_filter = ['status', 'district']
    search_fields = ['application_number', 'district__district_name', 'article__article_name']


@admin.register(PublicBeneficiaryEntry)
class PublicBeneficiaryEntryAdmin(BeneficiaryEntryAdmin):
    """Admin configuration for public entries."""

    list_display = ['application_number', 'name', 'masked_aadhar', 'article',
                    'quantity', 'total_amount', 'status']
    list_filter = ['status', 'gender', 'is_handicapped']
    search_fields = ['application_number', 'name', 'aadhar_number', 'mobile']

    def masked_aadhar(self, obj: PublicBeneficiaryEntry) -> str:
        """Show only the last four digits."""
        digits = obj.aadhar_number or ''
        return f"XXXX XXXX {digits[-4:]}" if len(digits) >= 4 else digits
    masked_aadhar.short_description = _('Aadhaar')


@admin.register(InstitutionBeneficiaryEntry)
class InstitutionBeneficiaryEntryAdmin(BeneficiaryEntryAdmin):
    """Admin configuration for institution and others entries."""

    list_display = ['application_number', 'institution_name', 'institution_type',
                    'article', 'quantity', 'total_amount', 'status']
    list_filter = ['status', 'institution_type']
    search_fields = ['application_number', 'institution_name', 'article__article_name']
