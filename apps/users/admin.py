"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Admin configuration for the CustomUser model.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from django.utils.translation import gettext_lazy as _

from apps.core.models import ActionType, EntityType
from apps.core.services import AuditLogService

from .models import CustomUser, UserStatus


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    """Staff accounts with their WDTS role and status."""

    model = CustomUser

    list_display = ('email', 'first_name', 'last_name', 'role', 'status', 'access_level', 'last_login')
    list_display_links = ('email',)
    list_filter = ('role', 'status', 'is_staff')
    search_fields = ('email', 'first_name', 'last_name', 'phone')
    ordering = ('first_name', 'last_name')
    filter_horizontal = ('groups', 'user_permissions')
    readonly_fields = ('public_id', 'last_login', 'date_joined')
    actions = ['deactivate_accounts', 'activate_accounts']

    fieldsets = (
        (None, {'fields': ('public_id', 'email', 'password')}),
        (_('Staff Member'), {'fields': ('first_name', 'last_name', 'phone')}),
        (_('WDTS Access'), {'fields': ('role', 'status')}),
        (_('Django Admin'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Activity'), {'fields': ('last_login', 'date_joined')}),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'first_name', 'last_name', 'role', 'password1', 'password2'),
        }),
    )

    @admin.display(description=_('Access'))
    def access_level(self, obj):
        if obj.can_delete():
            return _('Read, write & delete')
        if obj.can_write():
            return _('Read & write')
        return _('Read only')

    def _set_status(self, request, queryset, status):
        changed = 0
        for user in queryset.exclude(status=status):
            previous = user.status
            user.status = status
            user.save(update_fields=['status'])
            AuditLogService.log_action(
                request.user, ActionType.STATUS_CHANGE, EntityType.USER, user.pk,
                {'entity_name': user.email, 'previous_status': previous, 'new_status': status}
            )
            changed += 1
        self.message_user(request, _('%(count)d account(s) updated.') % {'count': changed})

    @admin.action(description=_('Deactivate selected accounts'))
    def deactivate_accounts(self, request, queryset):
        self._set_status(request, queryset.exclude(pk=request.user.pk), UserStatus.INACTIVE)

    @admin.action(description=_('Activate selected accounts'))
    def activate_accounts(self, request, queryset):
        self._set_status(request, queryset, UserStatus.ACTIVE)
