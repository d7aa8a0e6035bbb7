"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: App configuration for the budgeting module.
             Handles district budget ceilings, remaining fund and
             line total calculations.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class BudgetingConfig(AppConfig):
    """
    Configuration class for the budgeting application.
    
    This app provides:
    - Line totals and cumulative values
    - Remaining fund per district
    - District budget summaries
    """
    
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.budgeting'
    verbose_name = 'Budgeting Module'
