"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Fund requests app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class FundRequestsConfig(AppConfig):
    """Configuration for the fund requests application."""
    
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.fund_requests'
    verbose_name = 'Fund Requests'
