"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Inventory app configuration.
-------------------------------------------------------------------------
"""
from django.apps import AppConfig


class InventoryConfig(AppConfig):
    """Configuration for the inventory application."""
    
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.inventory'
    verbose_name = 'Article Catalog & Orders'
