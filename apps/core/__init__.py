"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Core app initialization. Contains shared mixins, exceptions,
             the District master and the audit trail.
-------------------------------------------------------------------------
"""
