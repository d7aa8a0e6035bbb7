"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Fund requests app. Aid and Article fund requests, recipient
             usage tracking and form drafts.
-------------------------------------------------------------------------
"""
