"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiaries app. District, public and institution entries,
             application numbers and dropdown candidates.
-------------------------------------------------------------------------
"""
