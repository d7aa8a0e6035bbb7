"""
-------------------------------------------------------------------------
System: WDTS (Welfare Disbursement Tracking System)
Client: Welfare Aid Distribution Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Custom exceptions for the WDTS system. These provide
             specific error codes for beneficiary, allocation and
             fund request failures.
-------------------------------------------------------------------------
"""
from typing import Optional


class WelfareException(Exception):
    """Base exception for all WDTS specific errors."""
    
    error_code: str = "ERR_WDTS_GENERIC"
    default_message: str = "An error occurred in the WDTS system."
    
    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        """
        Initialize WDTS exception.
        
        Args:
            message: Custom error message. If None, uses default_message.
            details: Additional context dictionary for the caller.
        """
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)
    
    def to_dict(self) -> dict:
        """Convert exception to the structured outcome shown to the user."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


# Validation Exceptions
class ValidationFailedException(WelfareException):
    """Raised by save paths when the field validation map is not empty."""
    
    error_code = "ERR_VALIDATION_FAILED"
    default_message = "Please correct the highlighted fields before saving."
    
    @property
    def errors(self) -> dict:
        """Field -> message map collected by the validator."""
        return self.details.get('errors', {})


# Beneficiary Exceptions
class DuplicateBeneficiaryException(WelfareException):
    """
    Raised when a beneficiary identity already exists in the store.
    
    The details carry the existing record and the choices offered to
    the user: update the existing record or load it for editing.
    """
    
    error_code = "ERR_DUPLICATE_BENEFICIARY"
    default_message = "A beneficiary with this Aadhaar number already exists."
    
    UPDATE_EXISTING = 'update_existing'
    EDIT_EXISTING = 'edit_existing'
    
    def __init__(self, message: Optional[str] = None, details: Optional[dict] = None) -> None:
        details = dict(details or {})
        details.setdefault('choices', [self.UPDATE_EXISTING, self.EDIT_EXISTING])
        super().__init__(message, details)


class BeneficiaryInUseException(WelfareException):
    """Raised when a recipient is already paid out by another fund request."""
    
    error_code = "ERR_BENEFICIARY_IN_USE"
    default_message = "This beneficiary is already used in another fund request."


# Allocation Exceptions
class ApplicationNumberException(WelfareException):
    """Raised when an application number cannot be issued or parsed."""
    
    error_code = "ERR_APPLICATION_NUMBER"
    default_message = "Unable to allocate an application number."


class EntryReplaceException(WelfareException):
    """
    Raised when the insert phase of a replace fails.
    
    The delete phase is rolled back with it, so the previously stored rows
    for the application number are kept.
    """
    
    error_code = "ERR_ENTRY_REPLACE_FAILED"
    default_message = (
        "The new entries could not be saved. The previously saved record was kept "
        "unchanged; please try saving again."
    )


# Store Exceptions
class StoreUnavailableException(WelfareException):
    """Raised when the database cannot be reached or a query times out."""
    
    error_code = "ERR_STORE_UNAVAILABLE"
    default_message = "The database is currently unavailable. Please try again."


# Fund Request Exceptions
class FundRequestNotFoundException(WelfareException):
    """Raised when a fund request id does not resolve to a record."""
    
    error_code = "ERR_FUND_REQUEST_NOT_FOUND"
    default_message = "The requested fund request does not exist."


# Permission Exceptions
class UnauthorizedRoleException(WelfareException):
    """Raised when a user lacks the required permission for an action."""
    
    error_code = "ERR_UNAUTHORIZED_ROLE"
    default_message = "You do not have the required role to perform this action."
