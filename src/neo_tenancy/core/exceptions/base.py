"""Base exceptions for neo-tenancy.

This module defines the base exception hierarchy for the neo-tenancy library.
All exceptions inherit from NeoTenancyError and include error codes and details
so that callers can log or audit failures without parsing messages.
"""

from typing import Any, Dict, Optional


class NeoTenancyError(Exception):
    """Base exception for all neo-tenancy errors.
    
    All exceptions in the neo-tenancy library inherit from this base class
    and include structured error information for better debugging and auditing.
    """
    
    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
    
    def to_dict(self) -> Dict[str, Any]:
        """Structured representation used by error responses and audit logs."""
        return {
            "code": self.error_code,
            "message": self.message,
            "details": self.details,
            "type": self.__class__.__name__,
        }


def create_error_response(exception: NeoTenancyError) -> Dict[str, Any]:
    """Create standardized error response from exception.
    
    Args:
        exception: The neo-tenancy exception
        
    Returns:
        Error response dictionary
    """
    return {"error": exception.to_dict()}
