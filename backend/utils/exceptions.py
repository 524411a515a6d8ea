# backend/utils/exceptions.py
"""
Domain errors raised by the service layer.

Services never raise HTTPException; the handlers registered in main.py
translate these into HTTP responses with a stable ``error_code``.
"""


class DomainError(Exception):
    code = "DOMAIN_ERROR"

    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


# Malformed or missing input, non-positive price, empty duck list, bad date window
class InvalidInputError(DomainError):
    code = "INVALID_INPUT"


# Referenced customer/seller/duck/sale/user does not exist
class NotFoundError(DomainError):
    code = "NOT_FOUND"


# Valid request refused by a business rule (sold duck, duplicate CPF, ...)
class BusinessRuleError(DomainError):
    code = "BUSINESS_ERROR"
