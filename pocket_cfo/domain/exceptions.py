"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class RecordStoreError(DomainException):
    """Record store returned an error, is unavailable, or sent malformed records"""

    pass


class PlannerValidationError(DomainException):
    """Caller asked the planner for something logically impossible"""

    pass


class InvalidFinancingScheduleError(PlannerValidationError):
    """Financing end date is not after its start date"""

    pass


class FacilityAlreadyPaidError(PlannerValidationError):
    """Installment requested against a facility with nothing left to repay"""

    pass


class FacilityNotFoundError(PlannerValidationError):
    """No facility with the requested id belongs to the user"""

    pass
