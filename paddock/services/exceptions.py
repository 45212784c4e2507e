class ServiceError(Exception):
    """Base class for service layer errors."""

    def __init__(self, message="An internal service error occurred.", status_code=500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotAuthenticatedError(ServiceError):
    def __init__(self, message="Not authenticated."):
        super().__init__(message, status_code=401)


class NotAuthorizedError(ServiceError):
    def __init__(self, message="User not authorized for this action."):
        super().__init__(message, status_code=403)


class ConversationNotFoundError(ServiceError):
    def __init__(self, message="Conversation not found."):
        super().__init__(message, status_code=404)


class MessageNotFoundError(ServiceError):
    def __init__(self, message="Message not found."):
        super().__init__(message, status_code=404)


class ReservationNotFoundError(ServiceError):
    def __init__(self, message="Reservation not found."):
        super().__init__(message, status_code=404)


class BlockNotFoundError(ServiceError):
    def __init__(self, message="Block not found."):
        super().__init__(message, status_code=404)


class UserNotFoundError(ServiceError):
    def __init__(self, message="User not found."):
        super().__init__(message, status_code=404)


class VehicleNotFoundError(ServiceError):
    def __init__(self, message="Vehicle not found."):
        super().__init__(message, status_code=404)


class TeamNotFoundError(ServiceError):
    def __init__(self, message="Team not found."):
        super().__init__(message, status_code=404)


class DriverProfileNotFoundError(ServiceError):
    def __init__(self, message="Driver profile not found."):
        super().__init__(message, status_code=404)


class BusinessRuleError(ServiceError):
    """For violations of specific business rules (e.g., edit window elapsed)."""

    def __init__(self, message="Action violates business rules."):
        super().__init__(message, status_code=400)


class ConflictError(ServiceError):
    """For conflicts like a duplicate conversation for the same participants."""

    def __init__(self, message="Operation conflicts with existing state."):
        super().__init__(message, status_code=409)


class DatabaseError(ServiceError):
    """For general database errors during service operations."""

    def __init__(self, message="A database error occurred."):
        super().__init__(message, status_code=500)
