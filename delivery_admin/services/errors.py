class ServiceError(Exception):
    status_code = 400

    def __init__(self, message):
        super().__init__(message)
        self.message = message

class ValidationError(ServiceError):
    """Bad input or a reference to a record that does not exist."""
    status_code = 400

class ConflictError(ServiceError):
    """A concurrent writer got there first; the caller may retry."""
    status_code = 409

class PermissionDenied(ServiceError):
    status_code = 403
