class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class SchedulerError(AppError):
    """Raised when the scheduler encounters a logical error or invalid state."""
    def __init__(self, message: str, details: dict = None, status_code: int = 400):
        super().__init__(message, status_code=status_code, details=details)

class UnsatisfiablePlacementError(SchedulerError):
    """Raised when a lesson cannot be seated before the search budget runs out."""
    def __init__(self, message: str, *, item_id: str, title: str, duration: int, direction: str):
        super().__init__(
            message,
            details={"item_id": item_id, "title": title, "duration": duration, "direction": direction},
            status_code=409,
        )
        self.item_id = item_id
        self.title = title
        self.duration = duration

class SchedulingValidationError(AppError):
    """Raised when class, module or timetable setup prevents scheduling."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str | None = None):
        details = {"id": resource_id} if resource_id is not None else None
        super().__init__(f"{resource_type} not found", status_code=404, details=details)
        self.resource_type = resource_type

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class ResourceInUseError(AppError):
    """Raised when deleting a resource that scheduled work still depends on."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)
