class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid, before any store access."""


class NotFoundError(DomainError):
    """Raised when a referenced row does not exist."""


class AlreadyPostedError(DomainError):
    """Raised when attendance for a (class, subject, date) was already posted."""

    def __init__(self, class_id: str, subject_id: str, work_date):
        super().__init__(f"Attendance already posted for class {class_id}, subject {subject_id} on {work_date}")
        self.class_id = class_id
        self.subject_id = subject_id
        self.work_date = work_date


class StoreError(DomainError):
    """Raised when the underlying store read/write failed."""


class DeliveryError(DomainError):
    """Raised by a push channel when a single delivery fails."""

    def __init__(self, user_id: str, message: str = "delivery failed"):
        super().__init__(f"{message} (user {user_id})")
        self.user_id = user_id
