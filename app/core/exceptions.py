"""Domain errors raised by the booking services.

Each error carries the HTTP status it is rendered with; the mapping lives
here so services never import FastAPI.
"""


class ClinicError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ClinicError):
    status_code = 400
    default_message = "Invalid input."


class InvalidTransition(ClinicError):
    status_code = 400
    default_message = "This status change is not allowed."


class DailyLimitExceeded(ClinicError):
    status_code = 400

    def __init__(self, limit: int = 5):
        self.limit = limit
        super().__init__(f"You have reached the maximum limit of {limit} appointments per day.")


class SlotUnavailable(ClinicError):
    status_code = 400
    default_message = "This time slot is already booked. Please select another time."


class Forbidden(ClinicError):
    status_code = 403
    default_message = "Access denied."


class NotFound(ClinicError):
    status_code = 404
    default_message = "Not found."


class StorageError(ClinicError):
    status_code = 500
    default_message = "Database error."
