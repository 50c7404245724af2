"""
Domain errors shared by the store, the service and the upload handler.

They subclass the builtin exceptions the routes already translate:
anything that is a `ValueError` becomes a 400, `NotFoundError` a 404.
"""


class ValidationError(ValueError):
    """Malformed or inconsistent event data (e.g. startTime >= endTime)."""


class NotFoundError(LookupError):
    """No event exists with the requested id."""

    def __init__(self, event_id):
        super().__init__(f'Event with ID "{event_id}" not found')
        self.event_id = event_id


class UploadError(ValueError):
    """Base class for rejected uploads."""


class UnsupportedMediaType(UploadError):
    pass


class PayloadTooLarge(UploadError):
    pass
