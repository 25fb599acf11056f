from __future__ import annotations

from typing import List


class TravelDeskError(Exception):
    """Base class for errors raised by the store and its services."""


class ValidationError(TravelDeskError):
    def __init__(self, entity: str, errors: List[str]):
        self.entity = entity
        self.errors = list(errors)
        super().__init__(f"{entity} validation failed: {', '.join(self.errors)}")


class DuplicateError(TravelDeskError):
    pass


class NotFoundError(TravelDeskError):
    pass


class PersistenceError(TravelDeskError):
    """The key-value backend is unavailable or refused the write."""


class DataImportError(TravelDeskError):
    pass


class PaymentError(TravelDeskError):
    pass
