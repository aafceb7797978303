"""Errors raised by the application store."""

from __future__ import annotations


class StoreError(Exception):
    """The underlying database read or write failed."""


class ApplicationNotFound(StoreError):
    """The referenced application does not exist."""

    def __init__(self, application_id) -> None:
        super().__init__(f"Application {application_id} not found")
        self.application_id = application_id


class ApplicationConflict(StoreError):
    """The application changed status before a conditional update landed."""

    def __init__(self, application_id, expected_status) -> None:
        super().__init__(f"Application {application_id} is no longer {'/'.join(expected_status)}")
        self.application_id = application_id
        self.expected_status = tuple(expected_status)
