# tenant_admin/core/errors.py
from typing import Any, Dict, List, Optional


class HubError(Exception):
    """Error response (or transport failure) from the remote JSON-API service."""

    def __init__(self, status_code: int, message: str = "", errors: Optional[List[Dict[str, Any]]] = None):
        self.status_code = status_code
        self.errors = errors or []
        self.message = message or _first_error_title(self.errors) or f"Hub request failed with status {status_code}"
        super().__init__(self.message)


class RecordNotFound(HubError):
    pass


class RecordInvalid(HubError):
    """The hub rejected a create/update with validation errors (HTTP 422)."""


class NotAuthorized(Exception):
    def __init__(self, action: str, subject: str = ""):
        self.action = action
        self.subject = subject
        super().__init__(f"Not authorized to {action} {subject}".strip())


class CSVImportError(Exception):
    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        super().__init__(f"{len(errors)} error(s) in batch import file")


def _first_error_title(errors: List[Dict[str, Any]]) -> str:
    for error in errors:
        title = error.get("detail") or error.get("title")
        if title:
            return str(title)
    return ""
