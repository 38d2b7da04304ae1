"""Domain exceptions shared by the dispatch and status workflows."""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for script dispatch domain errors."""


class ValidationError(DispatchError):
    """Raised when caller input is rejected before anything is submitted."""


class MissingParameterError(ValidationError):
    """Raised when a required script parameter was not supplied."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Missing required parameter: {name}")
        self.name = name


class InvalidParameterValueError(ValidationError):
    """Raised when a value cannot be represented in its declared type."""

    def __init__(self, name: str, data_type: str, value: object) -> None:
        super().__init__(f"Parameter {name} expects {data_type}, got {value!r}")
        self.name = name
        self.data_type = data_type


class ScriptNotApprovedError(ValidationError):
    """Raised when dispatching a script that is not in the approved state."""

    def __init__(self, script_name: str, state: str) -> None:
        super().__init__(f"Script {script_name} is not approved (current state: {state})")
        self.script_name = script_name
        self.state = state


class NotFoundError(DispatchError):
    """Raised when a script, endpoint or collection does not exist."""


class IntegrityUnavailableError(DispatchError):
    """Raised when the script content hash cannot be obtained from the backend."""


class TransportError(DispatchError):
    """Raised when a call to the management backend fails."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FormatError(DispatchError):
    """Raised when an encoded document from the backend cannot be decoded."""
