"""
Domain exceptions raised by OTTO services.

Routers translate these into HTTP responses; the orchestrator absorbs
ExternalServiceError so that a failing upstream never aborts a run.
"""
from typing import Optional


class OttoError(Exception):
    """Base class for all OTTO errors"""


class RunInProgressError(OttoError):
    """A request was submitted while another run is still processing"""

    def __init__(self, message: str = "A request is already being processed"):
        super().__init__(message)


class InvalidStepTransition(OttoError):
    """A reasoning step was moved backwards or skipped the active state"""

    def __init__(self, step_id: str, current: str, requested: str):
        self.step_id = step_id
        self.current = current
        self.requested = requested
        super().__init__(f"Step {step_id} cannot move from {current} to {requested}")


class CatalogInconsistencyError(OttoError):
    """A solution template references a product id missing from the catalog"""


class ImageTooLargeError(OttoError):
    """Encoded image payload exceeds the accepted size"""

    def __init__(self, size_kb: int, limit_kb: int):
        self.size_kb = size_kb
        self.limit_kb = limit_kb
        super().__init__(f"Image too large: {size_kb}KB (max {limit_kb}KB)")


class ExternalServiceError(OttoError):
    """An external HTTP collaborator failed or answered with a non-ok status"""

    def __init__(self, service: str, message: str, status_code: Optional[int] = None):
        self.service = service
        self.status_code = status_code
        self.message = message
        status = f" ({status_code})" if status_code is not None else ""
        super().__init__(f"{service} failed{status}: {message}")


class PreviewUnavailableError(OttoError):
    """A cart preview needs an uploaded room photo and at least one cart item"""
