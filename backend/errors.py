"""
Exceptions raised by the canvas uploader.

Exception hierarchy:
    CanvasUploaderError (base)
    ├── RelayError              - anything answered with a status and JSON body
    │   ├── PrintifyError           - Printify answered with a non-2xx status
    │   └── PrintifyTransportError  - no response at all (connect error, timeout)
    ├── ImagePreparationError   - the selected image cannot be used
    │   ├── ImageTooSmallError
    │   └── ImageDecodeError
    ├── DraftValidationError    - product draft is not submittable
    ├── UploadError             - image upload returned no usable id
    └── SessionDiscardedError   - session discarded while a submission was in flight

Catalog lookups that find nothing are not exceptions; see catalog.LookupFailure.
"""

from typing import Any, Dict, List, Optional


class CanvasUploaderError(Exception):
    """Base exception for all canvas uploader errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class RelayError(CanvasUploaderError):
    """An error the relay answers with ``status_code`` and JSON ``body``."""

    def __init__(self, status_code: int, body: Any, message: str = ""):
        self.status_code = status_code
        self.body = body
        if not message and isinstance(body, dict):
            message = str(body.get("message") or "")
        super().__init__(message or f"Request failed ({status_code})", {"status_code": status_code})


class PrintifyError(RelayError):
    """
    Printify returned an error status.

    The upstream status code and body are kept verbatim so the relay can hand
    them back to its caller unchanged.
    """

    def __init__(self, status_code: int, body: Any, operation: str = ""):
        self.operation = operation
        label = f"Printify {operation} failed" if operation else "Printify request failed"
        super().__init__(status_code, body, f"{label} ({status_code})")


class PrintifyTransportError(RelayError):
    """No response was received from Printify."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        self.operation = operation
        super().__init__(500, {"message": "Server error"}, f"Printify {operation} unreachable")
        if cause is not None:
            self.details["cause"] = repr(cause)


class ImagePreparationError(CanvasUploaderError):
    """The selected image cannot be prepared for upload."""


class ImageTooSmallError(ImagePreparationError):
    def __init__(self, width: int, height: int, minimum: int):
        self.width = width
        self.height = height
        self.minimum = minimum
        super().__init__(
            f"Image must be at least {minimum}x{minimum} pixels",
            {"width": width, "height": height},
        )


class ImageDecodeError(ImagePreparationError):
    def __init__(self, filename: str = ""):
        super().__init__("Failed to process the selected image", {"filename": filename} if filename else None)


class DraftValidationError(CanvasUploaderError):
    """A product draft failed validation; ``errors`` holds every message."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid product draft")


class UploadError(CanvasUploaderError):
    """Printify accepted the upload but returned no image id."""


class SessionDiscardedError(CanvasUploaderError):
    """The upload session was discarded while a submission was in flight."""

    def __init__(self, image_id: Optional[str] = None):
        super().__init__("Upload session was discarded", {"image_id": image_id} if image_id else None)
