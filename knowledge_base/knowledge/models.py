import base64
import binascii
from dataclasses import dataclass

from knowledge_base.knowledge.exceptions import PayloadDecodeError


@dataclass(frozen=True)
class PdfUpload:
    """One transport-encoded document handed to the upload operation.

    encoded_data is either a data URI (``data:application/pdf;base64,...``)
    or a bare base64 string.
    """

    encoded_data: str
    file_name: str

    def decode(self) -> bytes:
        """Return the raw document bytes.

        Raises:
            PayloadDecodeError: if the payload is not valid base64.
        """
        payload = self.encoded_data
        if payload.startswith("data:"):
            _, _, payload = payload.partition(",")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise PayloadDecodeError(
                f"Invalid base64 payload for '{self.file_name}': {exc}"
            ) from exc


@dataclass(frozen=True)
class OperationResult:
    """Uniform outcome returned by every public operation."""

    success: bool
    message: str
    count: int = 0

    @classmethod
    def ok(cls, message: str, count: int = 0) -> "OperationResult":
        return cls(success=True, message=message, count=count)

    @classmethod
    def fail(cls, message: str) -> "OperationResult":
        return cls(success=False, message=message)
