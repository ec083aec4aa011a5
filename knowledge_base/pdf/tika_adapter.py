import httpx

from knowledge_base.pdf.base import BaseTextExtractor
from knowledge_base.pdf.exceptions import TextExtractionError


class TikaAdapter(BaseTextExtractor):
    """Extracts text by sending the document to an Apache Tika server.

    The remote call is untrusted: network failures, non-2xx responses and
    timeouts all surface as TextExtractionError.
    """

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    def _extract_pages(self, data: bytes, mime_type: str) -> list[str]:
        try:
            response = self._client.put(
                "/tika",
                content=data,
                headers={"Content-Type": mime_type, "Accept": "text/plain"},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TextExtractionError(
                f"Tika returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TextExtractionError(f"Tika network error: {exc}") from exc
        return [response.text]

    def close(self) -> None:
        self._client.close()
