import logging
import time
from typing import Callable, Optional

import httpx

from hostprobe.config import Settings
from hostprobe.errors import DispatchError
from hostprobe.models.alert import AlertPayload

logger = logging.getLogger(__name__)

# Upper bound for the whole request, from connect to the last byte read
REQUEST_TIMEOUT_SECONDS = 5.0
# Bytes of an error response kept for diagnostics
MAX_ERROR_BODY = 1024


class AlertDispatcher:
    """
    Deliver an alert message to the notification API.

    A single POST per run, no retries. Any non-2xx status or transport error
    (DNS, refused connection, timeout) raises DispatchError. httpx timeouts
    only bound each network operation, so the dispatcher also tracks a
    deadline for the request as a whole and gives up once it has passed.
    """

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings
        self._client = client
        self._clock = clock

    def build_payload(self, message: str) -> dict:
        payload = AlertPayload(
            chat_id=self.settings.chat_id,
            message=message,
            message_thread_id=self.settings.message_thread_id,
        )
        return payload.model_dump(exclude_none=True)

    def send(self, message: str) -> None:
        headers = {
            "Authorization": f"Bearer {self.settings.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = self.build_payload(message)

        if self._client is not None:
            self._post(self._client, headers, payload)
            return
        with httpx.Client(timeout=REQUEST_TIMEOUT_SECONDS) as client:
            self._post(client, headers, payload)

    def _post(self, client: httpx.Client, headers: dict, payload: dict) -> None:
        url = self.settings.api_url
        deadline = self._clock() + REQUEST_TIMEOUT_SECONDS
        try:
            with client.stream(
                "POST",
                url,
                json=payload,
                headers=headers,
                timeout=httpx.Timeout(REQUEST_TIMEOUT_SECONDS),
            ) as response:
                self._check_deadline(deadline, url)
                if response.is_success:
                    logger.info("Alert delivered to %s (status %d)", url, response.status_code)
                    return
                body = self._read_limited(response, MAX_ERROR_BODY, deadline, url)
        except httpx.HTTPError as exc:
            raise DispatchError(f"request to {url} failed: {exc}") from exc

        raise DispatchError(
            f"api status {response.status_code}: {body}",
            status_code=response.status_code,
            body=body,
        )

    def _check_deadline(self, deadline: float, url: str) -> None:
        if self._clock() > deadline:
            raise DispatchError(
                f"request to {url} failed: exceeded {REQUEST_TIMEOUT_SECONDS:.0f}s time limit"
            )

    def _read_limited(
        self,
        response: httpx.Response,
        limit: int,
        deadline: float,
        url: str,
    ) -> str:
        chunks = bytearray()
        for chunk in response.iter_bytes():
            chunks.extend(chunk)
            if len(chunks) >= limit:
                break
            self._check_deadline(deadline, url)
        return bytes(chunks[:limit]).decode("utf-8", errors="replace").strip()
