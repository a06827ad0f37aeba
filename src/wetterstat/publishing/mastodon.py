"""Client for posting statuses to Mastodon."""

import httpx
import structlog

from wetterstat.publishing.retry import check_response

log = structlog.get_logger()


class MastodonClient:
    def __init__(
        self,
        server: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=server.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={"Authorization": f"Bearer {token}"},
        )

    def post_status(self, text: str, visibility: str = "unlisted") -> None:
        response = self._client.post(
            "/api/v1/statuses",
            json={"status": text, "visibility": visibility},
        )
        check_response(response, "Mastodon-Post")
        log.info("mastodon_post_created", visibility=visibility)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "MastodonClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
