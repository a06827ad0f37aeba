"""Client for the Lemmy v3 HTTP API."""

import httpx
import structlog

from wetterstat.publishing.retry import PublishError, check_response

log = structlog.get_logger()


class LemmyClient:
    """Logs in, resolves a community and creates posts on a Lemmy instance."""

    def __init__(
        self,
        server: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=server.rstrip("/"), timeout=timeout, transport=transport
        )

    def login(self, username: str, password: str) -> str:
        """Return a JWT for the account."""
        response = self._client.post(
            "/api/v3/user/login",
            json={"username_or_email": username, "password": password},
        )
        check_response(response, "Lemmy-Login")

        try:
            jwt = response.json().get("jwt")
        except (ValueError, AttributeError) as e:
            raise PublishError(f"Lemmy-Login JSON-Fehler: {e} - Antwort: {response.text}") from e
        if not jwt:
            raise PublishError(f"Lemmy-Login ohne Token - Antwort: {response.text}", retriable=False)
        return str(jwt)

    def community_id(self, jwt: str, name: str) -> int:
        response = self._client.get(
            "/api/v3/community",
            params={"name": name},
            headers={"Authorization": f"Bearer {jwt}"},
        )
        check_response(response, "Community-GET")

        try:
            return int(response.json()["community_view"]["community"]["id"])
        except (ValueError, KeyError, TypeError) as e:
            raise PublishError(f"Community-GET unerwartete Antwort: {response.text}") from e

    def create_post(self, jwt: str, community_id: int, title: str, body: str) -> None:
        response = self._client.post(
            "/api/v3/post",
            json={"name": title, "body": body, "community_id": community_id},
            headers={"Authorization": f"Bearer {jwt}"},
        )
        check_response(response, "Post-Erstellung")
        log.info("lemmy_post_created", title=title)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "LemmyClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
