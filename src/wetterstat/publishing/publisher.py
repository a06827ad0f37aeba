"""Deliver a composed Report to every configured platform."""

import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import httpx
import structlog

from wetterstat.config import Config
from wetterstat.models import Report
from wetterstat.publishing.lemmy import LemmyClient
from wetterstat.publishing.mastodon import MastodonClient
from wetterstat.publishing.retry import PublishError, publish_with_retry

log = structlog.get_logger()

# Lifetime assumed for a freshly issued Lemmy JWT
LEMMY_TOKEN_LIFETIME = timedelta(hours=24)


class Publisher:
    """Posts one Report to Lemmy and/or Mastodon.

    The platforms are independent: a failure on one does not stop the other.
    Retries resend the same Report and never recompute it.
    """

    def __init__(
        self,
        config: Config,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._config = config
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    def publish(self, report: Report) -> dict[str, bool]:
        """Publish to all enabled platforms, returning success per platform."""
        results: dict[str, bool] = {}

        if self._config.lemmy_enabled:
            results["lemmy"] = self._retry(lambda: self._post_lemmy(report), "lemmy")
        else:
            log.info("lemmy_skipped", reason="password not configured")

        if self._config.mastodon_enabled:
            results["mastodon"] = self._retry(lambda: self._post_mastodon(report), "mastodon")
        else:
            log.info("mastodon_skipped", reason="server or token not configured")

        return results

    def _retry(self, action: Callable[[], bool], label: str) -> bool:
        result = publish_with_retry(
            action,
            label=label,
            interval=self._config.retry_interval_minutes * 60,
            max_attempts=self._config.max_retries,
            sleep=self._sleep,
        )
        if result:
            log.info("published", target=label)
        return bool(result)

    def _cached_lemmy_token(self) -> str | None:
        cfg = self._config
        if not cfg.lemmy_token or cfg.lemmy_token_exp is None:
            return None
        expires = cfg.lemmy_token_exp
        if expires.tzinfo is None:
            expires = expires.replace(tzinfo=timezone.utc)
        return cfg.lemmy_token if expires > self._clock() else None

    def _post_lemmy(self, report: Report) -> bool:
        cfg = self._config
        with LemmyClient(cfg.lemmy_server, transport=self._transport) as client:
            jwt = self._cached_lemmy_token()
            cached = jwt is not None
            if jwt is None:
                jwt = client.login(cfg.lemmy_username, cfg.lemmy_password)
                cfg.lemmy_token = jwt
                cfg.lemmy_token_exp = self._clock() + LEMMY_TOKEN_LIFETIME

            try:
                community_id = client.community_id(jwt, cfg.lemmy_community)
                client.create_post(jwt, community_id, report.title, report.body)
            except PublishError as e:
                if not cached:
                    raise
                # Next attempt logs in again
                cfg.lemmy_token = ""
                cfg.lemmy_token_exp = None
                raise PublishError(f"{e} (cached token discarded)", retriable=True) from e
        return True

    def _post_mastodon(self, report: Report) -> bool:
        cfg = self._config
        with MastodonClient(
            cfg.mastodon_server, cfg.mastodon_token, transport=self._transport
        ) as client:
            client.post_status(report.as_status(), cfg.mastodon_visibility)
        return True
