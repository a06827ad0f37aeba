"""Publishing clients for Lemmy and Mastodon."""

from wetterstat.publishing.lemmy import LemmyClient
from wetterstat.publishing.mastodon import MastodonClient
from wetterstat.publishing.publisher import Publisher
from wetterstat.publishing.retry import PublishError, publish_with_retry

__all__ = ["LemmyClient", "MastodonClient", "Publisher", "PublishError", "publish_with_retry"]
