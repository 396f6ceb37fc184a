import redis

from grocery.domain.errors import TransientStorageError
from grocery.utils.logging import get_logger
from grocery.utils.retry import redis_retry
from grocery.utils.settings import REDIS_URL

logger = get_logger(__name__)


class SessionStore:
    """
    Revocation list for issued tokens.

    A revoked token id is kept until the token would have expired anyway, the
    key TTL does the cleanup.
    """

    PREFIX = "session:revoked:"

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)

    @redis_retry()
    def _revoke(self, token_id: str, ttl: int) -> bool:
        # SET NX EX, repeat logout is a no-op
        return bool(self.redis.set(name=self.PREFIX + token_id, value="1", nx=True, ex=max(ttl, 1)))

    @redis_retry()
    def _is_revoked(self, token_id: str) -> bool:
        return bool(self.redis.exists(self.PREFIX + token_id))

    def revoke(self, token_id: str, ttl: int) -> bool:
        try:
            revoked = self._revoke(token_id, ttl)
        except redis.RedisError as exc:
            raise TransientStorageError(f"Session store unavailable: {exc}") from exc
        logger.info(f"Revoked session {token_id} (ttl {ttl}s)")
        return revoked

    def is_revoked(self, token_id: str) -> bool:
        try:
            return self._is_revoked(token_id)
        except redis.RedisError as exc:
            raise TransientStorageError(f"Session store unavailable: {exc}") from exc
