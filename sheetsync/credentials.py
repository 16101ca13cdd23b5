"""Bearer token loading from a local ``KEY=value`` file.

Tokens are cached on the provider instance, which the caller owns and
passes to the synchronizer. ``invalidate()`` drops cached values so the
next lookup re-reads the file.
"""

import io
import logging
from pathlib import Path

from dotenv import dotenv_values

from .config import CredentialsConfig
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

GUIDANCE = {
    "DA_IMS_TOKEN": (
        "log in to da.live, run copy(adobeIMS.getAccessToken().token) in the "
        "browser console and set DA_IMS_TOKEN in the credentials file"
    ),
    "ADMIN_AUTH_TOKEN": (
        "log in to admin.hlx.page, copy your auth token and set "
        "ADMIN_AUTH_TOKEN in the credentials file"
    ),
}


def parse_credentials(text: str) -> dict[str, str]:
    """Parse ``KEY=value`` lines with python-dotenv.

    Comments and blank lines are skipped, surrounding quotes removed and
    keys without a value dropped.
    """
    values = dotenv_values(stream=io.StringIO(text), interpolate=False)
    return {key: value for key, value in values.items() if value is not None}


class CredentialProvider:
    """Resolves tokens from a credentials file, once per instance."""

    def __init__(
        self,
        path: str | Path,
        placeholders: dict[str, str] | None = None,
    ):
        """Initialize the provider.

        Args:
            path: Path to the ``KEY=value`` credentials file.
            placeholders: Per-key placeholder values treated as unset.
        """
        self.path = Path(path).expanduser()
        self.placeholders = placeholders or {}
        self._values: dict[str, str] | None = None
        self._tokens: dict[str, str] = {}

    @classmethod
    def from_config(cls, config: CredentialsConfig) -> "CredentialProvider":
        return cls(config.path, config.placeholders)

    def _load(self) -> dict[str, str]:
        if self._values is None:
            try:
                self._values = parse_credentials(self.path.read_text(encoding="utf-8"))
            except OSError as e:
                logger.warning(f"Could not read credentials file {self.path}: {e}")
                self._values = {}
        return self._values

    def get_token(self, key: str) -> str | None:
        """Get a token, or None if it is missing or a placeholder.

        Args:
            key: Field name in the credentials file, e.g. "DA_IMS_TOKEN".

        Returns:
            The token string, or None.
        """
        if key in self._tokens:
            return self._tokens[key]

        value = self._load().get(key)
        if not value:
            logger.warning(f"{key} not found in {self.path}")
            return None
        if value == self.placeholders.get(key):
            logger.warning(f"{key} in {self.path} is still the placeholder value")
            return None

        self._tokens[key] = value
        logger.debug(f"{key} loaded from {self.path}")
        return value

    def require(self, key: str) -> str:
        """Get a token or raise ConfigurationError with setup guidance."""
        token = self.get_token(key)
        if token is None:
            guidance = GUIDANCE.get(key, f"set {key} in {self.path}")
            raise ConfigurationError(key, guidance)
        return token

    def invalidate(self, key: str | None = None) -> None:
        """Drop cached tokens so they are re-read on next use.

        Args:
            key: Token to drop. If None, clears every token and the file cache.
        """
        if key is None:
            self._tokens.clear()
            self._values = None
        else:
            self._tokens.pop(key, None)
            self._values = None
