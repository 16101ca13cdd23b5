"""Configuration loading for sheetsync."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .sheet.reconcile import ReconcileStrategy
from .sheet.schema import DEFAULT_COLUMN_WIDTH


@dataclass
class RemoteConfig:
    """Where the sheet lives and how its preview/publish URLs are derived."""

    source_base: str = "https://admin.da.live/source"
    upload_base: str = "https://admin.da.live/source"
    org: str = "meejain"
    site: str = "devlive-lab1"
    ref: str = "main"
    sheet_path: str = "ai-image-generation-log.json"
    preview_domain: str = "aem.page"
    publish_domain: str = "aem.live"

    @property
    def document_path(self) -> str:
        return f"{self.org}/{self.site}/{self.sheet_path.lstrip('/')}"

    @property
    def source_url(self) -> str:
        return f"{self.source_base.rstrip('/')}/{self.document_path}"

    @property
    def upload_url(self) -> str:
        return f"{self.upload_base.rstrip('/')}/{self.document_path}"

    def site_root(self, domain: str) -> str:
        """Site root on a delivery domain, e.g. https://main--site--org.aem.page."""
        return f"https://{self.ref}--{self.site}--{self.org}.{domain}"

    @property
    def preview_root(self) -> str:
        return self.site_root(self.preview_domain)

    @property
    def publish_root(self) -> str:
        return self.site_root(self.publish_domain)

    @property
    def preview_url(self) -> str:
        return f"{self.preview_root}/{self.sheet_path.lstrip('/')}"

    @property
    def publish_url(self) -> str:
        return f"{self.publish_root}/{self.sheet_path.lstrip('/')}"


@dataclass
class CredentialsConfig:
    path: str = "da-config.txt"
    da_token_key: str = "DA_IMS_TOKEN"
    admin_token_key: str = "ADMIN_AUTH_TOKEN"
    placeholders: dict[str, str] = field(
        default_factory=lambda: {
            "DA_IMS_TOKEN": "your_token_here",
            "ADMIN_AUTH_TOKEN": "your_admin_token_here",
        }
    )


@dataclass
class SheetConfig:
    """Configuration for the sheet document itself."""

    name: str = "data"
    strategy: ReconcileStrategy = ReconcileStrategy.METADATA_ONLY
    default_width: int = DEFAULT_COLUMN_WIDTH


@dataclass
class ResetConfig:
    settle_seconds: float = 3.0  # pause before propagation triggers


@dataclass
class Config:
    remote: RemoteConfig = field(default_factory=RemoteConfig)
    credentials: CredentialsConfig = field(default_factory=CredentialsConfig)
    sheet: SheetConfig = field(default_factory=SheetConfig)
    reset: ResetConfig = field(default_factory=ResetConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with SHEETSYNC_ prefix."""
    return os.environ.get(f"SHEETSYNC_{key}", default)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    # Remote overrides
    if org := _get_env("REMOTE_ORG"):
        config.remote.org = org
    if site := _get_env("REMOTE_SITE"):
        config.remote.site = site
    if ref := _get_env("REMOTE_REF"):
        config.remote.ref = ref
    if sheet_path := _get_env("SHEET_PATH"):
        config.remote.sheet_path = sheet_path
    if source_base := _get_env("SOURCE_BASE"):
        config.remote.source_base = source_base
    if upload_base := _get_env("UPLOAD_BASE"):
        config.remote.upload_base = upload_base

    if credentials_path := _get_env("CREDENTIALS_PATH"):
        config.credentials.path = credentials_path

    if strategy := _get_env("SHEET_STRATEGY"):
        config.sheet.strategy = ReconcileStrategy.from_name(strategy)

    if settle := _get_env("RESET_SETTLE_SECONDS"):
        config.reset.settle_seconds = float(settle)

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded Config object.

    Raises:
        ValueError: If the configured reconcile strategy is unknown.
        yaml.YAMLError: If the file is not valid YAML.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            # Parse remote config
            if "remote" in data:
                remote_data = data["remote"]
                defaults = config.remote
                config.remote = RemoteConfig(
                    source_base=remote_data.get("source_base", defaults.source_base),
                    upload_base=remote_data.get("upload_base", defaults.upload_base),
                    org=remote_data.get("org", defaults.org),
                    site=remote_data.get("site", defaults.site),
                    ref=remote_data.get("ref", defaults.ref),
                    sheet_path=remote_data.get("sheet_path", defaults.sheet_path),
                    preview_domain=remote_data.get(
                        "preview_domain", defaults.preview_domain
                    ),
                    publish_domain=remote_data.get(
                        "publish_domain", defaults.publish_domain
                    ),
                )

            # Parse credentials config
            if "credentials" in data:
                cred_data = data["credentials"]
                defaults = config.credentials
                placeholders = dict(defaults.placeholders)
                placeholders.update(cred_data.get("placeholders", {}))
                config.credentials = CredentialsConfig(
                    path=cred_data.get("path", defaults.path),
                    da_token_key=cred_data.get("da_token_key", defaults.da_token_key),
                    admin_token_key=cred_data.get(
                        "admin_token_key", defaults.admin_token_key
                    ),
                    placeholders=placeholders,
                )

                # Relative credential files sit next to the config file
                cred_path = Path(config.credentials.path).expanduser()
                if not cred_path.is_absolute():
                    config.credentials.path = str(path.parent / cred_path)

            # Parse sheet config
            if "sheet" in data:
                sheet_data = data["sheet"]
                strategy = config.sheet.strategy
                if "strategy" in sheet_data:
                    strategy = ReconcileStrategy.from_name(sheet_data["strategy"])
                config.sheet = SheetConfig(
                    name=sheet_data.get("name", config.sheet.name),
                    strategy=strategy,
                    default_width=sheet_data.get(
                        "default_width", config.sheet.default_width
                    ),
                )

            # Parse reset config
            if "reset" in data:
                config.reset = ResetConfig(
                    settle_seconds=float(
                        data["reset"].get("settle_seconds", config.reset.settle_seconds)
                    ),
                )

    # Apply environment variable overrides
    config = _apply_env_overrides(config)

    return config
