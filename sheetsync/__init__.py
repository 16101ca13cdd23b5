"""sheetsync - keep a remote JSON sheet document in sync."""

__version__ = "0.1.0"

from .config import Config, load_config
from .credentials import CredentialProvider
from .errors import ConfigurationError, SheetSyncError, TransportError
from .orchestrator import SheetSynchronizer, SyncResult, SyncStatus
from .transport import SheetTransport

__all__ = [
    "Config",
    "ConfigurationError",
    "CredentialProvider",
    "SheetSyncError",
    "SheetSynchronizer",
    "SheetTransport",
    "SyncResult",
    "SyncStatus",
    "TransportError",
    "load_config",
]
