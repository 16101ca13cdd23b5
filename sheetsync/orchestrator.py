"""Init, append and reset workflows for the remote sheet.

Each workflow fetches (except init), reconciles in memory and uploads the
whole document once. Steps run strictly one after another. Failures end
the workflow with a terminal SyncStatus instead of raising.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .config import Config
from .credentials import CredentialProvider
from .errors import ConfigurationError, TransportError
from .propagation import PropagationOutcome, Propagator
from .sheet.models import Row, Sheet
from .sheet.reconcile import merge
from .sheet.samples import build_sample_rows
from .sheet.schema import (
    DEFAULT_SCHEMA,
    detect_schema_drift,
    resolve_column_widths,
    resolve_columns,
)
from .transport import SheetTransport

logger = logging.getLogger(__name__)


class SyncStatus(Enum):
    """Terminal status of a workflow."""

    COMPLETED = "completed"
    ABORTED_MISSING_CREDENTIAL = "aborted-missing-credential"
    ABORTED_TRANSPORT_ERROR = "aborted-transport-error"
    NO_OP_ABSENT_DOCUMENT = "no-op-absent-document"


@dataclass
class SyncResult:
    """Result of a workflow run."""

    status: SyncStatus
    operation: str
    rows_before: int = 0
    rows_added: int = 0
    total_rows: int = 0
    columns: list[str] = field(default_factory=list)
    error: str | None = None
    propagation: list[PropagationOutcome] = field(default_factory=list)
    timestamp: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status in (SyncStatus.COMPLETED, SyncStatus.NO_OP_ABSENT_DOCUMENT)


class SheetSynchronizer:
    """Keeps one remote sheet document in step with local operations.

    Uploads replace the remote document wholesale. Two runs racing on the
    same path overwrite each other; the later upload wins.
    """

    def __init__(
        self,
        config: Config,
        credentials: CredentialProvider,
        transport: SheetTransport,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the synchronizer.

        Args:
            config: Loaded configuration.
            credentials: Token provider owned by the caller.
            transport: Transport used for every remote call.
            sleep: Coroutine used for the post-reset settle delay.
        """
        self.config = config
        self.credentials = credentials
        self.transport = transport
        self.propagator = Propagator(transport, config.remote)
        self.strategy = config.sheet.strategy
        self._sleep = sleep

    @property
    def path(self) -> str:
        return self.config.remote.document_path

    def _da_token(self) -> str:
        return self.credentials.require(self.config.credentials.da_token_key)

    def _admin_token(self) -> str:
        return self.credentials.require(self.config.credentials.admin_token_key)

    def _aborted(self, operation: str, error: Exception, **counts) -> SyncResult:
        if isinstance(error, ConfigurationError):
            status = SyncStatus.ABORTED_MISSING_CREDENTIAL
        else:
            status = SyncStatus.ABORTED_TRANSPORT_ERROR
        logger.error(f"{operation} aborted: {error}")
        return SyncResult(
            status=status,
            operation=operation,
            error=str(error),
            timestamp=datetime.now(),
            **counts,
        )

    async def init(self, sample_rows: list[Row] | None = None) -> SyncResult:
        """Overwrite the sheet with a fixed set of rows, without fetching.

        Args:
            sample_rows: Rows to write. Defaults to the built-in samples.

        Returns:
            SyncResult with status COMPLETED or an abort status.
        """
        try:
            token = self._da_token()
        except ConfigurationError as e:
            return self._aborted("init", e)

        if sample_rows is None:
            sample_rows = build_sample_rows(
                self.config.remote.preview_root, self.config.remote.publish_root
            )

        columns = resolve_columns(sample_rows, None, DEFAULT_SCHEMA)
        rows = self.strategy.initial_rows(columns, sample_rows)
        widths = resolve_column_widths(columns, None, self.config.sheet.default_width)
        sheet = Sheet.build(rows, columns, widths, sheet_name=self.config.sheet.name)

        logger.info(f"Initializing {self.path} with {len(sample_rows)} rows")
        try:
            await self.transport.upload_sheet(self.path, sheet, token)
        except TransportError as e:
            return self._aborted("init", e, rows_added=len(sample_rows))

        return SyncResult(
            status=SyncStatus.COMPLETED,
            operation="init",
            rows_added=len(sample_rows),
            total_rows=len(rows),
            columns=columns,
            timestamp=datetime.now(),
        )

    async def append(self, new_rows: list[Row]) -> SyncResult:
        """Append rows to the remote sheet.

        A missing document is treated as an empty sheet. Running this twice
        with the same rows appends them twice.

        Args:
            new_rows: Rows to add after the existing data.

        Returns:
            SyncResult with status COMPLETED or an abort status.
        """
        try:
            token = self._da_token()
            current = await self.transport.fetch_sheet(self.path, token)
        except (ConfigurationError, TransportError) as e:
            return self._aborted("append", e)

        if current is None:
            logger.info(f"{self.path} does not exist yet, starting from an empty sheet")
            current = Sheet()

        header, data_rows = self.strategy.split(current.data)
        existing = self.strategy.assemble(header, data_rows)
        columns = resolve_columns(existing, current.metadata, DEFAULT_SCHEMA)
        detect_schema_drift(columns, current.metadata)

        for row in new_rows:
            if set(row) != set(columns):
                logger.warning(
                    f"Appended row keys differ from sheet columns: {sorted(set(row) ^ set(columns))}"
                )

        merged = self.strategy.assemble(header, merge(data_rows, new_rows))
        widths = resolve_column_widths(
            columns, current.metadata.column_widths, self.config.sheet.default_width
        )
        sheet = Sheet.build(merged, columns, widths, sheet_name=current.metadata.sheet_name)

        logger.info(
            f"Appending {len(new_rows)} rows to {self.path} "
            f"({len(data_rows)} existing data rows)"
        )
        try:
            await self.transport.upload_sheet(self.path, sheet, token)
        except TransportError as e:
            return self._aborted("append", e, rows_before=len(data_rows))

        return SyncResult(
            status=SyncStatus.COMPLETED,
            operation="append",
            rows_before=len(data_rows),
            rows_added=len(new_rows),
            total_rows=len(merged),
            columns=columns,
            timestamp=datetime.now(),
        )

    async def reset(self) -> SyncResult:
        """Clear all data rows while keeping the column layout visible.

        A sheet with data is replaced by a single blank template row, then
        the cache-bust, preview and publish triggers are fired. An absent
        document is left untouched. A document holding only blank rows is
        rewritten with zero rows and its columns kept, without propagation.

        Returns:
            SyncResult with status COMPLETED, NO_OP_ABSENT_DOCUMENT or an
            abort status.
        """
        try:
            da_token = self._da_token()
            admin_token = self._admin_token()
            current = await self.transport.fetch_sheet(self.path, da_token)
        except (ConfigurationError, TransportError) as e:
            return self._aborted("reset", e)

        if current is None:
            logger.info(f"{self.path} does not exist, nothing to reset")
            return SyncResult(
                status=SyncStatus.NO_OP_ABSENT_DOCUMENT,
                operation="reset",
                timestamp=datetime.now(),
            )

        header, data_rows = self.strategy.split(current.data)
        columns = resolve_columns(
            self.strategy.assemble(header, data_rows), current.metadata, DEFAULT_SCHEMA
        )
        had_data = bool(data_rows)
        rows = self.strategy.reset_rows(columns, had_data, header)
        widths = resolve_column_widths(
            columns, current.metadata.column_widths, self.config.sheet.default_width
        )
        sheet = Sheet.build(rows, columns, widths, sheet_name=current.metadata.sheet_name)

        if not had_data:
            if current.data:
                # Leftover blank rows are cleared down to zero rows
                logger.info(f"{self.path} has no data rows, clearing {len(current.data)} blank rows")
                try:
                    await self.transport.upload_sheet(self.path, sheet, da_token)
                except TransportError as e:
                    return self._aborted("reset", e)
            else:
                logger.info(f"{self.path} has no data rows, nothing to reset")
            return SyncResult(
                status=SyncStatus.NO_OP_ABSENT_DOCUMENT,
                operation="reset",
                total_rows=len(rows),
                columns=columns,
                timestamp=datetime.now(),
            )

        logger.info(f"Resetting {self.path}: removing {len(data_rows)} data rows")
        try:
            await self.transport.upload_sheet(self.path, sheet, da_token)
        except TransportError as e:
            return self._aborted("reset", e, rows_before=len(data_rows))

        settle = self.config.reset.settle_seconds
        if settle > 0:
            logger.debug(f"Waiting {settle}s before propagation")
            await self._sleep(settle)

        outcomes = await self.propagator.run_all(da_token, admin_token)

        return SyncResult(
            status=SyncStatus.COMPLETED,
            operation="reset",
            rows_before=len(data_rows),
            total_rows=len(rows),
            columns=columns,
            propagation=outcomes,
            timestamp=datetime.now(),
        )

    async def refresh(self) -> SyncResult:
        """Fire the propagation triggers without touching the sheet."""
        try:
            admin_token = self._admin_token()
        except ConfigurationError as e:
            return self._aborted("refresh", e)

        da_token = self.credentials.get_token(self.config.credentials.da_token_key)
        outcomes = await self.propagator.run_all(da_token, admin_token)

        return SyncResult(
            status=SyncStatus.COMPLETED,
            operation="refresh",
            propagation=outcomes,
            timestamp=datetime.now(),
        )
