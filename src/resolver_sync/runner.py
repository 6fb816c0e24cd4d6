"""One load -> reconcile -> write-back cycle."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from resolver_sync.config import SyncConfig
from resolver_sync.errors import LoadError
from resolver_sync.logging import JsonlEventLogger, SyncEvent, run_identifier, utc_timestamp
from resolver_sync.reconcile import (
    MATCH,
    SKIPPED,
    UNSUPPORTED,
    MethodDecision,
    ReconcileResult,
    Reconciler,
)
from resolver_sync.render import NamingRules
from resolver_sync.source import SourceModel, load_source_model
from resolver_sync.writeback import (
    FAILED,
    Formatter,
    SubprocessFormatter,
    WriteBackCoordinator,
    WriteOutcome,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class SyncReport:
    """Summary of one run."""

    run_id: str
    decisions: tuple[MethodDecision, ...]
    outcomes: tuple[WriteOutcome, ...]
    dry_run: bool

    @property
    def dirty_paths(self) -> tuple[str, ...]:
        return tuple(outcome.path for outcome in self.outcomes)

    @property
    def failed_decisions(self) -> tuple[MethodDecision, ...]:
        return tuple(item for item in self.decisions if item.state in {SKIPPED, UNSUPPORTED})

    @property
    def failed_writes(self) -> tuple[WriteOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if outcome.status == FAILED)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed_decisions or self.failed_writes)

    def to_dict(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "dry_run": self.dry_run,
            "decisions": [asdict(item) for item in self.decisions],
            "outcomes": [asdict(item) for item in self.outcomes],
        }


def naming_rules(config: SyncConfig) -> NamingRules:
    """Build naming rules from configuration."""
    return NamingRules(
        root_contract=config.contract.root,
        root_receiver=config.implementation.root_receiver,
        suffix=config.contract.suffix,
        base_file=config.implementation.base_file,
    )


def build_formatter(config: SyncConfig) -> Formatter | None:
    """Return the configured formatter, or None when formatting is disabled."""
    if not config.formatter.enabled:
        return None
    return SubprocessFormatter(
        command=config.formatter.command,
        timeout_seconds=config.formatter.timeout_seconds,
    )


class SyncRunner:
    """Owns all state of a single synchronizer run."""

    def __init__(
        self,
        config: SyncConfig,
        *,
        dry_run: bool = False,
        formatter: Formatter | None = None,
    ) -> None:
        self._config = config
        self._dry_run = dry_run
        self._formatter = formatter if formatter is not None else build_formatter(config)
        self._run_id = run_identifier()
        self._event_logger = (
            JsonlEventLogger(config.logging.event_log)
            if config.logging.event_log is not None
            else None
        )

    @property
    def run_id(self) -> str:
        return self._run_id

    def load(self) -> tuple[SourceModel, SourceModel]:
        """Load the contract and implementation packages; LoadError aborts the run."""
        try:
            contracts = load_source_model(self._config.contract_dir)
            implementation = load_source_model(self._config.implementation_dir)
        except LoadError as error:
            self._emit("load_failed", ok=False, path=error.path, detail=error.reason)
            raise
        return contracts, implementation

    def reconcile(self, contracts: SourceModel, implementation: SourceModel) -> ReconcileResult:
        reconciler = Reconciler(
            contracts,
            implementation,
            naming_rules(self._config),
            contract_qualifier=self._config.contract.qualifier,
            contract_import_path=self._config.contract.import_path,
        )
        return reconciler.reconcile()

    def run(self) -> SyncReport:
        """Load both packages, reconcile them and write every dirty file."""
        self._emit("run_started", metadata={"config": self._config.to_public_dict()})
        contracts, implementation = self.load()
        try:
            result = self.reconcile(contracts, implementation)
        except LoadError as error:
            self._emit("load_failed", ok=False, path=error.path, detail=error.reason)
            raise
        for decision in result.decisions:
            if decision.state == MATCH:
                continue
            self._emit(
                decision.state,
                ok=decision.state not in {SKIPPED, UNSUPPORTED},
                path=decision.path,
                detail=decision.detail,
                metadata={
                    "contract": decision.contract,
                    "receiver": decision.receiver,
                    "method": decision.method,
                },
            )

        coordinator = WriteBackCoordinator(
            implementation, self._formatter, dry_run=self._dry_run
        )
        outcomes = coordinator.write(result)
        for outcome in outcomes:
            self._emit(
                outcome.status,
                ok=outcome.status != FAILED,
                path=outcome.path,
                detail=outcome.detail,
                metadata={"formatted": outcome.formatted},
            )

        report = SyncReport(
            run_id=self._run_id,
            decisions=tuple(result.decisions),
            outcomes=tuple(outcomes),
            dry_run=self._dry_run,
        )
        self._emit(
            "run_finished",
            ok=not report.has_failures,
            metadata={
                "dirty_files": len(report.dirty_paths),
                "failed_items": len(report.failed_decisions) + len(report.failed_writes),
            },
        )
        return report

    def _emit(
        self,
        event: str,
        *,
        ok: bool = True,
        path: str | None = None,
        detail: str | None = None,
        metadata: dict[str, object] | None = None,
    ) -> None:
        if self._event_logger is None:
            return
        self._event_logger.append(
            SyncEvent(
                timestamp=utc_timestamp(),
                run_id=self._run_id,
                event=event,
                ok=ok,
                path=path,
                detail=detail,
                metadata=metadata or {},
            )
        )
