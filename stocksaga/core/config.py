"""
SagaConfig - Unified configuration for the reservation saga.

Wires together:
- Inventory and order stores (injected, never hard-coded)
- Per-call timeouts for check, reserve and record operations
- Reservation policy (conditional decrement, duplicate-line merging)
- Observability (metrics, logging)

Example:
    >>> from stocksaga import SagaConfig, configure
    >>> from stocksaga.storage import create_stores
    >>>
    >>> inventory, orders = create_stores("redis://localhost:6379/0")
    >>> config = SagaConfig(
    ...     inventory_store=inventory,
    ...     order_store=orders,
    ...     reserve_timeout=2.0,
    ... )
    >>> configure(config)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from stocksaga.monitoring.metrics import SagaMetrics
    from stocksaga.monitoring.prometheus import PrometheusMetrics
    from stocksaga.storage.base import InventoryStore, OrderStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass
class SagaConfig:
    """
    Configuration for ``ReservationSaga``.

    Attributes:
        inventory_store: Stock store (defaults to in-memory)
        order_store: Order store (defaults to in-memory)
        check_timeout: Seconds allowed for one availability check
        reserve_timeout: Seconds allowed for one stock decrement
        record_timeout: Seconds allowed for the order write
        conditional_decrement: Default store policy when stores are built here
        merge_duplicate_lines: Merge lines naming the same item before checking
        metrics: Enable metrics collection (True/False, SagaMetrics or PrometheusMetrics)
        logging: Enable structured saga logging
    """

    inventory_store: InventoryStore | None = None
    order_store: OrderStore | None = None

    check_timeout: float = DEFAULT_TIMEOUT
    reserve_timeout: float = DEFAULT_TIMEOUT
    record_timeout: float = DEFAULT_TIMEOUT

    conditional_decrement: bool = False
    merge_duplicate_lines: bool = True

    metrics: bool | SagaMetrics | PrometheusMetrics = True
    logging: bool = True

    _metrics: Any = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate timeouts, default the stores and build the metrics collector."""
        for name in ("check_timeout", "reserve_timeout", "record_timeout"):
            if getattr(self, name) <= 0:
                msg = f"{name} must be positive, got {getattr(self, name)}"
                raise ValueError(msg)

        if self.inventory_store is None or self.order_store is None:
            from stocksaga.storage.backends.memory import InMemoryInventoryStore, InMemoryOrderStore

            if self.inventory_store is None:
                self.inventory_store = InMemoryInventoryStore(
                    conditional_decrement=self.conditional_decrement
                )
                logger.debug("Using default InMemoryInventoryStore")
            if self.order_store is None:
                self.order_store = InMemoryOrderStore()
                logger.debug("Using default InMemoryOrderStore")

        self._metrics = self._build_metrics()

    def _build_metrics(self) -> Any:
        from stocksaga.monitoring.metrics import SagaMetrics

        if isinstance(self.metrics, bool):
            return SagaMetrics() if self.metrics else None
        return self.metrics

    @property
    def metrics_collector(self) -> Any:
        """Configured metrics collector, or None when metrics are disabled."""
        return self._metrics

    def with_stores(self, inventory_store: InventoryStore, order_store: OrderStore) -> SagaConfig:
        """Create a new config with different stores (immutable update)."""
        return replace(self, inventory_store=inventory_store, order_store=order_store)

    @classmethod
    def from_env(cls, load_dotenv: bool = True) -> SagaConfig:
        """
        Create configuration from environment variables.

        Environment variables:
            STOCKSAGA_STORE_URL: ``memory://`` (default) or ``redis://...``
            STOCKSAGA_CHECK_TIMEOUT, STOCKSAGA_RESERVE_TIMEOUT,
            STOCKSAGA_RECORD_TIMEOUT: Per-call timeouts in seconds
            STOCKSAGA_CONDITIONAL_DECREMENT: Reject decrements below zero (true/false)
            STOCKSAGA_MERGE_DUPLICATES: Merge duplicate item lines (true/false)
            STOCKSAGA_METRICS: Enable metrics (true/false)
            STOCKSAGA_LOGGING: Enable logging (true/false)

        Args:
            load_dotenv: If True, loads .env file before reading variables
        """
        from stocksaga.core.env import get_env
        from stocksaga.storage.factory import create_stores

        env = get_env()
        if load_dotenv:
            env.load()

        conditional = env.get_bool("STOCKSAGA_CONDITIONAL_DECREMENT", False)
        inventory_store, order_store = create_stores(
            env.get("STOCKSAGA_STORE_URL", "memory://") or "memory://",
            conditional_decrement=conditional,
        )

        return cls(
            inventory_store=inventory_store,
            order_store=order_store,
            check_timeout=env.get_float("STOCKSAGA_CHECK_TIMEOUT", DEFAULT_TIMEOUT),
            reserve_timeout=env.get_float("STOCKSAGA_RESERVE_TIMEOUT", DEFAULT_TIMEOUT),
            record_timeout=env.get_float("STOCKSAGA_RECORD_TIMEOUT", DEFAULT_TIMEOUT),
            conditional_decrement=conditional,
            merge_duplicate_lines=env.get_bool("STOCKSAGA_MERGE_DUPLICATES", True),
            metrics=env.get_bool("STOCKSAGA_METRICS", True),
            logging=env.get_bool("STOCKSAGA_LOGGING", True),
        )

    @classmethod
    def from_file(cls, file_path: str | Path, substitute_env: bool = True) -> SagaConfig:
        """
        Load configuration from a YAML or JSON file.

        Supports environment variable substitution using ${VAR} syntax.

        Example:
            # In stocksaga.yaml:
            # store:
            #   url: ${STOCKSAGA_STORE_URL:-memory://}
            #   conditional_decrement: true
            # timeouts:
            #   check: 2.0
            #   reserve: 2.0
            #   record: 5.0
            # reservation:
            #   merge_duplicate_lines: true
            # observability:
            #   metrics: true
            #   logging: true
        """
        import yaml

        from stocksaga.core.env import get_env
        from stocksaga.storage.factory import create_stores

        path = Path(file_path)
        if not path.exists():
            msg = f"Configuration file not found: {file_path}"
            raise FileNotFoundError(msg)

        with path.open() as f:
            data = yaml.safe_load(f)

        if not data:
            return cls()
        if not isinstance(data, dict):
            kind = type(data).__name__
            msg = f"Configuration file {file_path} must contain a mapping, got {kind}"
            raise ValueError(msg)

        if substitute_env:
            env = get_env()
            env.load()
            data = env.substitute_dict(data)

        store_data = _section(data, "store", file_path)
        timeout_data = _section(data, "timeouts", file_path)
        reservation_data = _section(data, "reservation", file_path)
        obs_data = _section(data, "observability", file_path)

        conditional = _as_bool(store_data.get("conditional_decrement", False))
        inventory_store, order_store = create_stores(
            store_data.get("url", "memory://"), conditional_decrement=conditional
        )

        return cls(
            inventory_store=inventory_store,
            order_store=order_store,
            check_timeout=float(timeout_data.get("check", DEFAULT_TIMEOUT)),
            reserve_timeout=float(timeout_data.get("reserve", DEFAULT_TIMEOUT)),
            record_timeout=float(timeout_data.get("record", DEFAULT_TIMEOUT)),
            conditional_decrement=conditional,
            merge_duplicate_lines=_as_bool(reservation_data.get("merge_duplicate_lines", True)),
            metrics=_as_bool(obs_data.get("metrics", True)),
            logging=_as_bool(obs_data.get("logging", True)),
        )


def _as_bool(value: Any) -> bool:
    # Values substituted from the environment arrive as strings
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _section(data: dict[str, Any], name: str, file_path: str | Path) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        msg = f"Section '{name}' in {file_path} must be a mapping, got {type(section).__name__}"
        raise ValueError(msg)
    return section


# Global configuration singleton
_global_config: SagaConfig | None = None


def get_config() -> SagaConfig:
    """Get the global saga configuration."""
    global _global_config
    if _global_config is None:
        _global_config = SagaConfig()
    return _global_config


def configure(config: SagaConfig) -> None:
    """Set the global saga configuration."""
    global _global_config
    _global_config = config
    logger.info(f"Saga configured: inventory_store={type(config.inventory_store).__name__}")
