"""
Expiry Sweeper

Drives the registry's step clock. Each tick advances one step and purges
every ownership request whose verification window ends there.

CONFIGURATION:
- URAUTH_STEP_INTERVAL_SECONDS: Seconds per step (default: 6)
- URAUTH_SWEEPER_ENABLED: Run the background thread (default: false)

USAGE:
    sweeper = ExpirySweeper(registry)
    sweeper.start()

    # Or drive it by hand (tests, single-shot tools)
    expired = sweeper.tick()

    sweeper.stop()
"""

import os
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..observability import get_logger

if TYPE_CHECKING:
    from .registry import URAuthRegistry

logger = get_logger(__name__)


@dataclass
class SweeperConfig:
    """Configuration for the expiry sweeper."""
    step_interval_seconds: float = 6.0
    enabled: bool = False

    @classmethod
    def from_env(cls) -> "SweeperConfig":
        return cls(
            step_interval_seconds=float(os.environ.get("URAUTH_STEP_INTERVAL_SECONDS", "6")),
            enabled=os.environ.get("URAUTH_SWEEPER_ENABLED", "").lower() in ("1", "true", "yes"),
        )


class ExpirySweeper:
    """Background step clock for a URAuthRegistry."""

    def __init__(
        self,
        registry: "URAuthRegistry",
        config: Optional[SweeperConfig] = None,
    ):
        self._registry = registry
        self._config = config or SweeperConfig.from_env()

        self._running = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

    @property
    def config(self) -> SweeperConfig:
        return self._config

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start the background thread, if enabled."""
        if not self._config.enabled:
            logger.info("Expiry sweeper disabled (set URAUTH_SWEEPER_ENABLED=1 to enable)")
            return

        if self._running:
            logger.warning("Expiry sweeper already running")
            return

        self._running = True
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, name="urauth-sweeper", daemon=True)
        self._thread.start()
        logger.info(
            "Expiry sweeper started",
            interval_seconds=self._config.step_interval_seconds,
        )

    def stop(self, timeout: float = 5.0) -> None:
        if not self._running:
            return

        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)

        self._running = False
        logger.info("Expiry sweeper stopped")

    def _run_loop(self) -> None:
        while not self._stop_event.wait(timeout=self._config.step_interval_seconds):
            try:
                self.tick()
            except Exception:
                logger.exception("Expiry sweep failed", step=self._registry.current_step())

    def tick(self) -> list[str]:
        """
        Advance exactly one step.

        Returns:
            URIs whose pending requests expired on the new step
        """
        step = self._registry.current_step() + 1
        expired = self._registry.advance_to(step)
        if expired:
            logger.info(f"Expired {len(expired)} request(s)", step=step, uris=expired)
        return expired

    def get_status(self) -> dict:
        return {
            "enabled": self._config.enabled,
            "running": self._running,
            "current_step": self._registry.current_step(),
            "step_interval_seconds": self._config.step_interval_seconds,
        }
