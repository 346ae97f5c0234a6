"""FastAPI dependency injection for the relay services."""

from typing import Optional

from ..config import Config
from ..relay import DebouncedOrderedQueue, SequenceTracker
from ..webhook import AdmissionGate

# Global instances (set during app startup)
_config_instance: Optional[Config] = None
_gate_instance: Optional[AdmissionGate] = None
_tracker_instance: Optional[SequenceTracker] = None


def set_config_instance(config: Config) -> None:
    """
    Set the global Config instance.

    This is called during application startup to make the Config
    instance available to all API routes.

    Args:
        config: The Config instance
    """
    global _config_instance
    _config_instance = config


def set_gate_instance(gate: AdmissionGate) -> None:
    """
    Set the global AdmissionGate instance.

    Args:
        gate: The AdmissionGate instance
    """
    global _gate_instance
    _gate_instance = gate


def set_tracker_instance(tracker: SequenceTracker) -> None:
    """Set the global SequenceTracker instance."""
    global _tracker_instance
    _tracker_instance = tracker


def get_config() -> Config:
    """
    Dependency to get the Config instance.

    Raises:
        RuntimeError: If Config instance has not been set
    """
    if _config_instance is None:
        raise RuntimeError("Config instance not initialized")
    return _config_instance


def get_gate() -> AdmissionGate:
    """
    Dependency to get the AdmissionGate instance.

    Returns:
        AdmissionGate instance

    Raises:
        RuntimeError: If AdmissionGate instance has not been set

    Example:
        ```python
        @router.post("/{token}")
        async def receive_update(gate: AdmissionGate = Depends(get_gate)):
            gate.submit(payload)
        ```
    """
    if _gate_instance is None:
        raise RuntimeError("AdmissionGate instance not initialized")
    return _gate_instance


def get_queue() -> DebouncedOrderedQueue:
    """Dependency to get the relay queue behind the gate."""
    return get_gate().queue


def get_tracker() -> SequenceTracker:
    """
    Dependency to get the SequenceTracker instance.

    Raises:
        RuntimeError: If SequenceTracker instance has not been set
    """
    if _tracker_instance is None:
        raise RuntimeError("SequenceTracker instance not initialized")
    return _tracker_instance
