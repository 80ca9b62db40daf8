"""
sparsemat Config - Runtime Configuration

Provides property-based configuration for buffer growth and printing.
Settings can be changed globally or overridden for the current thread
inside a ``config.local(...)`` block.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List
import threading


# =============================================================================
# Configuration Classes
# =============================================================================

@dataclass
class ArrayConfig:
    """Configuration for backing buffer allocation."""
    initial_capacity: int = 8      # Slots allocated on first insert
    growth_factor: float = 2.0     # Capacity multiplier when full

    def __post_init__(self):
        if self.initial_capacity < 1:
            raise ValueError(f"initial_capacity must be >= 1, got {self.initial_capacity}")
        if self.growth_factor <= 1.0:
            raise ValueError(f"growth_factor must be > 1, got {self.growth_factor}")


@dataclass
class PrintConfig:
    """Configuration for textual grid output."""
    separator: str = " "
    warn_threshold: int = 10_000   # Cells (rows * cols) before a warning is logged


# =============================================================================
# Global Configuration Manager
# =============================================================================

class SparseConfig:
    """
    Global configuration manager.

    Example:
        # Global configuration
        sparsemat.config.array = ArrayConfig(growth_factor=1.5)

        # Local configuration (context manager)
        with sparsemat.config.local(printing=PrintConfig(separator="\\t")):
            print(matrix)
        # Back to global config
    """

    _SECTIONS = ("array", "printing")

    def __init__(self):
        self._global_array = ArrayConfig()
        self._global_printing = PrintConfig()

        # Thread-local storage for context overrides
        self._local = threading.local()

        self._callbacks: Dict[str, List[Callable]] = {
            "array": [],
            "printing": [],
        }

    # -------------------------------------------------------------------------
    # Property Accessors (with thread-local override support)
    # -------------------------------------------------------------------------

    @property
    def array(self) -> ArrayConfig:
        """Get buffer configuration."""
        if getattr(self._local, "array", None) is not None:
            return self._local.array
        return self._global_array

    @array.setter
    def array(self, value: ArrayConfig):
        self._global_array = value
        self._notify("array", value)

    @property
    def printing(self) -> PrintConfig:
        """Get printing configuration."""
        if getattr(self._local, "printing", None) is not None:
            return self._local.printing
        return self._global_printing

    @printing.setter
    def printing(self, value: PrintConfig):
        self._global_printing = value
        self._notify("printing", value)

    # -------------------------------------------------------------------------
    # Convenience Properties
    # -------------------------------------------------------------------------

    @property
    def separator(self) -> str:
        """Field separator used when printing."""
        return self.printing.separator

    @separator.setter
    def separator(self, value: str):
        self._global_printing.separator = value

    @property
    def growth_factor(self) -> float:
        """Buffer capacity multiplier."""
        return self.array.growth_factor

    # -------------------------------------------------------------------------
    # Context Manager Support
    # -------------------------------------------------------------------------

    def local(self, **kwargs) -> "_LocalConfigContext":
        """
        Create a local configuration context.

        Args:
            **kwargs: Configuration overrides (array, printing)

        Returns:
            Context manager
        """
        unknown = set(kwargs) - set(self._SECTIONS)
        if unknown:
            raise TypeError(f"Unknown config sections: {sorted(unknown)}")
        return _LocalConfigContext(self, **kwargs)

    def _set_local(self, **kwargs) -> Dict[str, Any]:
        previous = {}
        for key, value in kwargs.items():
            if value is not None:
                previous[key] = getattr(self._local, key, None)
                setattr(self._local, key, value)
        return previous

    def _restore_local(self, previous: Dict[str, Any]):
        for key, value in previous.items():
            setattr(self._local, key, value)

    # -------------------------------------------------------------------------
    # Callback Registration
    # -------------------------------------------------------------------------

    def on_change(self, config_name: str, callback: Callable):
        """
        Register callback for configuration changes.

        Args:
            config_name: Name of config ("array" or "printing")
            callback: Function called with the new section value
        """
        if config_name in self._callbacks:
            self._callbacks[config_name].append(callback)

    def _notify(self, config_name: str, value: Any):
        for callback in self._callbacks.get(config_name, []):
            callback(value)

    # -------------------------------------------------------------------------
    # Reset / Serialization
    # -------------------------------------------------------------------------

    def reset(self):
        """Reset all configurations to defaults."""
        self._global_array = ArrayConfig()
        self._global_printing = PrintConfig()

    def to_dict(self) -> Dict[str, Any]:
        """Export configuration as dictionary."""
        return {
            "array": {
                "initial_capacity": self.array.initial_capacity,
                "growth_factor": self.array.growth_factor,
            },
            "printing": {
                "separator": self.printing.separator,
                "warn_threshold": self.printing.warn_threshold,
            },
        }

    def __repr__(self) -> str:
        return f"SparseConfig({self.to_dict()})"


class _LocalConfigContext:
    """Context manager for local configuration override."""

    def __init__(self, config: SparseConfig, **kwargs):
        self._config = config
        self._kwargs = kwargs
        self._previous: Dict[str, Any] = {}

    def __enter__(self):
        self._previous = self._config._set_local(**self._kwargs)
        return self._config

    def __exit__(self, exc_type, exc_val, exc_tb):
        self._config._restore_local(self._previous)
        return False


# =============================================================================
# Global Instance
# =============================================================================

config = SparseConfig()


def get_config() -> SparseConfig:
    """Get the global configuration instance."""
    return config


__all__ = [
    "ArrayConfig",
    "PrintConfig",
    "SparseConfig",
    "config",
    "get_config",
]
