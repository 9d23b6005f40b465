"""Base class for tracker configurations with fixed fields and change notification.

Uses dataclasses with field metadata for range hints and write protection.
"""

from __future__ import annotations

import threading
import warnings
from dataclasses import dataclass, fields, field, MISSING
from typing import Any, Callable, TypeVar

T = TypeVar('T')


# Valid metadata keys for config fields
METADATA_KEYS = {
    "description",  # Field description
    "fixed",        # Field can be set at init, then becomes readonly
    "min",          # Minimum value (hint, warned on at init)
    "max",          # Maximum value (hint, warned on at init)
}


def config_field(
    default: T = MISSING,
    *,
    default_factory: Any = MISSING,
    description: str = "",
    min: float | int | None = None,
    max: float | int | None = None,
    fixed: bool = False,
    repr: bool = True,
) -> T:
    """Create a config field with metadata.

    Note: Returns Field at runtime but typed as T for type checker compatibility.

    Examples:
        >>> max_age_ms: float = config_field(10000.0, min=0.0, fixed=True, description="Eviction age")
        >>> port_in: int = config_field(9000, min=1024, max=65535, description="Incoming OSC port")
    """
    metadata = {}
    if description:
        metadata["description"] = description
    if min is not None:
        metadata["min"] = min
    if max is not None:
        metadata["max"] = max
    if fixed:
        metadata["fixed"] = True

    return field(  # type: ignore[return-value]
        default=default,
        default_factory=default_factory,
        repr=repr,
        metadata=metadata
    )


@dataclass
class ConfigBase:
    """Base class for configs with fixed fields and change notification.

    Example:
        @dataclass
        class MyConfig(ConfigBase):
            # Normal field - can change anytime
            verbose: bool = config_field(False, description="Print events")

            # Fixed field - set at init, then locked
            max_age_ms: float = config_field(10000.0, fixed=True, description="Eviction age")

    Metadata flags:
        - fixed: Field can be set during __init__, but becomes readonly after
        - min/max: Range hints, a value outside the range warns at init
        - description: Field documentation
    """

    def __post_init__(self) -> None:
        object.__setattr__(self, '_listeners', set())
        object.__setattr__(self, '_lock', threading.Lock())

        fixed_set: set[str] = set()
        for f in fields(self):
            for key in f.metadata:
                if key not in METADATA_KEYS:
                    warnings.warn(
                        f"{self.__class__.__name__}.{f.name}: unknown metadata key '{key}' "
                        f"(valid keys: {', '.join(sorted(METADATA_KEYS))})",
                        UserWarning,
                        stacklevel=2
                    )

            if f.metadata.get('fixed'):
                fixed_set.add(f.name)

            val = getattr(self, f.name)
            min_val = f.metadata.get('min')
            max_val = f.metadata.get('max')
            if (min_val is not None and val < min_val) or (max_val is not None and val > max_val):
                warnings.warn(
                    f"{self.__class__.__name__}.{f.name}: value {val} "
                    f"is outside valid range [{min_val}, {max_val}]",
                    UserWarning,
                    stacklevel=2
                )

        object.__setattr__(self, '_fixed_fields', fixed_set)
        object.__setattr__(self, '_initialized', True)

    def __setattr__(self, name: str, value: Any) -> None:
        """Only declared fields can be set, and fixed fields only during __init__.

        Raises:
            AttributeError: If field is undeclared, or fixed.
        """
        if name.startswith('_'):
            object.__setattr__(self, name, value)
            return

        field_names: set[str] = {f.name for f in fields(self)}
        if name not in field_names:
            raise AttributeError(
                f"Cannot set undeclared attribute '{name}' on {self.__class__.__name__}"
            )

        if not hasattr(self, '_initialized'):
            object.__setattr__(self, name, value)
            return

        if name in self._fixed_fields: # type: ignore
            raise AttributeError(f"Cannot modify fixed field '{name}' on {self.__class__.__name__}")

        with self._lock:  # type: ignore
            object.__setattr__(self, name, value)
            listeners_copy = list(self._listeners) # type: ignore

        # Listeners run outside the lock so they may touch the config again
        for listener in listeners_copy:
            listener()

    def watch(self, callback: Callable, attribute: str | None = None) -> Callable[[], None]:
        """Watch for config changes.

        Args:
            callback: callback() for any change, or callback(value) when attribute is given.
            attribute: Optional field name to watch.

        Returns:
            Function that removes the listener.

        Raises:
            AttributeError: If the specified attribute does not exist.
        """
        if attribute is None:
            listener: Callable[[], None] = callback
        else:
            field_names = {f.name for f in fields(self)}
            if attribute not in field_names:
                raise AttributeError(
                    f"Attribute '{attribute}' not found in {self.__class__.__name__}. "
                    f"Available attributes: {', '.join(sorted(field_names))}"
                )

            def listener() -> None:
                callback(getattr(self, attribute))

        with self._lock:  # type: ignore
            self._listeners.add(listener)  # type: ignore

        def unwatch() -> None:
            with self._lock:  # type: ignore
                self._listeners.discard(listener)  # type: ignore
        return unwatch
