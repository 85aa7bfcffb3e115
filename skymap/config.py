"""Display settings tree that re-renders on every committed write."""
from __future__ import annotations

import copy
from collections.abc import Callable, Iterator, Mapping
from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "bgColor": "#000000",
    "glow": False,
    "fontFamily": "'Georgia', 'Times New Roman', serif",
    "language": "en",
    "grid": {
        "enabled": True,
        "color": "#555555",
        "width": 1,
    },
    "stars": {
        "enabled": True,
        "color": "#ffffff",
        "scale": 1,
        "data": "stars.json",
    },
    "constellations": {
        "lines": {
            "enabled": True,
            "color": "#eaeaea",
            "width": 2,
            "data": "constellations.lines.json",
            "labels": {
                "enabled": True,
                "color": "#fefefe",
                "fontSize": 16,
                "data": "constellations.labels.json",
            },
        },
        "boundaries": {
            "enabled": False,
            "color": "#aaaaaa",
            "width": 1,
            "data": "constellations.boundaries.json",
        },
    },
    "planets": {
        "enabled": True,
        "scale": 1,
        "color": None,          # None -> each planet's own colour
        "labels": {
            "enabled": True,
            "color": "#fefefe",
            "fontSize": 14,
            "data": "planets.labels.json",
        },
    },
    "sun": {
        "enabled": True,
        "scale": 1,
        "color": "#ffe484",
        "label": {
            "enabled": True,
            "color": "#fefefe",
            "fontSize": 16,
            "data": "sun.labels.json",
        },
    },
    "moon": {
        "enabled": True,
        "scale": 1,
        "color": "#eaeaea",
        "label": {
            "enabled": True,
            "color": "#fefefe",
            "fontSize": 16,
            "data": "moon.labels.json",
        },
    },
}


def merge_configs(defaults: Mapping[str, Any], overrides: Mapping[str, Any] | None) -> dict[str, Any]:
    """Deep-merge `overrides` onto `defaults`. Neither input is modified."""
    if isinstance(overrides, ConfigNode):
        overrides = overrides.to_dict()
    merged = copy.deepcopy(dict(defaults))
    for key, value in (overrides or {}).items():
        if isinstance(value, ConfigNode):
            value = value.to_dict()
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class ConfigNode:
    """One branch of the settings tree.

    Children are reachable as attributes or items. The shape of the tree
    is fixed at construction: writing an unknown key raises, and a branch
    only accepts a mapping, which is merged into the existing node.
    """

    __slots__ = ("_data", "_notify", "_path")

    def __init__(self, data: Mapping[str, Any], notify: Callable[[str], None], path: str = "") -> None:
        object.__setattr__(self, "_notify", notify)
        object.__setattr__(self, "_path", path)
        object.__setattr__(self, "_data", {
            key: self._wrap(key, value) for key, value in data.items()
        })

    def _wrap(self, key: str, value: Any) -> Any:
        value = _plain(value)
        if isinstance(value, Mapping):
            return ConfigNode(value, self._notify, self._child_path(key))
        return value

    def _child_path(self, key: str) -> str:
        return f"{self._path}.{key}" if self._path else key

    def _check(self, key: str, value: Any) -> None:
        """Raise unless writing `value` at `key` keeps the tree's shape."""
        path = self._child_path(key)
        if key not in self._data:
            raise AttributeError(f"Unknown config key: {path}")
        value = _plain(value)
        current = self._data[key]
        if isinstance(current, ConfigNode):
            if not isinstance(value, Mapping):
                raise TypeError(f"Config branch {path} takes a mapping, got {value!r}")
            for child_key, child_value in value.items():
                current._check(child_key, child_value)
        elif isinstance(value, Mapping):
            raise TypeError(f"Config key {path} takes a value, got a mapping")

    def _assign(self, key: str, value: Any) -> None:
        value = _plain(value)
        current = self._data[key]
        if isinstance(current, ConfigNode):
            for child_key, child_value in value.items():
                current._assign(child_key, child_value)
        else:
            self._data[key] = copy.deepcopy(value)

    def __getattr__(self, key: str) -> Any:
        if key.startswith("_"):
            raise AttributeError(key)
        try:
            return self._data[key]
        except KeyError:
            raise AttributeError(f"Unknown config key: {self._child_path(key)}") from None

    def __setattr__(self, key: str, value: Any) -> None:
        # the whole write is checked before any leaf changes
        self._check(key, value)
        self._assign(key, value)
        self._notify(self._child_path(key))

    def __getitem__(self, key: str) -> Any:
        try:
            return self._data[key]
        except KeyError:
            raise KeyError(f"Unknown config key: {self._child_path(key)}") from None

    def __setitem__(self, key: str, value: Any) -> None:
        if key not in self._data:
            raise KeyError(f"Unknown config key: {self._child_path(key)}")
        setattr(self, key, value)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"

    def to_dict(self) -> dict[str, Any]:
        return {
            key: value.to_dict() if isinstance(value, ConfigNode) else copy.deepcopy(value)
            for key, value in self._data.items()
        }


class ReactiveConfig(ConfigNode):
    """Root of the settings tree; calls `callback` after each committed write.

    The whole tree is wrapped once at construction and the callback only
    becomes live afterwards, so building the tree never renders.
    """

    __slots__ = ("_ready", "_callback")

    def __init__(self, data: Mapping[str, Any], callback: Callable[[], None]) -> None:
        object.__setattr__(self, "_ready", False)
        object.__setattr__(self, "_callback", callback)
        super().__init__(data, self._on_write)
        object.__setattr__(self, "_ready", True)

    def _on_write(self, path: str) -> None:
        if self._ready:
            self._callback()


def _plain(value: Any) -> Any:
    return value.to_dict() if isinstance(value, ConfigNode) else value
