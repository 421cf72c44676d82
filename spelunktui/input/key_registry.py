"""Key-token to action tables used by every input mode."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

KeyHandler = Callable[[], bool | None]


@dataclass(frozen=True)
class KeyComboBinding:
    """One action reachable from one or more key tokens."""

    combos: tuple[str, ...]
    handler: KeyHandler


class KeyComboRegistry:
    """Exact-match dispatch table, optionally normalizing tokens first."""

    def __init__(self, normalize: Callable[[str], str] | None = None) -> None:
        self._normalize = normalize if normalize is not None else str
        self._handlers: dict[str, KeyHandler] = {}

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Bind every combo of ``binding``; later bindings replace earlier ones."""
        for combo in binding.combos:
            self._handlers[self._normalize(combo)] = binding.handler
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def __contains__(self, key: str) -> bool:
        return self._normalize(key) in self._handlers

    def dispatch(self, key: str) -> bool | None:
        """Run the handler bound to ``key``.

        Returns ``None`` when nothing is bound, otherwise the handler's result
        with a bare ``None`` return counted as handled.
        """
        handler = self._handlers.get(self._normalize(key))
        if handler is None:
            return None
        result = handler()
        return True if result is None else result


__all__ = ["KeyComboBinding", "KeyComboRegistry", "KeyHandler"]
