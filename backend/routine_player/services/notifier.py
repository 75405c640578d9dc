"""
Notifier
========
Observer registration for the collaborators that react to a session:
the audio side listens for signals, the render side for state changes.

A listener that raises is logged and skipped. It never rolls back the
transition that was being announced, and the remaining listeners still
hear about it.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable

from routine_player.models.events import Signal
from routine_player.models.session import SessionSettings, SessionState

logger = logging.getLogger(__name__)

SignalListener = Callable[[Signal], None]
StateListener = Callable[[SessionState], None]


class Notifier:
    def __init__(self) -> None:
        self._signal_listeners: list[SignalListener] = []
        self._state_listeners: list[StateListener] = []

    def on_signal(self, listener: SignalListener) -> Callable[[], None]:
        """Register *listener* for signals. Returns an unsubscribe callable."""
        self._signal_listeners.append(listener)
        return lambda: self._remove(self._signal_listeners, listener)

    def on_state(self, listener: StateListener) -> Callable[[], None]:
        """Register *listener* for state changes. Returns an unsubscribe callable."""
        self._state_listeners.append(listener)
        return lambda: self._remove(self._state_listeners, listener)

    def publish(self, signals: Iterable[Signal], state: SessionState | None) -> None:
        for signal in signals:
            for listener in list(self._signal_listeners):
                try:
                    listener(signal)
                except Exception:
                    logger.exception("Signal listener failed on %s", signal.type.value)
        if state is None:
            return
        for listener in list(self._state_listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed at step %d", state.step_index)

    @staticmethod
    def _remove(listeners: list, listener: Callable) -> None:
        if listener in listeners:
            listeners.remove(listener)


def sound_gated(
    listener: SignalListener,
    current_settings: Callable[[], SessionSettings],
) -> SignalListener:
    """Wrap an audio listener so it only hears signals while sound is on."""

    def _gated(signal: Signal) -> None:
        if current_settings().sound_enabled:
            listener(signal)

    return _gated
