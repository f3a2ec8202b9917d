"""Game layer: the seam between the engine and an interactive front end.

:class:`EngineSession` needs PyQt6 and is imported from
``knightfall.game.engine_session`` directly.
"""

from knightfall.game.controller import GameController, GameEvents, GamePhase

__all__ = [
    "GameController",
    "GameEvents",
    "GamePhase",
]
