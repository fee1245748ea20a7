"""
Mock controller and event dispatch for confirmed gestures and actions.
"""
import logging
from typing import List, Optional, Tuple

from .types import ActionGesture, ControllerProto, Gesture, KeyAction

logger = logging.getLogger(__name__)


class MockController:
    """Mock controller that logs key presses instead of injecting them."""

    def __init__(self):
        """Initialize the mock controller."""
        self.key_presses: List[Tuple[str, Tuple[str, ...]]] = []
        self.voice_toggle_count = 0
        self.click_count = 0

    async def press_key(self, key: str, modifiers: Tuple[str, ...] = ()) -> None:
        """Record a key press instead of executing it."""
        self.key_presses.append((key, tuple(modifiers)))
        combo = "+".join([*modifiers, key])
        logger.info("[MockController] Press key: %s (call #%d)", combo, len(self.key_presses))

    async def toggle_voice(self) -> None:
        """Record a voice toggle instead of executing it."""
        self.voice_toggle_count += 1
        logger.info("[MockController] Toggle voice input (call #%d)", self.voice_toggle_count)

    async def click(self) -> None:
        """Record a click instead of executing it."""
        self.click_count += 1
        logger.info("[MockController] Click (call #%d)", self.click_count)

    def reset_counters(self) -> None:
        """Reset action counters for testing."""
        self.key_presses = []
        self.voice_toggle_count = 0
        self.click_count = 0


async def _perform(controller: ControllerProto, action: KeyAction) -> bool:
    if action.kind == "key" and action.key is not None:
        await controller.press_key(action.key, action.modifiers)
    elif action.kind == "voice":
        await controller.toggle_voice()
    elif action.kind == "click":
        await controller.click()
    else:
        return False
    return True


async def dispatch_gesture(controller: ControllerProto, gesture: Optional[Gesture]) -> bool:
    """
    Execute the action mapped to a confirmed static gesture.

    Returns:
        True if the controller was called
    """
    if gesture is None or gesture is Gesture.NONE:
        return False
    logger.info("%s %s -> %s", gesture.action.emoji, gesture.label, gesture.action.description)
    return await _perform(controller, gesture.action)


async def dispatch_action(controller: ControllerProto, action: Optional[ActionGesture]) -> bool:
    """
    Execute the action mapped to a confirmed motion action.

    Returns:
        True if the controller was called
    """
    if action is None or action is ActionGesture.NONE:
        return False
    logger.info("%s %s -> %s", action.action.emoji, action.label, action.action.description)
    return await _perform(controller, action.action)
