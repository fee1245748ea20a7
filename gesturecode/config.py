"""
Configuration management for hand gesture recognition system.
"""
import logging

import yaml
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Dict, Any, List, Type, TypeVar


ACTION_STRATEGIES = ("swipe_pinch", "motion_path")

# Action cooldown used when the YAML leaves it null
DEFAULT_ACTION_COOLDOWN = {
    "swipe_pinch": 0.4,
    "motion_path": 0.7,
}


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int = 0
    width: int = 640
    height: int = 480
    fps: int = 30


@dataclass
class BackendConfig:
    """Hand landmark backend selection."""
    preferred: str = "mediapipe_tasks"
    fallbacks: List[str] = field(default_factory=lambda: ["mediapipe_solutions"])
    max_hands: int = 2
    model_path: str = "hand_landmarker.task"
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


@dataclass
class GesturesConfig:
    """Static gesture recognition and debounce settings."""
    enabled: bool = True
    sensitivity: float = 0.7          # minimum joint confidence
    hold_duration: float = 0.3        # seconds a gesture must be held
    cooldown: float = 0.5             # seconds between confirmations
    stale_timeout: float = 0.4        # seconds without a valid hand before reset
    stable_frame_threshold: int = 5
    frame_skip_when_stable: int = 2
    full_detection_interval: int = 10
    roi_padding_ratio: float = 0.15
    roi_detection: bool = True        # detect inside tracked regions between full passes


@dataclass
class SwipePinchConfig:
    """Wrist swipe and thumb/index pinch settings."""
    swipe_distance: float = 0.22
    swipe_vertical_tolerance: float = 0.10
    swipe_window: float = 0.25
    pinch_threshold: float = 0.06
    pinch_release_threshold: float = 0.09


@dataclass
class MotionPathConfig:
    """Air-tap, wave, pinch-drag and circle settings."""
    pinch_threshold: float = 0.06
    drag_left_distance: float = 0.15
    drag_max_y_drift: float = 0.08
    wave_amplitude: float = 0.12
    wave_direction_changes: int = 2
    wave_deadzone: float = 0.01
    wave_min_points: int = 6
    circle_closure_threshold: float = 0.08
    circle_roundness_std_ratio: float = 0.35
    circle_min_path_length: float = 0.5
    circle_min_points: int = 10
    air_tap_area_increase: float = 0.20
    air_tap_area_decrease: float = 0.15
    air_tap_max_duration: float = 0.35
    air_tap_max_horizontal_drift: float = 0.10


@dataclass
class ActionsConfig:
    """Motion action detection settings."""
    enabled: bool = True
    strategy: str = "swipe_pinch"
    cooldown: Optional[float] = None
    window: float = 0.6
    display_duration: float = 0.6
    swipe_pinch: SwipePinchConfig = field(default_factory=SwipePinchConfig)
    motion_path: MotionPathConfig = field(default_factory=MotionPathConfig)

    @property
    def effective_cooldown(self) -> float:
        if self.cooldown is None:
            return DEFAULT_ACTION_COOLDOWN.get(self.strategy, 0.4)
        return max(0.0, self.cooldown)


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_status: bool = True
    window_name: str = "GestureCode"


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig = field(default_factory=CameraConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    gestures: GesturesConfig = field(default_factory=GesturesConfig)
    actions: ActionsConfig = field(default_factory=ActionsConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    Args:
        path: Path to config file. If None, uses the packaged config.default.yaml

    Returns:
        Configuration object with all settings
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f) or {}

    return sanitize_config(_dict_to_config(data))


T = TypeVar("T")


def _section(cls: Type[T], data: Optional[Dict[str, Any]]) -> T:
    """Build a flat config dataclass, ignoring unknown keys."""
    data = data or {}
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    actions_data = dict(data.get('actions') or {})
    swipe_pinch = _section(SwipePinchConfig, actions_data.pop('swipe_pinch', None))
    motion_path = _section(MotionPathConfig, actions_data.pop('motion_path', None))
    actions = _section(ActionsConfig, actions_data)
    actions.swipe_pinch = swipe_pinch
    actions.motion_path = motion_path

    if actions.strategy not in ACTION_STRATEGIES:
        raise ValueError(
            f"Unknown action strategy {actions.strategy!r}, expected one of {ACTION_STRATEGIES}"
        )

    return Cfg(
        camera=_section(CameraConfig, data.get('camera')),
        backend=_section(BackendConfig, data.get('backend')),
        gestures=_section(GesturesConfig, data.get('gestures')),
        actions=actions,
        display=_section(DisplayConfig, data.get('display')),
        logging=_section(LoggingConfig, data.get('logging')),
    )


def _clamp_non_negative(section: Any) -> None:
    for f in fields(section):
        value = getattr(section, f.name)
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)) and value < 0:
            setattr(section, f.name, type(value)(0))


def sanitize_config(cfg: Cfg) -> Cfg:
    """Clamp negative durations and thresholds to zero, in place."""
    for section in (cfg.camera, cfg.backend, cfg.gestures, cfg.actions,
                    cfg.actions.swipe_pinch, cfg.actions.motion_path):
        _clamp_non_negative(section)
    return cfg


def setup_logging(cfg: LoggingConfig) -> None:
    """Configure root logging from the ``logging`` section."""
    level = getattr(logging, str(cfg.level).upper(), logging.INFO)
    logging.basicConfig(level=level, format=cfg.format)
