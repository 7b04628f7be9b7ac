from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException
from pathlib import Path
from typing import List, Optional

from ..exceptions import InvalidConfigurationError
from .models import ControlConfig

class ConfigManager:
    """Centralizes loading and validation of configuration"""

    def __init__(self, config_dir: Path = Path("conf")):
        self.config_dir = config_dir

    def load_control_config(self, profile: str = "default", overrides: Optional[List[str]] = None) -> DictConfig:
        """Loads control config over the structured defaults, applies dotlist overrides and validates"""
        config_path = self.config_dir / "control" / f"{profile}.yaml"

        if not config_path.exists():
            raise FileNotFoundError(f"Config not found: {config_path}")

        try:
            cfg = OmegaConf.merge(
                OmegaConf.structured(ControlConfig),
                OmegaConf.load(config_path),
                OmegaConf.from_dotlist(overrides or [])
            )
        except OmegaConfBaseException as e:
            raise InvalidConfigurationError(f"Invalid config {config_path}: {e}") from e

        validate_control_config(cfg)
        return cfg

def validate_control_config(cfg: DictConfig):
    """Raises InvalidConfigurationError for non-positive durations or tick interval"""
    for key in ("green_duration_ms", "yellow_duration_ms", "red_duration_ms"):
        if cfg.timing[key] <= 0:
            raise InvalidConfigurationError(f"timing.{key} must be positive")

    if cfg.scheduler.tick_interval_ms <= 0:
        raise InvalidConfigurationError("scheduler.tick_interval_ms must be positive")

    seen = set()
    for seed in cfg.intersections:
        if OmegaConf.is_missing(seed, "id") or OmegaConf.is_missing(seed, "name"):
            raise InvalidConfigurationError("Every seeded intersection needs an id and a name")
        if seed.id in seen:
            raise InvalidConfigurationError(f"Duplicate seeded intersection id: {seed.id}")
        seen.add(seed.id)
        if seed.timing is not None:
            for key in ("green_duration_ms", "yellow_duration_ms", "red_duration_ms"):
                if seed.timing[key] <= 0:
                    raise InvalidConfigurationError(f"{seed.id}: timing.{key} must be positive")
