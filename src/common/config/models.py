from dataclasses import dataclass, field
from typing import Optional, List

@dataclass
class TimingDefaultsConfig:
    green_duration_ms: int = 30000
    yellow_duration_ms: int = 5000
    red_duration_ms: int = 35000

@dataclass
class SchedulerConfig:
    enabled: bool = True
    tick_interval_ms: int = 500

@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8000

@dataclass
class LoggingConfig:
    level: str = "INFO"

@dataclass
class IntersectionSeedConfig:
    id: str = "???"
    name: str = "???"
    timing: Optional[TimingDefaultsConfig] = None
    autostart: bool = False

@dataclass
class ControlConfig:
    timing: TimingDefaultsConfig = field(default_factory=TimingDefaultsConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    intersections: List[IntersectionSeedConfig] = field(default_factory=list)
