"""
symptom-quiz configuration

Timing, loader and telemetry settings live here.
Environment variables override defaults for deployment flexibility.
"""

import os
from dataclasses import dataclass, field


@dataclass
class EngineConfig:
    """Session behavior"""
    auto_advance_delay_seconds: float = float(os.getenv("QUIZ_AUTO_ADVANCE_DELAY", "1.0"))
    default_tool_name: str = os.getenv("QUIZ_TOOL_NAME", "unknown")


@dataclass
class LoaderConfig:
    """Where and how quiz definitions are fetched"""
    default_source: str = os.getenv("QUIZ_DATA_SOURCE", "./quiz-data.json")
    fetch_timeout_seconds: float = float(os.getenv("QUIZ_FETCH_TIMEOUT", "10.0"))
    user_agent: str = os.getenv("QUIZ_USER_AGENT", "SymptomQuiz/1.0")


@dataclass
class TelemetryConfig:
    """Local event log retention"""
    max_events: int = int(os.getenv("QUIZ_MAX_EVENTS", "100"))


@dataclass
class Config:
    """Master config, import this"""
    engine: EngineConfig = field(default_factory=EngineConfig)
    loader: LoaderConfig = field(default_factory=LoaderConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)

    @classmethod
    def fast_mode(cls) -> "Config":
        """For development/testing: no auto-advance delay"""
        cfg = cls()
        cfg.engine.auto_advance_delay_seconds = 0.0
        cfg.loader.fetch_timeout_seconds = 2.0
        return cfg


# Singleton
config = Config()
