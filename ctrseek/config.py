from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator


EngineMode = Literal["stateless", "shared"]
CounterOverflow = Literal["wrap", "raise"]


class Settings(BaseModel):
    # Keystream engine
    stream_buffer_size: int = Field(default=512, ge=1, description="Keystream bytes generated per refill")
    engine_mode: EngineMode = Field(default="stateless")
    counter_overflow: CounterOverflow = Field(default="wrap")

    # Logging
    log_level: str = Field(default="INFO")

    # Reproducibility
    global_seed: int = Field(default=1337)

    # Paths
    runs_dir: str = Field(default="runs")

    @field_validator("engine_mode", "counter_overflow", mode="before")
    @classmethod
    def _lower(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def strict_counter(self) -> bool:
        return self.counter_overflow == "raise"


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    return Settings(
        stream_buffer_size=int(os.getenv("CTRSEEK_BUFFER_SIZE", "512")),
        engine_mode=os.getenv("CTRSEEK_ENGINE_MODE", "stateless"),
        counter_overflow=os.getenv("CTRSEEK_COUNTER_OVERFLOW", "wrap"),
        log_level=os.getenv("CTRSEEK_LOG_LEVEL", "INFO"),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        runs_dir=os.getenv("CTRSEEK_RUNS_DIR", "runs"),
    )
