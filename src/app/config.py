"""Configuration management using Pydantic settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict

from rapidgun.host import DEFAULT_TICK_INTERVAL
from rapidgun.parts import LARGE_GRID_SIZE


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "RAPIDGUN"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Controller tick (seconds)
    tick_interval: float = DEFAULT_TICK_INTERVAL

    # Simulated rig
    simulation_enabled: bool = True
    simulation_levels: str = "4,4,4"    # weapons per level, rotor outward
    simulation_grid_size: float = LARGE_GRID_SIZE  # 2.5 large grid, 0.5 small grid

    def level_weapon_counts(self) -> list[int]:
        """Parse ``simulation_levels`` ("4,4,2") into [4, 4, 2]."""
        return [int(part) for part in self.simulation_levels.split(",") if part.strip()]


settings = Settings()
