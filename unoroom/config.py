"""Game rules constants and relay server settings.

Server settings come from environment variables; the CLI loads a .env file
first, so either works.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class GameConfig:
    """Fixed rule constants for a single round."""

    min_players: int = 2
    max_players: int = 4
    initial_hand_size: int = 7
    draw_penalty: int = 1  # cards for a voluntary draw; the engine always draws one
    uno_penalty: int = 2


DEFAULT_GAME_CONFIG = GameConfig()


def get_env(key: str, default: str = "") -> str:
    """Get environment variable with default."""
    return os.environ.get(key, default)


def get_env_int(key: str, default: int = 0) -> int:
    """Get integer environment variable."""
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


@dataclass
class ServerConfig:
    """Relay server configuration."""

    host: str = "0.0.0.0"
    port: int = 3001
    log_level: str = "INFO"
    environment: str = "development"
    client_url: str = "http://localhost:3000"
    max_rooms: int = 1000

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        return cls(
            host=get_env("HOST", "0.0.0.0"),
            port=get_env_int("PORT", 3001),
            log_level=get_env("LOG_LEVEL", "INFO"),
            environment=get_env("ENVIRONMENT", "development"),
            client_url=get_env("CLIENT_URL", "http://localhost:3000"),
            max_rooms=get_env_int("MAX_ROOMS", 1000),
        )
