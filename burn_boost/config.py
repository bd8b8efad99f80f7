"""
Configuration management for the burn/boost program.
"""
import json
import os
from typing import Optional
from dataclasses import dataclass, asdict


@dataclass
class DatabaseConfig:
    """Database configuration."""
    path: str = "./burn_boost_data"
    write_buffer_size: int = 4 * 1024 * 1024  # 4MB
    max_open_files: int = 1000
    compression: Optional[str] = "snappy"


@dataclass
class MonitoringConfig:
    """Prometheus exporter configuration."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 9090


@dataclass
class TokenConfig:
    """Defaults used when the CLI initializes a token."""
    name: str = "BurnBoost Token"
    symbol: str = "BBT"
    decimals: int = 9
    initial_supply: int = 1_000_000 * 10 ** 9  # 1M tokens in base units
    base_market_cap: int = 1_000_000


@dataclass
class Config:
    """Main configuration."""
    database: DatabaseConfig
    monitoring: MonitoringConfig
    token: TokenConfig

    @classmethod
    def default(cls) -> 'Config':
        return cls(
            database=DatabaseConfig(),
            monitoring=MonitoringConfig(),
            token=TokenConfig(),
        )

    @classmethod
    def from_file(cls, path: str) -> 'Config':
        """Load configuration from JSON file. Missing sections use defaults."""
        with open(path, 'r') as f:
            data = json.load(f)

        return cls(
            database=DatabaseConfig(**data.get('database', {})),
            monitoring=MonitoringConfig(**data.get('monitoring', {})),
            token=TokenConfig(**data.get('token', {})),
        )

    def to_file(self, path: str):
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    def to_dict(self) -> dict:
        return {
            'database': asdict(self.database),
            'monitoring': asdict(self.monitoring),
            'token': asdict(self.token),
        }
