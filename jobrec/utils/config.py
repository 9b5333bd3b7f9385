"""Configuration management"""
import os
import yaml
from pathlib import Path
from typing import Dict, Any
from dotenv import load_dotenv

load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "config.yaml"


class Config:
    """Application configuration manager"""

    def __init__(self, config_path: str = None):
        self.config_path = Path(config_path or os.getenv("JOBREC_CONFIG", DEFAULT_CONFIG_PATH))
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if self.config_path.exists():
            with open(self.config_path, 'r') as f:
                return yaml.safe_load(f) or {}
        return {}

    @property
    def database_url(self) -> str:
        return os.getenv("DATABASE_URL", self.get("database.url", "sqlite:///jobrec.db"))

    @property
    def recommendation(self) -> Dict[str, Any]:
        return self._config.get("recommendation", {})

    @property
    def blend_weights(self) -> Dict[str, float]:
        return self.recommendation.get("weights", {})

    @property
    def rebuild_policy(self) -> Dict[str, Any]:
        return self.recommendation.get("rebuild", {})

    @property
    def model_path(self) -> str:
        return os.getenv(
            "JOBREC_MODEL_PATH",
            self.get("skill_matching.model_path", "models/skill_matching_model.joblib"),
        )

    @property
    def batch_size(self) -> int:
        return self._config.get("performance", {}).get("batch_size", 20)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot notation"""
        keys = key.split('.')
        value = self._config
        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default
        return value if value is not None else default

# Global config instance
config = Config()
