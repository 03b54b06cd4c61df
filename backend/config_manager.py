import json
import os
from typing import Dict, Optional

CONFIG_FILE = os.getenv(
    "FITMENT_CONFIG_FILE",
    os.path.join(os.path.dirname(__file__), 'data', 'user_config.json')
)


def env_defaults() -> Dict:
    """Initial settings, taken from the environment (.env is loaded by main)."""
    return {
        "provider": os.getenv("PROVIDER", "ollama").lower(),
        "ollama_base_url": os.getenv("OLLAMA_URL", "http://localhost:11434"),
        "ollama_model": os.getenv("OLLAMA_MODEL", "llava"),
        "openai_key": os.getenv("OPENAI_API_KEY", ""),
        "openai_model": os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        "openai_org": os.getenv("OPENAI_ORG", ""),
    }


class ConfigManager:
    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or CONFIG_FILE
        self._ensure_config_exists()

    def _ensure_config_exists(self):
        if not os.path.exists(self.config_file):
            self.save_config(env_defaults())

    def load_config(self) -> Dict:
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                stored = json.load(f)
        except (json.JSONDecodeError, FileNotFoundError):
            stored = {}
        # Keys missing from an older file fall back to the environment.
        return {**env_defaults(), **stored}

    def save_config(self, config: Dict):
        directory = os.path.dirname(self.config_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(config, f, indent=4)

    def get_key(self, key_name: str) -> Optional[str]:
        config = self.load_config()
        return config.get(key_name)

    def set_key(self, key_name: str, value: str):
        config = self.load_config()
        config[key_name] = value
        self.save_config(config)
