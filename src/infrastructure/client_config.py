"""Client configuration: server host and session cookie."""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

DEFAULT_HOST = "localhost:8000"
COOKIE_PREFIX = "codegrinder_session="
RC_FILE = ".codegrinderrc"


@dataclass(frozen=True)
class ClientConfig:
    """Loaded once at startup and passed to everything that talks to the server."""

    host: str = DEFAULT_HOST
    cookie: str = ""

    @property
    def base_url(self) -> str:
        if self.host.startswith(("http://", "https://")):
            return f"{self.host.rstrip('/')}/api/v2"
        return f"https://{self.host}/api/v2"


def default_config_path() -> Path:
    return Path.home() / RC_FILE


def load_client_config(path: Path | None = None) -> ClientConfig:
    """
    Read the client configuration file.

    ``CODEGRINDER_HOST`` (from the environment or a ``.env`` file) overrides
    the stored host.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid JSON
    """
    load_dotenv()
    path = path or default_config_path()

    raw = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must contain a JSON object")

    host = os.getenv("CODEGRINDER_HOST") or raw.get("host") or DEFAULT_HOST
    return ClientConfig(host=host, cookie=raw.get("cookie", ""))


def save_client_config(config: ClientConfig, path: Path | None = None) -> Path:
    """Write the configuration file and return its path."""
    path = path or default_config_path()
    path.write_text(json.dumps(asdict(config), indent=4) + "\n", encoding="utf-8")
    logger.debug(f"Saved client configuration to {path}")
    return path
