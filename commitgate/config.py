import os
from dotenv import load_dotenv

# Load params from .env file
load_dotenv()

# Repository/ITS association config
CONFIG_PATH = os.getenv("COMMITGATE_CONFIG_PATH", "commitgate.yaml")

# Display name used in user-facing messages ("<name> Issue-Tracker")
DEFAULT_ITS_NAME = "its"


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def get_config_path() -> str:
    return str(os.getenv("COMMITGATE_CONFIG_PATH", CONFIG_PATH)).strip() or CONFIG_PATH


def get_its_name() -> str:
    return str(os.getenv("COMMITGATE_ITS_NAME", DEFAULT_ITS_NAME)).strip() or DEFAULT_ITS_NAME


def get_its_base_url() -> str:
    return str(os.getenv("COMMITGATE_ITS_BASE_URL", "")).strip().rstrip("/")


def get_its_credentials() -> tuple:
    return (
        os.getenv("COMMITGATE_ITS_USER", ""),
        os.getenv("COMMITGATE_ITS_TOKEN", ""),
    )


def get_its_timeout_seconds() -> float:
    """
    Per-request timeout for tracker lookups.
    The validation engine itself never imposes a timeout.
    """
    return max(0.1, _env_float("COMMITGATE_ITS_TIMEOUT_SECONDS", 5.0))
