"""
settings.py — Central config for the Plant Identifier

Precedence for config values:
1) Streamlit secrets (if available)
2) Environment variables
3) Sensible defaults

Secrets (API keys) should live in .streamlit/secrets.toml for Streamlit,
or in a local `.env` file when running the relay server.
"""

from __future__ import annotations
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

# --- Streamlit secrets (optional) ---
_ST_SECRETS = None
try:
    import streamlit as st  # noqa: F401
    _ST_SECRETS = getattr(st, "secrets", None)
except ImportError:
    _ST_SECRETS = None


# --- Helpers ---------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[1]  # repo root

def from_secrets_or_env(key: str, default: Optional[str] = None) -> Optional[str]:
    """Return value from st.secrets[key] if available, else os.getenv(key), else default."""
    if _ST_SECRETS is not None:
        try:
            val = _ST_SECRETS.get(key, None)
            if val is not None:
                return str(val)
        except Exception:
            # st.secrets raises when no secrets.toml exists
            pass
    return os.getenv(key, default)

def as_bool(value: Optional[str], default: bool = False) -> bool:
    """Parse common truthy strings to bool."""
    if value is None:
        return default
    return str(value).strip().lower() in {"1", "true", "t", "yes", "y", "on"}

def as_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default

def as_float(value: Optional[str], default: Optional[float]) -> Optional[float]:
    try:
        return float(value) if value not in (None, "") else default
    except ValueError:
        return default

def resolve_path(raw: str | Path, *, base: Path = PROJECT_ROOT) -> Path:
    """
    Resolve a filesystem path. If absolute or starts with ~, respect it.
    If relative, resolve under `base`.
    """
    p = Path(raw).expanduser()
    return p if p.is_absolute() else (base / p)


# --- Environment -----------------------------------------------------------

ENVIRONMENT = from_secrets_or_env("ENV", "development")
DEBUG       = as_bool(from_secrets_or_env("DEBUG", "false"), default=False)
LOG_LEVEL   = from_secrets_or_env("LOG_LEVEL", "DEBUG" if DEBUG else "INFO").upper()


# --- Identification relay --------------------------------------------------

IDENTIFY_ENDPOINT  = from_secrets_or_env("IDENTIFY_ENDPOINT", "http://localhost:5050/api/identify")
IDENTIFY_TRANSPORT = from_secrets_or_env("IDENTIFY_TRANSPORT", "multipart").lower()

# None means wait for the transport indefinitely
IDENTIFY_TIMEOUT = as_float(from_secrets_or_env("IDENTIFY_TIMEOUT"), None)


# --- Image acquisition -----------------------------------------------------

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
JPEG_QUALITY     = as_int(from_secrets_or_env("JPEG_QUALITY"), 80)

CAMERA_BACKEND        = (from_secrets_or_env("CAMERA_BACKEND", "browser") or "browser").lower()
CAMERA_DEVICE         = as_int(from_secrets_or_env("CAMERA_DEVICE"), 0)
CAMERA_WIDTH          = as_int(from_secrets_or_env("CAMERA_WIDTH"), 1920)
CAMERA_HEIGHT         = as_int(from_secrets_or_env("CAMERA_HEIGHT"), 1080)
CAMERA_FACING_MODE    = from_secrets_or_env("CAMERA_FACING_MODE", "environment")
CAMERA_MIRROR_PREVIEW = as_bool(from_secrets_or_env("CAMERA_MIRROR_PREVIEW"), default=False)


# --- Credentials -----------------------------------------------------------

SETTINGS_PATH  = resolve_path(from_secrets_or_env("SETTINGS_PATH", "~/.plant_identifier/settings.json"))
CREDENTIAL_KEY = "plant_id_api_key"

# Optional seed for the credential store
OPENAI_API_KEY = from_secrets_or_env("OPENAI_API_KEY")


# --- Relay server ----------------------------------------------------------

GPTMODEL   = from_secrets_or_env("GPTMODEL", "gpt-4o-mini")
RELAY_HOST = from_secrets_or_env("RELAY_HOST", "127.0.0.1")
RELAY_PORT = as_int(from_secrets_or_env("RELAY_PORT"), 5050)
