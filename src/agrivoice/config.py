"""Configuration management for AgriVoice."""

import fcntl
import os
import sys
import tempfile
from contextlib import contextmanager
from pathlib import Path

import toml
from pydantic import BaseModel, Field, ValidationError

from agrivoice.dictionary.models import TermEntry

CONFIG_DIR = Path(os.environ.get("AGRIVOICE_HOME", Path.home() / ".agrivoice")).expanduser()
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOCK_DIR = CONFIG_DIR / "locks"


# =============================================================================
# File Locking
# =============================================================================

@contextmanager
def _file_lock(name: str, lock_dir: Path | None = None):
    """Context manager for file-based locking.

    Usage:
        with _file_lock("known-fields"):
            # ... critical section ...
    """
    # Validate lock name to prevent path traversal
    if not all(c.isalnum() or c in "_-" for c in name):
        raise ValueError(f"Invalid lock name: {name}")

    lock_dir = lock_dir or LOCK_DIR
    lock_dir.mkdir(parents=True, exist_ok=True)
    lock_file = lock_dir / f"{name}.lock"

    fd = os.open(str(lock_file), os.O_CREAT | os.O_WRONLY, 0o600)
    try:
        lock_fh = os.fdopen(fd, 'w', encoding='utf-8')
    except Exception:
        os.close(fd)
        raise

    try:
        fcntl.flock(lock_fh.fileno(), fcntl.LOCK_EX)
        yield lock_fh
    finally:
        try:
            fcntl.flock(lock_fh.fileno(), fcntl.LOCK_UN)
        finally:
            lock_fh.close()


class RecognitionConfig(BaseModel):
    """Settings handed to the speech-acquisition collaborator."""

    # False ends the session after the first final fragment
    continuous: bool = True
    interim_results: bool = True


class InferenceConfig(BaseModel):
    """Transcript normalization and field extraction settings."""

    # Must contain a {number} placeholder, e.g. "第{number}圃場"
    field_name_template: str = "Field {number}"
    # Appended after the built-in vocabulary, in order
    custom_terms: list[TermEntry] = Field(default_factory=list)


class LocationConfig(BaseModel):
    """Coordinate acquisition and proximity matching settings."""

    timeout_seconds: float = Field(default=10.0, gt=0.0)
    maximum_age_seconds: float = Field(default=300.0, ge=0.0)  # 5 minutes
    proximity_threshold_km: float = Field(default=0.1, gt=0.0)  # 100 m
    required_accuracy_meters: float = Field(default=50.0, gt=0.0)
    history_limit: int = Field(default=100, ge=1)


class AgriVoiceConfig(BaseModel):
    """Main configuration model."""

    recognition: RecognitionConfig = Field(default_factory=RecognitionConfig)
    inference: InferenceConfig = Field(default_factory=InferenceConfig)
    location: LocationConfig = Field(default_factory=LocationConfig)
    fields_file: Path = Field(default_factory=lambda: CONFIG_DIR / "fields.json")
    history_file: Path = Field(default_factory=lambda: CONFIG_DIR / "location_history.json")
    logs_dir: Path = Field(default_factory=lambda: CONFIG_DIR / "logs")


def ensure_config_dirs(config: AgriVoiceConfig) -> None:
    """Create config directories if they don't exist."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    config.fields_file.parent.mkdir(parents=True, exist_ok=True)
    config.history_file.parent.mkdir(parents=True, exist_ok=True)
    config.logs_dir.mkdir(parents=True, exist_ok=True)


def load_config(path: Path | None = None) -> AgriVoiceConfig:
    """Load configuration from file, or create defaults."""
    config_file = path or CONFIG_FILE
    if config_file.exists():
        try:
            data = toml.load(config_file)
            # Convert path strings back to Path objects
            for key in ["fields_file", "history_file", "logs_dir"]:
                if key in data and isinstance(data[key], str):
                    data[key] = Path(data[key]).expanduser()
                    if not data[key].is_absolute():
                        raise ValueError(f"Config path must be absolute: {key}={data[key]}")
            config = AgriVoiceConfig(**data)
        except (toml.TomlDecodeError, ValueError, TypeError) as e:
            # ValidationError subclasses ValueError; report it separately
            if isinstance(e, ValidationError):
                print(f"Warning: Config validation failed ({e}), using defaults", file=sys.stderr)
            else:
                print(f"Warning: Failed to load config ({e}), using defaults", file=sys.stderr)
            config = AgriVoiceConfig()
    else:
        config = AgriVoiceConfig()
        save_config(config, config_file)

    ensure_config_dirs(config)
    return config


def save_config(config: AgriVoiceConfig, path: Path | None = None) -> None:
    """Save configuration to file with atomic write."""
    config_file = path or CONFIG_FILE
    config_file.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(mode="json")

    # Write to temporary file first (atomic operation)
    temp_fd, temp_path = tempfile.mkstemp(
        dir=config_file.parent, prefix=".config_", suffix=".toml.tmp"
    )
    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            toml.dump(data, f)

        os.chmod(temp_path, 0o600)
        os.replace(temp_path, config_file)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise
