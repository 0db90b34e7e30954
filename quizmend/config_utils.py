# config_utils.py - YAML Configuration System for quizmend
"""
quizmend configuration utilities with YAML file support.

Configuration Resolution Order (highest to lowest priority):
1. Explicit overrides (CLI options)
2. Environment variables (COURSE_ID, CANVAS_API_URL, QUIZMEND_DRY_RUN, etc.)
3. quizmend.yaml in the working directory
4. ~/.quizmend/config.yaml (global defaults)

Canvas credentials not set by any of the above are read from the
credentials file (CANVAS_CREDENTIAL_FILE or ~/.canvas/credentials.txt).

Usage:
    from quizmend.config_utils import get_config, get_course_id

    config = get_config()
    print(config.course_id)
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml

from quizmend.errors import ConfigurationError, missing_course_id_error

log = logging.getLogger(__name__)

CONFIG_FILENAME = "quizmend.yaml"
GLOBAL_CONFIG_PATH = Path.home() / ".quizmend" / "config.yaml"
DEFAULT_CREDENTIAL_FILE = Path.home() / ".canvas" / "credentials.txt"

# D2L export file name prefixes
QUIZ_EXPORT_PREFIX = "quiz_d2l"
QUESTION_BANK_PREFIX = "questiondb"

TRUTHY = {"1", "true", "yes", "on"}


# ============================================================================
# Credential helpers
# ============================================================================

def normalize_api_url(url: str) -> str:
    """Canvas base URL without trailing slashes, so endpoint paths join cleanly."""
    return str(url).strip().rstrip("/")


def mask_sensitive(value: Optional[str], visible_chars: int = 4) -> str:
    """'abcd1234efgh' -> '********efgh'. Short or empty values are fully hidden."""
    if not value:
        return "<not set>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return "*" * (len(value) - visible_chars) + value[-visible_chars:]


def parse_course_id(course_id: Union[str, int, None]) -> int:
    """
    Course id as a positive int.

    Raises:
        ConfigurationError: If the id is missing or not a positive integer
    """
    if course_id is None or str(course_id).strip() == "":
        raise missing_course_id_error()
    try:
        value = int(str(course_id).strip())
    except ValueError:
        value = 0
    if value <= 0:
        raise ConfigurationError(
            message=f"Invalid course ID: {course_id!r}",
            suggestion="Canvas course IDs are positive integers (the number in the course URL).",
            context={"course_id": course_id},
        )
    return value


def warn_if_readable_by_others(path: Path):
    """Credentials files should be private to their owner (chmod 600)."""
    if os.name == "nt":
        return
    mode = path.stat().st_mode
    if mode & (stat.S_IRWXG | stat.S_IRWXO):
        log.warning("[config:warn] %s is readable by other users; run: chmod 600 %s", path, path)


def read_credentials_file(path: Path) -> Tuple[str, str]:
    """
    Read API_URL and API_KEY from a YAML credentials file.

        API_URL: https://canvas.yourinstitution.edu
        API_KEY: your_token_here

    Keys are matched case-insensitively.

    Raises:
        ConfigurationError: If the file is unreadable, not a mapping or
            missing either value
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(
            message=f"Cannot read credentials file: {path}",
            context={"credential_file": str(path)},
            cause=e,
        )

    if not isinstance(data, dict):
        raise ConfigurationError(
            message=f"Credentials file is not a YAML mapping: {path}",
            suggestion="Use 'API_URL: ...' and 'API_KEY: ...' lines.",
            context={"credential_file": str(path)},
        )

    values = {str(k).lower(): v for k, v in data.items()}
    api_url, api_key = values.get("api_url"), values.get("api_key")
    if not api_url or not api_key:
        raise ConfigurationError(
            message=f"Credentials file must set both API_URL and API_KEY: {path}",
            context={"credential_file": str(path)},
        )

    warn_if_readable_by_others(path)
    return normalize_api_url(api_url), str(api_key).strip()


@dataclass
class QuizmendConfig:
    """Complete quizmend configuration"""
    # Canvas connection
    course_id: Optional[str] = None
    api_url: Optional[str] = None
    api_key: Optional[str] = None
    credential_file: Optional[Path] = None

    # Run settings
    dry_run: bool = False
    quiz_prefix: str = QUIZ_EXPORT_PREFIX
    bank_prefix: str = QUESTION_BANK_PREFIX

    # Track where values came from (for debugging)
    _sources: Dict[str, str] = field(default_factory=dict)

    @property
    def prefixes(self) -> Tuple[str, str]:
        return (self.quiz_prefix, self.bank_prefix)

    def describe(self) -> Dict[str, Any]:
        """Config values safe to print (API key masked)"""
        return {
            "course_id": self.course_id,
            "api_url": self.api_url,
            "api_key": mask_sensitive(self.api_key),
            "dry_run": self.dry_run,
            "prefixes": list(self.prefixes),
            "sources": dict(self._sources),
        }


class ConfigLoader:
    """Load configuration from multiple sources"""

    def __init__(self, work_dir: Optional[Path] = None, global_config: Optional[Path] = None):
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()
        self.global_config = global_config or GLOBAL_CONFIG_PATH
        self.config = QuizmendConfig()

    def load(self, **overrides: Any) -> QuizmendConfig:
        """Load configuration from all sources in priority order"""
        # Lowest priority first, higher overwrites
        if self.global_config.exists():
            self._load_yaml_file(self.global_config, "global")

        yaml_path = self.work_dir / CONFIG_FILENAME
        if yaml_path.exists():
            self._load_yaml_file(yaml_path, CONFIG_FILENAME)

        self._load_env_vars()
        self._apply_overrides(overrides)
        self._resolve_credentials()

        return self.config

    def _set(self, attr: str, value: Any, source: str):
        if attr == "api_url" and value:
            value = normalize_api_url(value)
        setattr(self.config, attr, value)
        self.config._sources[attr] = source

    def _load_yaml_file(self, path: Path, source_name: str):
        """Load settings from a YAML file"""
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            log.warning("[config:warn] Failed to parse %s: %s", path, e)
            return

        if not isinstance(data, dict):
            log.warning("[config:warn] Ignoring %s: expected a mapping", path)
            return

        for key in ("course_id", "api_url", "api_key"):
            if data.get(key) is not None:
                self._set(key, str(data[key]), source_name)

        if data.get("credential_file"):
            self._set("credential_file", Path(data["credential_file"]).expanduser(), source_name)

        if "dry_run" in data:
            self._set("dry_run", bool(data["dry_run"]), source_name)

        # Nested prefix settings
        prefixes = data.get("prefixes")
        if isinstance(prefixes, dict):
            if prefixes.get("quiz"):
                self._set("quiz_prefix", str(prefixes["quiz"]), source_name)
            if prefixes.get("bank"):
                self._set("bank_prefix", str(prefixes["bank"]), source_name)

    def _load_env_vars(self):
        """Load from environment variables"""
        if os.environ.get("COURSE_ID"):
            self._set("course_id", os.environ["COURSE_ID"], "env:COURSE_ID")

        if os.environ.get("CANVAS_CREDENTIAL_FILE"):
            self._set("credential_file", Path(os.environ["CANVAS_CREDENTIAL_FILE"]),
                      "env:CANVAS_CREDENTIAL_FILE")

        if os.environ.get("CANVAS_API_URL"):
            self._set("api_url", os.environ["CANVAS_API_URL"], "env:CANVAS_API_URL")

        if os.environ.get("CANVAS_API_KEY"):
            self._set("api_key", os.environ["CANVAS_API_KEY"], "env:CANVAS_API_KEY")

        dry_run = os.environ.get("QUIZMEND_DRY_RUN")
        if dry_run is not None:
            self._set("dry_run", dry_run.lower() in TRUTHY, "env:QUIZMEND_DRY_RUN")

    def _apply_overrides(self, overrides: Dict[str, Any]):
        for attr, value in overrides.items():
            if value is None:
                continue
            if not hasattr(self.config, attr):
                raise ConfigurationError(
                    message=f"Unknown configuration option: {attr}",
                    context={"option": attr},
                )
            self._set(attr, value, "override")

    def _resolve_credentials(self):
        """Load API credentials from credential file if not set directly"""
        if self.config.api_url and self.config.api_key:
            return

        cred_file = Path(self.config.credential_file or DEFAULT_CREDENTIAL_FILE).expanduser()
        if not cred_file.is_file():
            return

        try:
            api_url, api_key = read_credentials_file(cred_file)
        except ConfigurationError as e:
            log.warning("[config:warn] Failed to load credentials from %s: %s", cred_file, e.message)
            return

        source = f"credentials:{cred_file.name}"
        if not self.config.api_url:
            self._set("api_url", api_url, source)
        if not self.config.api_key:
            self._set("api_key", api_key, source)


# ============================================================================
# Public API
# ============================================================================

def get_config(work_dir: Optional[Path] = None, **overrides: Any) -> QuizmendConfig:
    """
    Get complete quizmend configuration.

    Args:
        work_dir: Directory holding quizmend.yaml (defaults to cwd)
        **overrides: Values that win over every other source (None is ignored)
    """
    return ConfigLoader(work_dir).load(**overrides)


def get_course_id(config: Optional[QuizmendConfig] = None) -> str:
    """
    Get course ID from configuration.

    Raises:
        ConfigurationError: If course ID not found anywhere
    """
    config = config or get_config()
    if config.course_id:
        return config.course_id
    raise missing_course_id_error()


def make_canvas_api_obj(config: Optional[QuizmendConfig] = None):
    """
    Create a Canvas API object from configuration.

    Raises:
        ConfigurationError: If credentials not found
    """
    from canvasapi import Canvas  # Lazy import

    if config is None:
        config = get_config()

    if not config.api_url or not config.api_key:
        cred_path = config.credential_file or DEFAULT_CREDENTIAL_FILE
        raise ConfigurationError(
            message="Canvas API credentials not found",
            suggestion=(
                f"Create credentials file at: {cred_path}\n\n"
                "Contents:\n"
                "  API_URL: https://canvas.yourinstitution.edu\n"
                "  API_KEY: your_token_here\n\n"
                "Or export CANVAS_API_URL and CANVAS_API_KEY."
            ),
            context={"credential_file": str(cred_path)},
        )

    log.debug("[config] Canvas %s (key %s)", config.api_url, mask_sensitive(config.api_key))
    return Canvas(config.api_url, config.api_key)


def create_config_template(include_comments: bool = True) -> str:
    """Generate a quizmend.yaml template."""
    if include_comments:
        return f'''# quizmend configuration file

# Canvas course ID (required)
course_id: REPLACE_WITH_YOUR_COURSE_ID

# Canvas API credentials
# Option 1: Reference a credentials file (recommended)
credential_file: ~/.canvas/credentials.txt

# Option 2: Inline credentials (less secure)
# api_url: https://canvas.yourinstitution.edu
# api_key: your_api_token_here

# Report what would change without updating Canvas
dry_run: false

# D2L export file name prefixes
prefixes:
  quiz: {QUIZ_EXPORT_PREFIX}
  bank: {QUESTION_BANK_PREFIX}
'''
    return f'''course_id: REPLACE_WITH_YOUR_COURSE_ID
credential_file: ~/.canvas/credentials.txt
dry_run: false
prefixes:
  quiz: {QUIZ_EXPORT_PREFIX}
  bank: {QUESTION_BANK_PREFIX}
'''
