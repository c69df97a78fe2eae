"""Settings loading and JSON preprocessing utilities."""

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import yaml

from .paths import get_config_path, get_default_download_dir

DEFAULT_GALLERY_URL = "https://marketplace.visualstudio.com/_apis/public/gallery"
DEFAULT_REQUEST_TIMEOUT = 300
DEFAULT_INSTALL_TIMEOUT = 600


class ConfigError(Exception):
    """Raised when settings loading or parsing fails.

    Provides detailed error messages including line numbers,
    column positions, and caret indicators for syntax errors.
    """
    pass


@dataclass
class Settings:
    """Effective settings for one install request."""
    gallery_url: str = DEFAULT_GALLERY_URL
    download_dir: Path = field(default_factory=get_default_download_dir)
    code_command: str = "code"
    dependency_fields: list[str] = field(
        default_factory=lambda: ["extensionDependencies"]
    )
    keep_artifacts: bool = False
    verify_attempts: int = 3
    verify_interval: float = 1.0
    request_timeout: int = DEFAULT_REQUEST_TIMEOUT
    install_timeout: int = DEFAULT_INSTALL_TIMEOUT

    def __post_init__(self):
        if isinstance(self.download_dir, str):
            self.download_dir = Path(self.download_dir).expanduser()

        if not self.gallery_url or not isinstance(self.gallery_url, str):
            raise ValueError("gallery_url must be a non-empty string")
        if not self.gallery_url.startswith(("http://", "https://")):
            raise ValueError("gallery_url must be an http(s) URL")
        if not self.code_command or not isinstance(self.code_command, str):
            raise ValueError("code_command must be a non-empty string")
        if not self.dependency_fields:
            raise ValueError("dependency_fields must list at least one key")
        if self.verify_attempts < 0:
            raise ValueError("verify_attempts must be zero or positive")
        if self.verify_interval < 0:
            raise ValueError("verify_interval must be zero or positive")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.install_timeout <= 0:
            raise ValueError("install_timeout must be positive")

        self.gallery_url = self.gallery_url.rstrip("/")


_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "gallery_url": (str,),
    "download_dir": (str,),
    "code_command": (str,),
    "dependency_fields": (list,),
    "keep_artifacts": (bool,),
    "verify_attempts": (int,),
    "verify_interval": (int, float),
    "request_timeout": (int,),
    "install_timeout": (int,),
}


def validate_settings(data: dict) -> Settings:
    """Validate and convert a raw dict to Settings.

    Unknown keys are rejected so typos do not silently fall back to defaults.

    Args:
        data: Raw dict from json.loads() or yaml.safe_load()

    Returns:
        Settings with defaults filled in for missing keys

    Raises:
        ConfigError: If validation fails with clear field errors
    """
    if not isinstance(data, dict):
        raise ConfigError(f"Settings must be an object, got {type(data).__name__}")

    known = {f.name for f in fields(Settings)}
    for key in data:
        if key not in known:
            raise ConfigError(
                f"Unknown setting '{key}'. Known settings: {', '.join(sorted(known))}"
            )

    for key, value in data.items():
        expected = _FIELD_TYPES[key]
        # bool is an int subclass; numeric fields must not accept it
        if isinstance(value, bool) and bool not in expected:
            raise ConfigError(f"{key} must be a number, got bool")
        if not isinstance(value, expected):
            names = " or ".join(t.__name__ for t in expected)
            raise ConfigError(f"{key} must be {names}, got {type(value).__name__}")

    dependency_fields = data.get("dependency_fields")
    if dependency_fields is not None:
        for i, item in enumerate(dependency_fields):
            if not isinstance(item, str) or not item:
                raise ConfigError(f"dependency_fields[{i}] must be a non-empty string")

    try:
        return Settings(**data)
    except ValueError as e:
        raise ConfigError(str(e))


def settings_to_dict(settings: Settings) -> dict:
    """Return settings as a JSON-serialisable dict."""
    data = asdict(settings)
    data["download_dir"] = str(settings.download_dir)
    return data


def preprocess_jsonish(text: str) -> str:
    """
    Preprocess JSON-ish text into strict JSON.

    Handles:
    - // line comments (blanked out)
    - Trailing commas before ] or } (blanked out)
    - Escaped quotes inside strings

    Stripped characters become spaces so line/column positions in later
    error messages still point at the original text.
    """
    out = list(text)
    n = len(text)
    i = 0
    in_string = False

    while i < n:
        char = text[i]

        if in_string:
            if char == "\\":
                i += 2
                continue
            if char == '"':
                in_string = False
            i += 1
            continue

        if char == '"':
            in_string = True
            i += 1
        elif char == "/" and i + 1 < n and text[i + 1] == "/":
            while i < n and text[i] != "\n":
                out[i] = " "
                i += 1
        elif char == ",":
            if _closes_after(text, i + 1):
                out[i] = " "
            i += 1
        else:
            i += 1

    return "".join(out)


def _closes_after(text: str, start: int) -> bool:
    """Return True if only whitespace and comments separate start from ] or }."""
    n = len(text)
    j = start
    while j < n:
        if text[j] in " \t\r\n":
            j += 1
        elif text.startswith("//", j):
            while j < n and text[j] != "\n":
                j += 1
        else:
            return text[j] in "]}"
    return False


def _format_syntax_error(original_text: str, error: json.JSONDecodeError) -> str:
    """Format a JSON syntax error with line, caret, and context."""
    lines = original_text.split("\n")
    msg_parts = [
        f"Config syntax error at line {error.lineno}, col {error.colno}: {error.msg}"
    ]

    if 1 <= error.lineno <= len(lines):
        msg_parts.append(lines[error.lineno - 1])
        msg_parts.append(" " * (error.colno - 1) + "^")

    return "\n".join(msg_parts)


def _read_text(file_path: Path) -> str:
    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {file_path}")
    except PermissionError:
        raise ConfigError(f"Permission denied reading config file: {file_path}")
    except UnicodeDecodeError:
        raise ConfigError(f"Config file is not valid UTF-8: {file_path}")
    except OSError as e:
        raise ConfigError(f"Error reading config file {file_path}: {e}")


def load_config(path_or_text: Path | str) -> dict:
    """Load and parse a settings document.

    Accepts either a file path or raw text. JSON input can be 'JSON-ish':
    trailing commas and // line comments are tolerated. Paths ending in
    .yaml or .yml are parsed as YAML.

    Raises:
        ConfigError: If the file cannot be read or contains syntax errors.
        TypeError: If path_or_text is neither Path nor str.
    """
    if isinstance(path_or_text, Path):
        original_text = _read_text(path_or_text)
        if path_or_text.suffix in (".yaml", ".yml"):
            try:
                result = yaml.safe_load(original_text)
            except yaml.YAMLError as e:
                raise ConfigError(f"Config syntax error in {path_or_text}: {e}") from e
            if result is None:
                return {}
            if not isinstance(result, dict):
                raise ConfigError(
                    f"Config must be a mapping, got {type(result).__name__}"
                )
            return result
    elif isinstance(path_or_text, str):
        original_text = path_or_text
    else:
        raise TypeError(
            f"path_or_text must be Path or str, got {type(path_or_text).__name__}"
        )

    try:
        result = json.loads(preprocess_jsonish(original_text))
    except json.JSONDecodeError as e:
        raise ConfigError(_format_syntax_error(original_text, e)) from e

    if not isinstance(result, dict):
        raise ConfigError(f"Config must be a JSON object, got {type(result).__name__}")

    return result


def load_settings(path: Path | None = None) -> Settings:
    """Load settings from the user config file, falling back to defaults.

    A missing file is not an error: every setting has a default.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return Settings()
    return validate_settings(load_config(config_path))


def save_settings(settings: Settings, path: Path | None = None) -> Path:
    """Write settings as strict JSON and return the path written."""
    config_path = path or get_config_path(create=True)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        json.dump(settings_to_dict(settings), f, indent=2)
        f.write("\n")
    return config_path


__all__ = [
    "ConfigError",
    "Settings",
    "validate_settings",
    "settings_to_dict",
    "preprocess_jsonish",
    "load_config",
    "load_settings",
    "save_settings",
]
