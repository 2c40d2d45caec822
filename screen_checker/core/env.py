"""Environment configuration for screen-tester.

Load order (first wins):
  1. Existing OS environment variables, never overwritten.
  2. .env file at --env-file path (if explicitly provided).
  3. .env file walking up from cwd, stopping at .git (file or dir).

Recognized variables (all optional):
  SCREEN_TESTER_BASE_DIR           baseline directory
  SCREEN_TESTER_THRESHOLD          tolerated mismatch percentage
  SCREEN_TESTER_INCLUDE_AA         1/true/yes/on to compare anti-aliased pixels
  SCREEN_TESTER_IGNORE_COLORS      1/true/yes/on to compare brightness only
  SCREEN_TESTER_FORCE_EXT          png, jpeg, jpg or webp
  SCREEN_TESTER_COMPRESSION_LEVEL  quality (jpeg/webp) or zlib level (png)
"""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

ENV_PREFIX = 'SCREEN_TESTER_'

_TRUE = {'1', 'true', 'yes', 'on'}


def _find_dotenv(start: Path) -> Path | None:
    """Walk up from start, return first .env found, stop at .git boundary."""
    current = start.resolve()
    while True:
        candidate = current / '.env'
        if candidate.is_file():
            return candidate
        # .git can be a dir (normal clone) or a file (worktree)
        if (current / '.git').exists():
            return None
        if current.parent == current:
            return None
        current = current.parent


def _parse_dotenv(path: Path) -> dict[str, str]:
    """Parse KEY=value lines; quotes and a leading ``export`` are stripped."""
    result: dict[str, str] = {}
    for line in path.read_text(encoding='utf-8').splitlines():
        line = line.strip()
        if not line or line.startswith('#') or '=' not in line:
            continue
        if line.startswith('export '):
            line = line[len('export ') :]
        key, _, raw_value = line.partition('=')
        key = key.strip()
        if key:
            result[key] = raw_value.strip().strip('"').strip("'")
    return result


def load_env(env_file: str | None = None) -> Path | None:
    """Load .env into os.environ for keys not already set.

    Returns the path that was loaded, or None if no .env was found/used.
    """
    if env_file:
        path = Path(env_file)
        if not path.is_file():
            return None
    else:
        path = _find_dotenv(Path.cwd())
        if path is None:
            return None

    for key, value in _parse_dotenv(path).items():
        os.environ.setdefault(key, value)

    return path


def _number(environ: Mapping[str, str], key: str, kind: type) -> Any:
    raw = environ[key]
    try:
        return kind(raw)
    except ValueError:
        raise ValueError(f'{key}={raw!r} is not a valid {kind.__name__}') from None


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Factory keyword arguments taken from SCREEN_TESTER_* variables.

    Only variables that are set appear in the result, so callers can layer
    explicit arguments on top.
    """
    environ = os.environ if environ is None else environ
    settings: dict[str, Any] = {}
    output: dict[str, Any] = {}

    if f'{ENV_PREFIX}BASE_DIR' in environ:
        settings['base_dir'] = Path(environ[f'{ENV_PREFIX}BASE_DIR'])
    if f'{ENV_PREFIX}THRESHOLD' in environ:
        settings['threshold'] = _number(environ, f'{ENV_PREFIX}THRESHOLD', float)
    for flag in ('include_aa', 'ignore_colors'):
        key = f'{ENV_PREFIX}{flag.upper()}'
        if key in environ:
            settings[flag] = environ[key].strip().lower() in _TRUE
    if environ.get(f'{ENV_PREFIX}FORCE_EXT'):
        output['force_ext'] = environ[f'{ENV_PREFIX}FORCE_EXT']
    if environ.get(f'{ENV_PREFIX}COMPRESSION_LEVEL'):
        output['compression_level'] = _number(environ, f'{ENV_PREFIX}COMPRESSION_LEVEL', int)

    if output:
        settings['output_settings'] = output
    return settings
