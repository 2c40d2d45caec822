"""Codec auto-discovery and registration.

Scans screen_checker/codecs/ for modules that define a `codec` object
of type Codec. Collects them into a dict keyed by name and by alias,
so ``jpg`` and ``jpeg`` resolve to the same codec.

Handles both normal Python (pkgutil.iter_modules) and frozen PyInstaller
binaries (where iter_modules returns nothing, falls back to the explicit
module list).
"""

import importlib
import pkgutil

from screen_checker.core.errors import UnsupportedFormat
from screen_checker.core.types import Codec

_registry: dict[str, Codec] = {}

# Known codec module names, fallback for frozen binaries
_CODEC_MODULES = [
    'jpeg',
    'png',
    'webp',
]


def discover() -> dict[str, Codec]:
    """Import all codec modules and return the registry."""
    if _registry:
        return _registry

    import screen_checker.codecs as pkg

    found_modules = [
        modname for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__) if not modname.startswith('_')
    ]

    if not found_modules:
        found_modules = _CODEC_MODULES

    for modname in found_modules:
        module = importlib.import_module(f'screen_checker.codecs.{modname}')
        codec = getattr(module, 'codec', None)
        if isinstance(codec, Codec):
            _registry[codec.name] = codec
            for alias in codec.aliases:
                _registry[alias] = codec

    return _registry


def get(name: str) -> Codec:
    """Get a codec by name or alias. Matching is case-sensitive."""
    reg = discover()
    if name not in reg:
        raise UnsupportedFormat(name, sorted(reg))
    return reg[name]


def all_codecs() -> dict[str, Codec]:
    """Return the registered codecs keyed by canonical name (aliases omitted)."""
    return {name: codec for name, codec in discover().items() if name == codec.name}
