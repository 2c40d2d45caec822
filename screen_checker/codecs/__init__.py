"""Auto-discovery of codec modules.

Every .py file in this package that defines a `codec` object is
auto-registered by screen_checker.registry.discover().

The explicit imports below ensure PyInstaller includes these modules
in the frozen binary. Without them, pkgutil.iter_modules cannot find
the codec files at runtime.
"""

# PyInstaller hidden imports: keep this list in sync with codec modules
import screen_checker.codecs.jpeg as _jpeg  # noqa: F401
import screen_checker.codecs.png as _png  # noqa: F401
import screen_checker.codecs.webp as _webp  # noqa: F401
