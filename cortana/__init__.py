__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'cortana'
__author__ = 'cortana contributors'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

__import__("logging").getLogger(__name__).addHandler(__import__("logging").NullHandler())

from .binding import *
from .commands import *
from .faults import *
from .fields import *
from .registry import *
from .resolution import *
from .unmarshalers import *
from .usage import *
from .values import *

VersionInfo = __import__("collections").namedtuple("VersionInfo", (
    "major",
    "minor",
    "micro",
    "releaselevel",
    "serial",
    "metadata"
))

# Placeholder, modified by dynamic-versioning.
version_info = VersionInfo(0, 0, 0, "final", 0, "")

__all__ = (
    "__path__",
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

# Load the exposed API of the binding engine
__all__ += binding.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commander
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
# Load the exposed API of the record fields
__all__ += fields.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registry
__all__ += registry.__all__  # type: ignore[attr-defined]
# Load the exposed API of the command resolution
__all__ += resolution.__all__  # type: ignore[attr-defined]
# Load the exposed API of the unmarshalers
__all__ += unmarshalers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the usage screen
__all__ += usage.__all__  # type: ignore[attr-defined]
# Load the exposed API of the value coercion
__all__ += values.__all__  # type: ignore[attr-defined]
