__title__ = 'commodore'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .commands import *
from .context import *
from .converters import *
from .events import *
from .faults import *
from .grammar import *
from .logs import *
from .parameters import *
from .patterns import *
from .pipeline import *
from .restrictions import *
from .syntax import *
from .utils import *

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
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info"
)

__all__ += commands.__all__  # type: ignore[attr-defined]
__all__ += context.__all__  # type: ignore[attr-defined]
__all__ += converters.__all__  # type: ignore[attr-defined]
__all__ += events.__all__  # type: ignore[attr-defined]
__all__ += faults.__all__  # type: ignore[attr-defined]
__all__ += grammar.__all__  # type: ignore[attr-defined]
__all__ += logs.__all__  # type: ignore[attr-defined]
__all__ += parameters.__all__  # type: ignore[attr-defined]
__all__ += patterns.__all__  # type: ignore[attr-defined]
__all__ += pipeline.__all__  # type: ignore[attr-defined]
__all__ += restrictions.__all__  # type: ignore[attr-defined]
__all__ += syntax.__all__  # type: ignore[attr-defined]
__all__ += utils.__all__  # type: ignore[attr-defined]
