__path__ = __import__("pkgutil").extend_path(__path__, __name__)  # NOQA: F-821
__title__ = 'commandeer'
__author__ = 'Commandeer Developers'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

import logging

from .commands import *
from .dispatcher import *
from .faults import *
from .invokers import *
from .registry import *
from .settings import Settings
from .signatures import *

# No output unless the host configures logging.
logging.getLogger(__name__).addHandler(logging.NullHandler())

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
    "version_info",
    "Settings",
)

# Load the exposed API of the signatures
__all__ += signatures.__all__  # type: ignore[attr-defined]
# Load the exposed API of the commands
__all__ += commands.__all__  # type: ignore[attr-defined]
# Load the exposed API of the registry and the dispatcher
__all__ += registry.__all__  # type: ignore[attr-defined]
__all__ += dispatcher.__all__  # type: ignore[attr-defined]
# Load the exposed API of the invokers
__all__ += invokers.__all__  # type: ignore[attr-defined]
# Load the exposed API of the faults
__all__ += faults.__all__  # type: ignore[attr-defined]
