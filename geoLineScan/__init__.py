from importlib.metadata import PackageNotFoundError, version

import geoLineScan.geoCore.constants as C

try:
    __version__ = version("geoLineScan")
except PackageNotFoundError:
    __version__ = C.SOFTWARE.VERSION
