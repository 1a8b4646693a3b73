# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Provides peerguard version information.
"""

from incremental import Version

version = Version("peerguard", 1, 0, 0)
__version__ = version.short()

__all__ = ["version", "__version__"]
