"""
Shipline - Release Pipeline Engine
==================================

Version: 0.3.0
"""

__version__ = "0.3.0"

__all__ = [
    "__version__",
]
