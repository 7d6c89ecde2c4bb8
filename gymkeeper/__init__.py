"""
GymKeeper - multi-tenant gym membership backend
"""

__version__ = "1.0.0"
