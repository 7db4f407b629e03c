"""
dualrotate - MySQL dual-password rotation through kubectl/docker exec
"""

__version__ = "0.1.0"

from .core import PasswordRotator, RotatorError

__all__ = ["PasswordRotator", "RotatorError"]
