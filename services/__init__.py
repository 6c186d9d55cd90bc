"""
Application services layer.

Services sit between a transport and the lobby core, speaking Result values.
"""

from services import error_codes
from services.result import Result

__all__ = ["Result", "error_codes"]
