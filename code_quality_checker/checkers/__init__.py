"""
Detector families for the code quality checker.
"""

from .security_checker import SecurityChecker
from .performance_checker import PerformanceChecker
from .style_checker import StyleChecker
from .maintainability_checker import MaintainabilityChecker

__all__ = [
    'SecurityChecker',
    'PerformanceChecker',
    'StyleChecker',
    'MaintainabilityChecker',
]
