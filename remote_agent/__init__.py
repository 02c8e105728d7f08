"""
Remote Agent - Executes backend instructions as synthesized keyboard and mouse input.
"""

__version__ = "0.1.0"
