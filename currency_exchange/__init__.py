"""UDP currency exchange rate server and client"""

__version__ = "1.0.0"
