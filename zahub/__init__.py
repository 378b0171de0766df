"""
ZaHub 披萨点单后端
"""

__version__ = "1.0.0"
