"""
EarthLord client
Auth flow coordinator for the EarthLord game client
"""

__version__ = "1.0.0"
