"""
Shared packages for the EarthLord client
"""
