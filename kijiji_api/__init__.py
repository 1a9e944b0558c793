"""
Kijiji Vehicles read API.
"""
