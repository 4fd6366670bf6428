"""
Neighborhood Nature

Plan walking and running routes around the plants and animals people have
recently observed nearby. Free-text requests such as "3 daisies; a maple"
are parsed into waypoint descriptions, resolved against a species-observation
API, and the chosen waypoints are stored as routes other users can discover.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
