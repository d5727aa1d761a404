"""
RideHail - Ride-hailing backend

Rider ("user") and driver ("captain") accounts with cookie-based
JWT sessions.
"""

__version__ = "0.1.0"
