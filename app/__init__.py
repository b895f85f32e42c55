"""
Restaurant Marketplace Backend

Customers browse restaurants and place orders, sellers run a restaurant
and its menu, admins approve sellers and watch the platform.
"""

__version__ = "1.0.0"
