"""
Insurance claim intake.

Validating claim models, business rules and storage for vehicle, property and
travel claims.
"""

__version__ = "1.0.0"
