"""
Equipment status synchronization service.

Keeps the operational status of each piece of equipment consistent with
the fault reports and repair records filed against it.
"""

__version__ = "1.0.0"
