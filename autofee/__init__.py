"""Condo utility-fee billing: unit registry, meter readings, cost allocation, statements."""

__version__ = "0.1.0"
