"""
Shared helpers for MyRentCard.
"""
