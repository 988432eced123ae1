"""
Outbound communication providers.
"""
