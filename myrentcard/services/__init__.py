"""
Business services for MyRentCard.
"""
