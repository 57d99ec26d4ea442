"""
Board model, layout validation and arrangement utilities.
"""
