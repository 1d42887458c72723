"""
Policy bounded context.
"""
