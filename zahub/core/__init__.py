"""
Core infrastructure: database, errors, security and logging.
"""
