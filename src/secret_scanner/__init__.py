"""
secret-scanner: find values from local .env files leaking into a source tree.
"""

__version__ = "0.1.0"
