"""
AddToWallet node package for the Fuse workflow engine.

Creates digital wallet passes through the AddToWallet API.
"""

__version__ = "0.1.0"
