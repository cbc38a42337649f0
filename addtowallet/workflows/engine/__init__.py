"""
Minimal workflow engine used to load and run node packages.
"""
