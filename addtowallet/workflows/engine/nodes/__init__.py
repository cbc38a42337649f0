"""
Workflow Nodes Package

Nodes are loaded from the node_packages/ directory as self-contained packages.
Import the loader and registry from their modules: the engine context imports
`schema`, so nothing is imported eagerly here.
"""
