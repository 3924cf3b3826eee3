"""Frontends - ways to look at a flow outside the canvas.

Submodules:
    preview    rich tree rendering and console confirmation gate
"""
