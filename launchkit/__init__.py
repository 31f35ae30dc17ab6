"""
launchkit - launch readiness and runner discovery for Windows games on Linux.

Resolves available Wine/Proton/DXVK builds from a component catalog or from
Steam, and decides what a launcher frontend must do before a game can start.
"""

__version__ = "0.1.0"
