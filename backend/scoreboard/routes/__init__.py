"""
API Routes Package
==================
Read-only JSON endpoints over the built board.
"""

from .board_routes import board_bp

__all__ = ['board_bp']
