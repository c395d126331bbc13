"""
WebSocket Package

Contains the Flask-SocketIO event handlers.
"""

from .handlers import make_room_emitter, register_websocket_handlers

__all__ = ['make_room_emitter', 'register_websocket_handlers']
