"""Utilities and helper functions.

Consolidated utilities:
- video_player: mpv process management with a one-shot completion future
- exceptions: Error hierarchy shared by every layer
- logging: loguru configuration
"""
