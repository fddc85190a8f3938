"""Process-wide connection state.

The engine owns a single :class:`ConnectionIndicator`; nothing else
writes to it.
"""
