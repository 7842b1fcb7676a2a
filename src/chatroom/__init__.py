"""Chatroom — chat backend with accounts, rooms, and messages.

Users register and log in with email/password, create rooms that others
join via invitation codes, and exchange messages inside those rooms.
"""

__version__ = "0.1.0"
