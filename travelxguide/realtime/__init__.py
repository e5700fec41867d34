"""Realtime infrastructure (Socket.IO server, presence tracking, publishers).

Chat, notifications and tour moderation share one socket server so the
frontend keeps a single connection.
"""
