"""Publishers that turn domain objects into socket events.

Each module builds payloads and emits them through ``realtime.socketio``.
Socket handlers live in ``realtime.socketio`` and ``chat.sockets``.
"""
