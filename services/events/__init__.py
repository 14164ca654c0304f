"""
Events Service for the academic platform.

Records per-user calendar events and advisor/student meetings.
"""
