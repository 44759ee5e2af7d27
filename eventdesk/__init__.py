"""
EventDesk: terminal client for an institution's event management backend.
"""
