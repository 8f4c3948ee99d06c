"""Reference data, dedup state, and event sinks.

This module holds the station table, dedup stores, publishers, and
the wire format shared by them.
"""
