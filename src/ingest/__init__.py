"""Feed ingestion pipeline.

This module reads plain or gzip feed streams line by line and drives
decoding, filtering, dedup, transformation, and publishing.
"""
