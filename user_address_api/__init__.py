"""
HTTP service that records users and their postal addresses, deduplicated by
content hash.
"""
