"""
haproxyStats: convert HAProxy CSV statistics exports to JSON documents.
"""

__version__ = "0.1.0"
