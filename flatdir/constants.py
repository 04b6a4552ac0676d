"""Constants shared across the namespace layer."""

PLACEHOLDER_NAME = "__placeholder__"
"""Name of the marker object that keeps an otherwise empty folder listable."""

LEGACY_PLACEHOLDER_NAME = "application.octet"
"""Placeholder name written by earlier versions of the explorer."""

PLACEHOLDER_CONTENT_TYPE = "application/octet-stream"
"""Reserved content type marking placeholder objects.

Objects of this type are never listed as files.
"""

FOLDER_MARKER_ATTRIBUTE = "isFolder"
FOLDER_MARKER_VALUE = "true"

FALLBACK_CONTENT_TYPE = "binary/octet-stream"
"""Content type used for uploads whose type is unknown or reserved."""

DEFAULT_MAX_CONCURRENCY = 8
