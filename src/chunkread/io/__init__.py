"""Remote-object layer for chunkread - byte-range access to local and HTTP sources."""

# Re-export these for import convenience
from .base import ObjectStream, RangeSeeker, RemoteObject, RangeNotSupportedError, UnknownSizeError
from .local import LocalObject, open_local_object
from .http_sync import HTTPObject, open_http_object


def open_object(source, **kwargs):
    """Factory function to create appropriate RemoteObject based on source type."""
    if hasattr(source, 'read'):  # BinaryIO
        return open_local_object(source)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return open_http_object(source_str, **kwargs)
    else:
        return open_local_object(source)
