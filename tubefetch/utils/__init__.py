from .filename import sanitize_filename, unique_filename

__all__ = ["sanitize_filename", "unique_filename"]
