from .filename import content_disposition, sanitize_filename, sanitize_filename_for_header

__all__ = ["content_disposition", "sanitize_filename", "sanitize_filename_for_header"]
