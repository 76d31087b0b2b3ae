import re
import unicodedata
from urllib.parse import quote

DEFAULT_NAME = "audio"
MAX_NAME_CHARS = 100
# ext4 and most filesystems cap a path component at 255 bytes
MAX_NAME_BYTES = 200

_UNSAFE_CHARS = re.compile(r'[/\\?%*:|"<>]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_NON_PRINTABLE_ASCII = re.compile(r"[^\x20-\x7e]")
_HEADER_UNSAFE = re.compile(r"[()/,'&+$#@!*{}\[\]=~`^\\;]")
_WHITESPACE = re.compile(r"\s+")

WINDOWS_RESERVED = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def _truncate(name: str, max_chars: int, max_bytes: int) -> str:
    name = name[:max_chars]
    while len(name.encode("utf-8")) > max_bytes:
        name = name[:-1]
    return name


def sanitize_filename(name: str, max_length: int = MAX_NAME_CHARS) -> str:
    """Sanitize a title for use as a file name on disk"""
    name = unicodedata.normalize("NFKC", name or "")
    name = _CONTROL_CHARS.sub("", name)
    name = _UNSAFE_CHARS.sub("-", name)
    name = _truncate(name, max_length, MAX_NAME_BYTES).strip().strip(".")

    if name.upper() in WINDOWS_RESERVED:
        name = f"_{name}"

    return name or DEFAULT_NAME


def sanitize_filename_for_header(name: str) -> str:
    """ASCII-only variant for the plain Content-Disposition filename"""
    name = sanitize_filename(name)
    name = _NON_PRINTABLE_ASCII.sub("", name)
    name = _HEADER_UNSAFE.sub("", name)
    name = _WHITESPACE.sub("_", name.strip())
    return name or DEFAULT_NAME


def content_disposition(title: str, ext: str) -> str:
    """Attachment header with an RFC 5987 filename* for non-ASCII titles"""
    ascii_name = f"{sanitize_filename_for_header(title)}.{ext}"
    utf8_name = quote(f"{sanitize_filename(title)}.{ext}", safe="")
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{utf8_name}"
