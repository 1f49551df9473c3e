"""
Storage object paths.

Forward: display name -> ``<prefix>/<sanitized>.webp``.
Reverse: public URL -> bucket-relative object path.

Sanitizing is lossy on purpose: "A/B" and "A-B" both become "a_b", so the
second upload overwrites the first object. Characters outside the BMP count
as two UTF-16 code units, so "😀" becomes "__", matching the object names
already stored in the bucket.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from urllib.parse import urlparse

from gsl_cms.core.config import DEFAULT_CATEGORY_FOLDERS
from gsl_cms.core.exceptions import InvalidUrlError

OBJECT_EXTENSION = ".webp"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9]")

# Last code point representable as a single UTF-16 unit
_BMP_MAX = 0xFFFF


def _placeholder(match: re.Match[str]) -> str:
    return "__" if ord(match.group()) > _BMP_MAX else "_"


def sanitize_filename(name: str) -> str:
    """Replace every non-alphanumeric UTF-16 unit with ``_`` and lower-case."""
    return _UNSAFE_CHARS.sub(_placeholder, name).lower()


def build_object_path(prefix: str, name: str) -> str:
    return f"{prefix}/{sanitize_filename(name)}{OBJECT_EXTENSION}"


def resolve_object_path(url: str, bucket: str) -> str:
    """Map a public object URL back to its path inside ``bucket``.

    ``https://x.supabase.co/storage/v1/object/public/gsl/clients/acme.webp``
    resolves to ``clients/acme.webp`` for bucket ``gsl``.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise InvalidUrlError(error=f"not an absolute URL: {url!r}")

    parts = parsed.path.split("/")
    try:
        bucket_index = parts.index(bucket)
    except ValueError:
        raise InvalidUrlError(error=f"bucket {bucket!r} not found in {url!r}") from None

    object_path = "/".join(parts[bucket_index + 1 :])
    if not object_path:
        raise InvalidUrlError(error=f"no object path after bucket in {url!r}")
    return object_path


@dataclass(frozen=True)
class CategoryFolders:
    """Fixed service-category -> storage-folder table with an explicit fallback."""

    folders: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_CATEGORY_FOLDERS))
    )
    default: str = "others"

    def __post_init__(self) -> None:
        # Freeze caller-supplied dicts too
        object.__setattr__(self, "folders", MappingProxyType(dict(self.folders)))

    def folder_for(self, category: str) -> str:
        return self.folders.get(category, self.default)
