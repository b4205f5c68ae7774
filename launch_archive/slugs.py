"""URL slugs for launches: ``<slugified-name>--<id>``."""

from __future__ import annotations

from launch_archive.models import Launch
from launch_archive.normalize_ll2 import LAUNCH_ID_PREFIX
from launch_archive.utils import slugify

SLUG_SEPARATOR = "--"


def build_launch_slug(launch: Launch) -> str:
    # slugify collapses "--", so the first separator always ends the name part
    return f"{slugify(launch.name) or 'launch'}{SLUG_SEPARATOR}{launch.id}"


def extract_launch_id(slug_or_id: str) -> str:
    """Recover the launch id from a slug, a bare id or a legacy ``name-id`` slug.

    Supplemental ids contain hyphens themselves, so the namespace token is
    checked before falling back to the last hyphen segment.
    """
    value = slug_or_id.strip()
    if SLUG_SEPARATOR in value:
        return value.split(SLUG_SEPARATOR, 1)[1]

    token_at = value.find(LAUNCH_ID_PREFIX)
    if token_at != -1:
        return value[token_at:]

    if "-" in value:
        return value.rsplit("-", 1)[1]
    return value
