#!/usr/bin/env python3
import re
import unicodedata

from .model import CaptionBlock

ARTWORK_URL = "https://www.artic.edu/artworks/{id}/{slug}"


def slugify(title: str) -> str:
    """URL slug for an artwork title.

    Not the exact algorithm the website uses, but matches it for simple titles.
    """
    text = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    text = re.sub(r"[~^]+", "", text)
    text = re.sub(r"[^a-zA-Z0-9]+", "-", text)
    return text.strip("-").lower()


def build_caption(artwork) -> CaptionBlock:
    """Tombstone for an artwork: "title, date", artist, URL."""
    return CaptionBlock(
        title_date=f"{artwork.title}, {artwork.date_display}",
        artist=artwork.artist_display,
        url=ARTWORK_URL.format(id=artwork.id, slug=slugify(artwork.title)),
    )
