#!/usr/bin/env python3
"""
Thin client for the Art Institute of Chicago public API.

Queries are JSON templates with VAR_* placeholders; one request per call,
bounded by a timeout, no retries.
"""

import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import requests

from .errors import ApiError, NoResults, QueryError

LOG = logging.getLogger(__name__)

API_URL = "https://api.artic.edu/api/v1/search"
IIIF_URL = "https://www.artic.edu/iiif/2/{image_id}/full/{width},/0/default.jpg"
TIMEOUT = 5  # seconds, per request

QUERIES_DIR = Path(__file__).parent / "queries"
QUERY_ID = QUERIES_DIR / "default-id.json"
QUERY_FULLTEXT = QUERIES_DIR / "default-fulltext.json"
QUERY_RANDOM = QUERIES_DIR / "default-random-public-domain-oil-painting.json"


@dataclass(frozen=True)
class Artwork:
    id: int
    title: str
    date_display: str
    artist_display: str
    image_id: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict) -> "Artwork":
        return cls(
            id=record["id"],
            title=record.get("title") or "Untitled",
            date_display=record.get("date_display") or "",
            artist_display=record.get("artist_display") or "",
            image_id=record.get("image_id"),
        )


# -----------------------------
# Query templates
# -----------------------------

def load_query(path) -> str:
    path = Path(path)
    if not path.is_file():
        raise QueryError(f"JSON file not found: {path.resolve()}")
    text = path.read_text(encoding="utf-8")
    try:
        json.loads(text)
    except json.JSONDecodeError as e:
        raise QueryError(f"File is not valid JSON: {path.resolve()}") from e
    return text


def _check_placeholder(template: str, value, placeholder: str, label: str, source: str):
    if value is not None and placeholder not in template:
        raise QueryError(
            f"{label} was passed, but JSON file is missing '{placeholder}' placeholder:\n"
            f"  {source}"
        )


def render_query(
    template: str,
    now: str,
    fulltext: Optional[str] = None,
    artwork_id: Optional[int] = None,
    limit: Optional[int] = None,
    source: str = "<query>",
) -> dict:
    """Substitute VAR_* placeholders and parse the result."""
    _check_placeholder(template, fulltext, "VAR_FULLTEXT", "Full-text query", source)
    _check_placeholder(template, artwork_id, "VAR_ID", "Identifier", source)
    _check_placeholder(template, limit, "VAR_LIMIT", "Limit", source)

    # json.dumps()[1:-1] escapes quotes/backslashes so the text stays valid inside a string
    text = template.replace("VAR_NOW", now)
    text = text.replace("VAR_FULLTEXT", json.dumps(fulltext or "")[1:-1])
    text = text.replace("VAR_ID", str(artwork_id) if artwork_id is not None else "")
    text = text.replace("VAR_LIMIT", str(limit if limit is not None else 1))

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise QueryError(f"Query is not valid JSON after substitution: {source}") from e


# -----------------------------
# HTTP
# -----------------------------

def search(query: dict, session=None, timeout: float = TIMEOUT) -> List[dict]:
    http = session or requests
    LOG.debug("POST %s", API_URL)
    try:
        response = http.post(
            API_URL,
            json=query,
            headers={"Content-Type": "application/json; charset=UTF-8"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        LOG.debug("Search request failed: %s", e)
        raise ApiError("Sorry, we are having trouble connecting to our API. Try again later!") from e

    if response.status_code != 200:
        LOG.debug("Search returned HTTP %s", response.status_code)
        raise ApiError("Sorry, we are having trouble connecting to our API. Try again later!")

    try:
        data = response.json().get("data") or []
    except ValueError as e:
        raise ApiError("Sorry, the API returned an unreadable response.") from e

    LOG.debug("Search returned %d record(s)", len(data))
    if not data:
        raise NoResults()
    return data


def pick_artwork(records: Sequence[dict], rng: Optional[random.Random] = None) -> Artwork:
    rng = rng or random.Random()
    index = rng.randrange(len(records))
    LOG.debug("Picked result %d of %d", index, len(records))
    return Artwork.from_record(records[index])


def image_url(image_id: str, width: int) -> str:
    return IIIF_URL.format(image_id=image_id, width=width)


def download_image(image_id: str, width: int, dest, session=None, timeout: float = TIMEOUT) -> Path:
    http = session or requests
    url = image_url(image_id, width)
    LOG.debug("GET %s", url)
    try:
        response = http.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise ApiError("Sorry, we are having trouble downloading the image. Try again later!") from e

    if response.status_code != 200:
        LOG.debug("Image download returned HTTP %s", response.status_code)
        raise ApiError("Sorry, we are having trouble downloading the image. Try again later!")

    dest = Path(dest)
    dest.write_bytes(response.content)
    LOG.debug("Saved %d bytes to %s", len(response.content), dest)
    return dest
