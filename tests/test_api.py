"""Tests for api module."""

import json
import random
from unittest.mock import Mock, patch

import pytest
import requests
from aic_art import api
from aic_art.errors import ApiError, NoResults, QueryError

# --- Fixtures ---


@pytest.fixture
def records():
    return [
        {"id": 1, "title": "One", "date_display": "1900", "artist_display": "A", "image_id": "i1"},
        {"id": 2, "title": "Two", "date_display": "1901", "artist_display": "B", "image_id": None},
        {"id": 3, "title": None, "date_display": None, "artist_display": None},
    ]


def response(status=200, payload=None, content=b""):
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload if payload is not None else {}
    resp.content = content
    return resp


# --- Tests ---


class TestBundledQueries:
    @pytest.mark.parametrize("path", [api.QUERY_ID, api.QUERY_FULLTEXT, api.QUERY_RANDOM])
    def test_templates_are_valid_json(self, path):
        """Test that every bundled query template parses as JSON."""
        assert json.loads(api.load_query(path))

    def test_id_query(self):
        """Test that the id template filters on the artwork id."""
        q = api.render_query(api.load_query(api.QUERY_ID), now="12:00:00", artwork_id=27992)
        assert q["query"]["bool"]["filter"][0]["term"]["id"] == "27992"

    def test_fulltext_query_escapes_quotes(self):
        """Test that quotes in the search string keep the query valid JSON."""
        q = api.render_query(
            api.load_query(api.QUERY_FULLTEXT), now="12:00:00", fulltext='say "cheese"', limit=5
        )
        assert q["q"] == 'say "cheese"'
        assert q["limit"] == "5"

    def test_random_query_seeded_with_time(self):
        """Test that the random template is seeded with the current time."""
        q = api.render_query(api.load_query(api.QUERY_RANDOM), now="08:15:42")
        assert q["query"]["function_score"]["random_score"]["seed"] == "08:15:42"
        # limit defaults to one result
        assert q["limit"] == "1"


class TestLoadQuery:
    def test_missing_file(self, tmp_path):
        """Test handling of a query file that does not exist."""
        with pytest.raises(QueryError, match="not found"):
            api.load_query(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        """Test handling of a query file that is not valid JSON."""
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(QueryError, match="not valid JSON"):
            api.load_query(path)


class TestRenderQuery:
    @pytest.mark.parametrize(
        "kwargs, placeholder",
        [
            ({"fulltext": "cats"}, "VAR_FULLTEXT"),
            ({"artwork_id": 5}, "VAR_ID"),
            ({"limit": 3}, "VAR_LIMIT"),
        ],
    )
    def test_missing_placeholder(self, kwargs, placeholder):
        """Test that an option without a matching placeholder is rejected."""
        with pytest.raises(QueryError, match=placeholder):
            api.render_query('{"q": "x"}', now="00:00:00", source="custom.json", **kwargs)

    def test_unused_options_need_no_placeholder(self):
        """Test that unset options need no placeholder."""
        assert api.render_query('{"q": "x"}', now="00:00:00") == {"q": "x"}


class TestSearch:
    def test_returns_records(self, records):
        """Test that search posts the query and returns the data records."""
        session = Mock()
        session.post.return_value = response(payload={"data": records})
        assert api.search({"q": "x"}, session=session) == records

        kwargs = session.post.call_args.kwargs
        assert kwargs["json"] == {"q": "x"}
        assert kwargs["timeout"] == api.TIMEOUT

    def test_http_error(self):
        """Test that a non-200 search response raises ApiError."""
        session = Mock()
        session.post.return_value = response(status=503)
        with pytest.raises(ApiError, match="trouble connecting"):
            api.search({}, session=session)

    def test_network_error(self):
        """Test that a connection failure raises ApiError."""
        session = Mock()
        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(ApiError):
            api.search({}, session=session)

    def test_no_results(self):
        """Test that an empty result set raises NoResults."""
        session = Mock()
        session.post.return_value = response(payload={"data": []})
        with pytest.raises(NoResults):
            api.search({}, session=session)

    def test_uses_requests_by_default(self, records):
        """Test that search falls back to requests.post without a session."""
        with patch("aic_art.api.requests.post", return_value=response(payload={"data": records})) as post:
            api.search({"q": "x"})
        assert post.call_args.args[0] == api.API_URL


class TestPickArtwork:
    def test_random_choice(self, records):
        """Test that one artwork is chosen from the records at random."""
        art = api.pick_artwork(records, rng=random.Random(0))
        assert art.id in {1, 2, 3}

    def test_defaults_for_missing_fields(self, records):
        """Test that missing record fields get readable defaults."""
        art = api.Artwork.from_record(records[2])
        assert art.title == "Untitled"
        assert art.date_display == ""
        assert art.image_id is None


class TestDownloadImage:
    def test_writes_file(self, tmp_path):
        """Test that the downloaded image bytes are written to disk."""
        session = Mock()
        session.get.return_value = response(content=b"\xff\xd8jpeg")
        dest = api.download_image("abc-123", 400, tmp_path / "img.jpg", session=session)

        assert dest.read_bytes() == b"\xff\xd8jpeg"
        assert session.get.call_args.args[0] == (
            "https://www.artic.edu/iiif/2/abc-123/full/400,/0/default.jpg"
        )

    def test_http_error(self, tmp_path):
        """Test that a non-200 image response raises ApiError."""
        session = Mock()
        session.get.return_value = response(status=404)
        with pytest.raises(ApiError, match="downloading the image"):
            api.download_image("abc", 843, tmp_path / "img.jpg", session=session)
        assert not (tmp_path / "img.jpg").exists()
