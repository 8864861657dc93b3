"""
Tests for the source connectors.

Each connector is driven through httpx.MockTransport with a trimmed copy of
the real upstream payload; failure cases check that problems come back as a
failed ConnectorResult instead of an exception.
"""
import httpx
import pytest

from research_assistant.services.connectors import build_profile_connectors, build_topic_connectors
from research_assistant.services.connectors.base import (
    PROFILE_SNIPPET_LIMIT,
    SEARCH_SNIPPET_LIMIT,
    clean_text,
    hostname_matches,
    strip_html,
)
from research_assistant.services.connectors.facebook import FacebookConnector
from research_assistant.services.connectors.hackernews import HackerNewsConnector
from research_assistant.services.connectors.news import NewsApiConnector
from research_assistant.services.connectors.reader import ReaderConnector
from research_assistant.services.connectors.reddit import RedditConnector
from research_assistant.services.connectors.stackoverflow import StackOverflowConnector
from research_assistant.services.connectors.twitter import TwitterConnector
from research_assistant.services.connectors.wikipedia import WikipediaConnector
from research_assistant.services.connectors.youtube import YouTubeConnector

from tests.fixtures.factories import make_settings
from tests.fixtures.upstream_payloads import (
    FACEBOOK_PAGE,
    FACEBOOK_POSTS,
    HN_SEARCH,
    NEWS_SEARCH,
    REDDIT_SEARCH,
    STACKOVERFLOW_ANSWERS,
    STACKOVERFLOW_USER,
    TWITTER_TWEETS,
    TWITTER_USER,
    WIKIPEDIA_SEARCH,
    YOUTUBE_SEARCH,
    raise_connect_error,
)


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------

class TestTextHelpers:
    """Tests for clean_text, strip_html and hostname_matches."""

    def test_clean_text_collapses_whitespace_and_newlines(self):
        assert clean_text("  a\n\n b\t\tc \r\n") == "a b c"

    def test_clean_text_truncates(self):
        assert len(clean_text("x" * 2000)) == SEARCH_SNIPPET_LIMIT
        assert len(clean_text("x" * 2000, PROFILE_SNIPPET_LIMIT)) == PROFILE_SNIPPET_LIMIT

    def test_clean_text_handles_none(self):
        assert clean_text(None) == ""

    def test_strip_html_removes_tags_and_unescapes(self):
        assert strip_html('<span class="searchmatch">a</span> &amp; b') == "a & b"

    def test_hostname_matches_exact_and_subdomain_only(self):
        domains = ("stackoverflow.com",)
        assert hostname_matches("https://stackoverflow.com/users/1", domains)
        assert hostname_matches("https://www.StackOverflow.com/users/1", domains)
        assert not hostname_matches("https://notstackoverflow.com/users/1", domains)
        assert not hostname_matches("https://stackoverflow.com.evil.io/", domains)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    """Connectors needing an absent credential are never instantiated."""

    def test_default_topic_connectors(self):
        assert list(build_topic_connectors(make_settings())) == ["reddit", "hacker_news", "wikipedia"]

    def test_keyed_topic_connectors_enabled_with_keys(self):
        settings = make_settings(YOUTUBE_API_KEY="yt", NEWS_API_KEY="news")
        assert list(build_topic_connectors(settings)) == [
            "reddit", "hacker_news", "wikipedia", "youtube", "news",
        ]

    def test_profile_connectors_priority(self):
        assert [c.name for c in build_profile_connectors(make_settings())] == ["stackoverflow"]
        settings = make_settings(X_BEARER_TOKEN="t", FB_GRAPH_TOKEN="f")
        assert [c.name for c in build_profile_connectors(settings)] == [
            "stackoverflow", "twitter", "facebook",
        ]

    @pytest.mark.parametrize(
        "connector_cls", [YouTubeConnector, NewsApiConnector, TwitterConnector, FacebookConnector]
    )
    def test_keyed_connectors_refuse_to_build_without_key(self, connector_cls):
        with pytest.raises(ValueError):
            connector_cls(make_settings())


# ---------------------------------------------------------------------------
# Topic connectors
# ---------------------------------------------------------------------------

class TestRedditConnector:
    @pytest.mark.asyncio
    async def test_maps_posts(self, upstream, settings):
        upstream.routes["www.reddit.com/search.json"] = httpx.Response(200, json=REDDIT_SEARCH)

        async with upstream.client() as client:
            res = await RedditConnector(settings).fetch("carbon tax", client)

        assert res.ok
        first, second = res.records
        assert first.source == "Reddit"
        assert first.snippet == "Which one actually works better?"
        assert first.url == "https://reddit.com/r/climate/comments/abc/carbon_tax/"
        # link post: no selftext, no permalink
        assert second.snippet == "EU climate law passes"
        assert second.url == "https://example.org/eu-climate-law"

        params = upstream.calls[0].url.params
        assert params["q"] == "carbon tax"
        assert params["limit"] == "5"
        assert params["sort"] == "relevance"

    @pytest.mark.asyncio
    async def test_non_2xx_is_failed_result(self, upstream, settings):
        upstream.routes["www.reddit.com/"] = httpx.Response(429)

        async with upstream.client() as client:
            res = await RedditConnector(settings).fetch("q", client)

        assert res.status == "failed"
        assert res.reason == "HTTP 429"
        assert res.records == []


class TestHackerNewsConnector:
    @pytest.mark.asyncio
    async def test_maps_hits_with_item_url_fallback(self, upstream, settings):
        upstream.routes["hn.algolia.com/api/v1/search"] = httpx.Response(200, json=HN_SEARCH)

        async with upstream.client() as client:
            res = await HackerNewsConnector(settings).fetch("climate", client)

        first, second = res.records
        assert first.source == "Hacker News"
        assert first.snippet == "Show HN: Emissions tracker"
        assert first.url == "https://tracker.example.com"
        assert second.snippet == "<p>Curious what people think</p>"
        assert second.url == "https://news.ycombinator.com/item?id=102"
        assert upstream.calls[0].url.params["tags"] == "story"

    @pytest.mark.asyncio
    async def test_transport_error_is_failed_result(self, upstream, settings):
        upstream.routes["hn.algolia.com/"] = raise_connect_error

        async with upstream.client() as client:
            res = await HackerNewsConnector(settings).fetch("q", client)

        assert res.status == "failed"
        assert res.reason.startswith("transport error")


class TestWikipediaConnector:
    @pytest.mark.asyncio
    async def test_maps_results(self, upstream, settings):
        upstream.routes["en.wikipedia.org/w/api.php"] = httpx.Response(200, json=WIKIPEDIA_SEARCH)

        async with upstream.client() as client:
            res = await WikipediaConnector(settings).fetch("climate policy", client)

        (record,) = res.records
        assert record.title == "Climate change policy"
        assert record.snippet == "Policies on climate & energy"
        assert record.url == "https://en.wikipedia.org/wiki/Climate%20change%20policy"

    @pytest.mark.asyncio
    async def test_caps_results(self, upstream):
        payload = {"query": {"search": [{"title": f"T{i}", "snippet": ""} for i in range(10)]}}
        upstream.routes["en.wikipedia.org/"] = httpx.Response(200, json=payload)

        async with upstream.client() as client:
            res = await WikipediaConnector(make_settings(WIKIPEDIA_MAX_RESULTS=3)).fetch("q", client)

        assert [r.title for r in res.records] == ["T0", "T1", "T2"]

    @pytest.mark.asyncio
    async def test_malformed_body_is_failed_result(self, upstream, settings):
        upstream.routes["en.wikipedia.org/"] = httpx.Response(200, text="<html>not json</html>")

        async with upstream.client() as client:
            res = await WikipediaConnector(settings).fetch("q", client)

        assert res.status == "failed"
        assert res.reason == "malformed JSON body"

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_empty(self, upstream, settings):
        upstream.routes["en.wikipedia.org/"] = httpx.Response(200, json=["unexpected"])

        async with upstream.client() as client:
            res = await WikipediaConnector(settings).fetch("q", client)

        assert res.ok
        assert res.records == []


class TestYouTubeConnector:
    @pytest.mark.asyncio
    async def test_maps_videos_and_leaves_url_empty_without_id(self, upstream):
        upstream.routes["www.googleapis.com/youtube/v3/search"] = httpx.Response(200, json=YOUTUBE_SEARCH)

        async with upstream.client() as client:
            res = await YouTubeConnector(make_settings(YOUTUBE_API_KEY="yt-key")).fetch("climate", client)

        first, second = res.records
        assert first.url == "https://www.youtube.com/watch?v=vid123"
        assert first.snippet == "A short explainer."
        assert second.url is None
        assert not second.is_complete
        assert upstream.calls[0].url.params["key"] == "yt-key"


class TestNewsApiConnector:
    @pytest.mark.asyncio
    async def test_maps_articles_and_sends_key_header(self, upstream):
        upstream.routes["newsapi.org/v2/everything"] = httpx.Response(200, json=NEWS_SEARCH)

        async with upstream.client() as client:
            res = await NewsApiConnector(make_settings(NEWS_API_KEY="news-key")).fetch("summit", client)

        (record,) = res.records
        assert record.source == "News"
        assert record.snippet == "Delegates agreed on new targets [+1200 chars]"
        request = upstream.calls[0]
        assert request.headers["X-Api-Key"] == "news-key"
        assert request.url.params["sortBy"] == "publishedAt"
        assert request.url.params["language"] == "en"
        assert "apiKey" not in request.url.params


# ---------------------------------------------------------------------------
# Profile connectors
# ---------------------------------------------------------------------------

class TestStackOverflowConnector:
    @pytest.mark.asyncio
    async def test_builds_profile_record(self, upstream, settings):
        upstream.routes["api.stackexchange.com/2.3/users/22656/answers"] = httpx.Response(
            200, json=STACKOVERFLOW_ANSWERS
        )
        upstream.routes["api.stackexchange.com/2.3/users/22656"] = httpx.Response(
            200, json=STACKOVERFLOW_USER
        )
        url = "https://stackoverflow.com/users/22656/jon-skeet"

        async with upstream.client() as client:
            record = await StackOverflowConnector(settings).fetch_url(url, client)

        assert record.url == url
        assert "Display Name: Jon Skeet" in record.snippet
        assert "Reputation: 1400000" in record.snippet
        assert "Top Answer #2 (score: 4200)" in record.snippet
        assert "\n" not in record.snippet
        assert "key" not in upstream.calls[0].url.params

    @pytest.mark.asyncio
    async def test_key_is_sent_when_configured(self, upstream):
        upstream.routes["api.stackexchange.com/"] = httpx.Response(200, json=STACKOVERFLOW_USER)

        async with upstream.client() as client:
            await StackOverflowConnector(make_settings(STACKEXCHANGE_KEY="se-key")).fetch_url(
                "https://stackoverflow.com/users/1/x", client
            )

        assert all(c.url.params["key"] == "se-key" for c in upstream.calls)

    @pytest.mark.asyncio
    async def test_non_user_path_makes_no_call(self, upstream, settings):
        async with upstream.client() as client:
            record = await StackOverflowConnector(settings).fetch_url(
                "https://stackoverflow.com/questions/1/how", client
            )

        assert record is None
        assert upstream.calls == []

    @pytest.mark.asyncio
    async def test_answers_failure_keeps_profile(self, upstream, settings):
        upstream.routes["api.stackexchange.com/2.3/users/7/answers"] = httpx.Response(500)
        upstream.routes["api.stackexchange.com/2.3/users/7"] = httpx.Response(200, json=STACKOVERFLOW_USER)

        async with upstream.client() as client:
            record = await StackOverflowConnector(settings).fetch_url(
                "https://stackoverflow.com/users/7", client
            )

        assert record is not None
        assert record.snippet.endswith("Top Answers:")


class TestTwitterConnector:
    @pytest.mark.asyncio
    async def test_builds_profile_record(self, upstream):
        upstream.routes["api.twitter.com/2/users/by/username/nasa"] = httpx.Response(200, json=TWITTER_USER)
        upstream.routes["api.twitter.com/2/users/42/tweets"] = httpx.Response(200, json=TWITTER_TWEETS)

        async with upstream.client() as client:
            record = await TwitterConnector(make_settings(X_BEARER_TOKEN="tok")).fetch_url(
                "https://twitter.com/nasa/status/1", client
            )

        assert record.title == "Twitter Profile @nasa"
        assert "Name: @nasa (verified)" in record.snippet
        assert "- 2024-05-01 (77 likes): Launch day!" in record.snippet
        assert upstream.calls[0].headers["Authorization"] == "Bearer tok"

    @pytest.mark.parametrize("url", ["https://x.com/i/flow/login", "https://twitter.com/home", "https://x.com/"])
    def test_reserved_paths_are_not_usernames(self, url):
        assert TwitterConnector.username_from_url(url) is None

    @pytest.mark.asyncio
    async def test_unknown_user_yields_none(self, upstream):
        upstream.routes["api.twitter.com/"] = httpx.Response(200, json={"errors": [{"title": "Not Found"}]})

        async with upstream.client() as client:
            record = await TwitterConnector(make_settings(X_BEARER_TOKEN="tok")).fetch_url(
                "https://x.com/nobody", client
            )

        assert record is None


class TestFacebookConnector:
    @pytest.mark.asyncio
    async def test_builds_page_record(self, upstream):
        upstream.routes["graph.facebook.com/v19.0/examplepage/posts"] = httpx.Response(200, json=FACEBOOK_POSTS)
        upstream.routes["graph.facebook.com/v19.0/examplepage"] = httpx.Response(200, json=FACEBOOK_PAGE)

        async with upstream.client() as client:
            record = await FacebookConnector(make_settings(FB_GRAPH_TOKEN="fb")).fetch_url(
                "https://www.facebook.com/examplepage/", client
            )

        assert record.title == "Facebook Page Example Page"
        assert "Followers: 321" in record.snippet
        assert "- 2024-03-02: Hello world" in record.snippet
        assert upstream.calls[0].url.params["access_token"] == "fb"

    @pytest.mark.asyncio
    async def test_graph_error_yields_none(self, upstream):
        upstream.routes["graph.facebook.com/"] = httpx.Response(400, json={"error": {"code": 100}})

        async with upstream.client() as client:
            record = await FacebookConnector(make_settings(FB_GRAPH_TOKEN="fb")).fetch_url(
                "https://facebook.com/someone", client
            )

        assert record is None


class TestReaderConnector:
    @pytest.mark.asyncio
    async def test_caps_text_and_labels_with_host(self, upstream, settings):
        upstream.routes["r.jina.ai/"] = httpx.Response(200, text="word " * 1000)

        async with upstream.client() as client:
            record = await ReaderConnector(settings).fetch_url("https://blog.example.com/post", client)

        assert record.source == "blog.example.com"
        assert record.title == "Content from blog.example.com"
        assert len(record.snippet) == PROFILE_SNIPPET_LIMIT
        assert upstream.calls[0].headers["User-Agent"] == "Mozilla/5.0"

    @pytest.mark.asyncio
    async def test_non_2xx_yields_none(self, upstream, settings):
        upstream.routes["r.jina.ai/"] = httpx.Response(451)

        async with upstream.client() as client:
            assert await ReaderConnector(settings).fetch_url("https://example.com", client) is None

    @pytest.mark.asyncio
    async def test_query_and_fragment_stay_inside_reader_path(self, upstream, settings):
        upstream.routes["r.jina.ai/"] = httpx.Response(200, text="page text")

        async with upstream.client() as client:
            record = await ReaderConnector(settings).fetch_url(
                "https://blog.example.com/post?id=7&ref=x#top", client
            )

        (request,) = upstream.calls
        assert str(request.url) == "https://r.jina.ai/https://blog.example.com/post%3Fid%3D7%26ref%3Dx%23top"
        assert request.url.query == b""
        assert record.url == "https://blog.example.com/post?id=7&ref=x#top"
