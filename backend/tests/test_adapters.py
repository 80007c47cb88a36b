"""Tests for the provider adapters."""

import asyncio
from datetime import UTC, datetime, timedelta

import httpx

from techfeed.adapters import FetchedArticle, fetch_source
from techfeed.adapters.base import clean_summary, first_image_url, parse_datetime, strip_html
from techfeed.adapters.blog_api import fetch_blog_api
from techfeed.adapters.feed import fetch_feed
from techfeed.adapters.link_aggregator import fetch_link_aggregator
from techfeed.models import Source, SourceKind

HN = "https://hacker-news.firebaseio.com/v0"
DEVTO = "https://dev.to/api/articles"
FEED_URL = "https://blog.example.com/rss"

RSS = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0"
     xmlns:content="http://purl.org/rss/1.0/modules/content/"
     xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Example Blog</title>
    <link>https://blog.example.com</link>
    <description>Example</description>
    {items}
  </channel>
</rss>
"""

FULL_ITEM = """
<item>
  <title>Shipping faster with Python</title>
  <link>https://blog.example.com/posts/1</link>
  <description>&lt;p&gt;We &lt;b&gt;shipped&lt;/b&gt; it.&lt;/p&gt;</description>
  <content:encoded><![CDATA[<p>Body <img src="https://cdn.example.com/cover.png" alt="cover"/> text</p>]]></content:encoded>
  <dc:creator>Jane Doe</dc:creator>
  <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
</item>
"""

ENCLOSURE_ITEM = """
<item>
  <title>Podcast episode</title>
  <link>https://blog.example.com/posts/2</link>
  <enclosure url="https://cdn.example.com/episode.jpg" type="image/jpeg" length="0"/>
</item>
"""

NO_LINK_ITEM = """
<item>
  <title>Orphan entry</title>
  <description>No link here</description>
</item>
"""


def run_adapter(adapter, source, upstream):
    async def _run():
        async with upstream.client() as client:
            return await adapter(source, client)

    return asyncio.run(_run())


def make_source(source_id="blog", kind=SourceKind.FEED.value, **kwargs):
    values = {"name": source_id, "category": "Tech Blogs", "feed_url": FEED_URL}
    values.update(kwargs)
    return Source(id=source_id, kind=kind, **values)


def rss_response(*items: str) -> httpx.Response:
    body = RSS.format(items="".join(items))
    return httpx.Response(200, content=body.encode(), headers={"Content-Type": "application/rss+xml"})


class TestHelpers:
    def test_strip_html_removes_tags_and_collapses_whitespace(self) -> None:
        assert strip_html("<p>Hello   <b>world</b></p>\n") == "Hello world"

    def test_clean_summary_truncates(self) -> None:
        summary = clean_summary("x" * 400)
        assert summary is not None
        assert len(summary) == 300

    def test_clean_summary_empty_is_none(self) -> None:
        assert clean_summary("") is None
        assert clean_summary("<p> </p>") is None
        assert clean_summary(None) is None

    def test_first_image_url(self) -> None:
        html = '<div><img alt="x"><img src="https://a.example/1.png"></div>'
        assert first_image_url(html) == "https://a.example/1.png"
        assert first_image_url("<p>no images</p>") is None

    def test_parse_datetime_normalizes_to_utc(self) -> None:
        parsed = parse_datetime("2024-01-01T09:00:00+09:00")
        assert parsed == datetime(2024, 1, 1, tzinfo=UTC)
        assert parsed.utcoffset() == timedelta(0)

    def test_parse_datetime_invalid(self) -> None:
        assert parse_datetime("not a date") is None
        assert parse_datetime(None) is None


class TestFeedAdapter:
    def test_parses_entries(self, upstream) -> None:
        upstream.add(FEED_URL, rss_response(FULL_ITEM, ENCLOSURE_ITEM))
        articles = run_adapter(fetch_feed, make_source(), upstream)

        assert len(articles) == 2
        first = articles[0]
        assert first.title == "Shipping faster with Python"
        assert first.url == "https://blog.example.com/posts/1"
        assert first.summary == "We shipped it."
        assert first.image_url == "https://cdn.example.com/cover.png"
        assert first.author == "Jane Doe"
        assert first.category == "Tech Blogs"
        assert first.source_id == "blog"
        assert first.published_at == datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_enclosure_is_image_fallback(self, upstream) -> None:
        upstream.add(FEED_URL, rss_response(ENCLOSURE_ITEM))
        (article,) = run_adapter(fetch_feed, make_source(), upstream)
        assert article.image_url == "https://cdn.example.com/episode.jpg"

    def test_missing_date_defaults_to_now(self, upstream) -> None:
        upstream.add(FEED_URL, rss_response(ENCLOSURE_ITEM))
        (article,) = run_adapter(fetch_feed, make_source(), upstream)
        assert abs(datetime.now(UTC) - article.published_at) < timedelta(minutes=1)

    def test_missing_summary_is_none(self, upstream) -> None:
        upstream.add(FEED_URL, rss_response(ENCLOSURE_ITEM))
        (article,) = run_adapter(fetch_feed, make_source(), upstream)
        assert article.summary is None

    def test_entries_without_link_are_dropped(self, upstream) -> None:
        upstream.add(FEED_URL, rss_response(NO_LINK_ITEM, FULL_ITEM))
        articles = run_adapter(fetch_feed, make_source(), upstream)
        assert [a.url for a in articles] == ["https://blog.example.com/posts/1"]

    def test_caps_at_thirty_entries(self, upstream) -> None:
        items = [
            f"<item><title>Post {i}</title><link>https://blog.example.com/p/{i}</link></item>"
            for i in range(40)
        ]
        upstream.add(FEED_URL, rss_response(*items))
        articles = run_adapter(fetch_feed, make_source(), upstream)
        assert len(articles) == 30
        assert articles[0].url == "https://blog.example.com/p/0"

    def test_long_summary_is_truncated(self, upstream) -> None:
        item = (
            "<item><title>Long</title><link>https://blog.example.com/long</link>"
            f"<description>{'word ' * 200}</description></item>"
        )
        upstream.add(FEED_URL, rss_response(item))
        (article,) = run_adapter(fetch_feed, make_source(), upstream)
        assert len(article.summary) <= 300

    def test_timeout_yields_empty(self, upstream) -> None:
        upstream.add(FEED_URL, httpx.ReadTimeout("timed out"))
        assert run_adapter(fetch_feed, make_source(), upstream) == []

    def test_http_error_yields_empty(self, upstream) -> None:
        upstream.add(FEED_URL, httpx.Response(500))
        assert run_adapter(fetch_feed, make_source(), upstream) == []

    def test_source_without_feed_url_yields_empty(self, upstream) -> None:
        assert run_adapter(fetch_feed, make_source(feed_url=None), upstream) == []
        assert upstream.requests == []


class TestLinkAggregatorAdapter:
    def test_builds_articles_and_isolates_item_failures(self, upstream) -> None:
        upstream.add(f"{HN}/topstories.json", [1, 2, 3, 4])
        upstream.add(
            f"{HN}/item/1.json",
            {"id": 1, "title": "Show HN: a thing", "url": "https://thing.example.com",
             "score": 120, "descendants": 45, "by": "pg", "time": 1704110400},
        )
        upstream.add(f"{HN}/item/2.json", httpx.Response(500))
        upstream.add(f"{HN}/item/3.json", None)
        upstream.add(f"{HN}/item/4.json", {"id": 4, "title": "Ask HN: anything?", "by": "dang"})

        source = make_source("hn", SourceKind.LINK_AGGREGATOR.value, feed_url=None, category="Community")
        articles = run_adapter(fetch_link_aggregator, source, upstream)

        assert [a.title for a in articles] == ["Show HN: a thing", "Ask HN: anything?"]
        first, second = articles
        assert first.url == "https://thing.example.com"
        assert first.summary == "Score: 120 | Comments: 45"
        assert first.author == "pg"
        assert first.published_at == datetime(2024, 1, 1, 12, tzinfo=UTC)
        assert first.category == "Community"
        assert second.url == "https://news.ycombinator.com/item?id=4"
        assert second.summary == "Score: 0 | Comments: 0"

    def test_items_without_title_are_dropped(self, upstream) -> None:
        upstream.add(f"{HN}/topstories.json", [7])
        upstream.add(f"{HN}/item/7.json", {"id": 7, "title": "", "url": "https://x.example"})
        source = make_source("hn", SourceKind.LINK_AGGREGATOR.value)
        assert run_adapter(fetch_link_aggregator, source, upstream) == []

    def test_fetches_at_most_thirty_items(self, upstream) -> None:
        upstream.add(f"{HN}/topstories.json", list(range(1, 41)))
        for i in range(1, 41):
            upstream.add(f"{HN}/item/{i}.json", {"id": i, "title": f"Story {i}"})
        source = make_source("hn", SourceKind.LINK_AGGREGATOR.value)

        articles = run_adapter(fetch_link_aggregator, source, upstream)

        assert len(articles) == 30
        item_requests = [r for r in upstream.requests if "/item/" in r.url.path]
        assert len(item_requests) == 30

    def test_id_list_failure_yields_empty(self, upstream) -> None:
        upstream.add(f"{HN}/topstories.json", httpx.ConnectError("down"))
        source = make_source("hn", SourceKind.LINK_AGGREGATOR.value)
        assert run_adapter(fetch_link_aggregator, source, upstream) == []


class TestBlogApiAdapter:
    def test_maps_posts(self, upstream) -> None:
        upstream.add(
            DEVTO,
            [
                {
                    "title": "Understanding asyncio",
                    "url": "https://dev.to/jane/asyncio",
                    "description": "A tour of the event loop",
                    "cover_image": None,
                    "social_image": "https://dev.to/social/asyncio.png",
                    "tag_list": ["python", "async"],
                    "user": {"name": "Jane"},
                    "published_at": "2024-01-02T03:04:05Z",
                },
                {"title": "No url", "url": None},
                {
                    "title": "Untagged",
                    "url": "https://dev.to/bob/untagged",
                    "tag_list": [],
                    "user": {"name": "Bob"},
                },
            ],
        )
        source = make_source("devto", SourceKind.BLOG_API.value, feed_url=None, category="Community")
        articles = run_adapter(fetch_blog_api, source, upstream)

        assert [a.url for a in articles] == ["https://dev.to/jane/asyncio", "https://dev.to/bob/untagged"]
        first, second = articles
        assert first.summary == "A tour of the event loop"
        assert first.image_url == "https://dev.to/social/asyncio.png"
        assert first.category == "python"
        assert first.author == "Jane"
        assert first.published_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
        assert second.category == "Community"
        assert second.image_url is None

    def test_requests_top_thirty(self, upstream) -> None:
        upstream.add(DEVTO, [])
        source = make_source("devto", SourceKind.BLOG_API.value)
        run_adapter(fetch_blog_api, source, upstream)

        (request,) = upstream.requests
        assert request.url.params["per_page"] == "30"
        assert request.url.params["top"] == "1"

    def test_unexpected_payload_yields_empty(self, upstream) -> None:
        upstream.add(DEVTO, {"error": "rate limited"})
        source = make_source("devto", SourceKind.BLOG_API.value)
        assert run_adapter(fetch_blog_api, source, upstream) == []


class TestFetchSource:
    def test_dispatches_by_kind(self, upstream) -> None:
        upstream.add(DEVTO, [{"title": "Post", "url": "https://dev.to/p"}])
        source = make_source("devto", SourceKind.BLOG_API.value)
        articles = run_adapter(fetch_source, source, upstream)
        assert [a.url for a in articles] == ["https://dev.to/p"]

    def test_unknown_kind_yields_empty(self, upstream) -> None:
        source = make_source("weird", "carrier-pigeon")
        assert run_adapter(fetch_source, source, upstream) == []
        assert upstream.requests == []


class TestMalformedPayloads:
    def test_bad_link_aggregator_items_are_dropped_one_by_one(self, upstream) -> None:
        upstream.add(f"{HN}/topstories.json", [1, 2, 3, 4, 5])
        upstream.add(f"{HN}/item/1.json", {"id": 1, "title": "Valid story", "time": 1704110400})
        upstream.add(f"{HN}/item/2.json", {"id": 2, "title": 12345, "url": "https://x.example/2"})
        upstream.add(f"{HN}/item/3.json", {"id": 3, "title": "Far future", "time": 10**20})
        upstream.add(f"{HN}/item/4.json", {"id": 4, "title": "Odd url", "url": ["not", "a", "url"]})
        upstream.add(f"{HN}/item/5.json", ["not", "an", "object"])
        source = make_source("hn", SourceKind.LINK_AGGREGATOR.value)

        articles = run_adapter(fetch_link_aggregator, source, upstream)

        assert [a.title for a in articles] == ["Valid story", "Far future", "Odd url"]
        far_future = articles[1]
        assert abs(datetime.now(UTC) - far_future.published_at) < timedelta(minutes=1)
        assert articles[2].url == "https://news.ycombinator.com/item?id=4"

    def test_non_list_top_stories_yields_empty(self, upstream) -> None:
        upstream.add(f"{HN}/topstories.json", {"ids": [1]})
        source = make_source("hn", SourceKind.LINK_AGGREGATOR.value)
        assert run_adapter(fetch_link_aggregator, source, upstream) == []

    def test_wrong_typed_blog_fields_are_tolerated(self, upstream) -> None:
        upstream.add(
            DEVTO,
            [
                {
                    "title": ["not", "text"],
                    "url": "https://dev.to/a/odd",
                    "user": "someone",
                    "description": {"html": "<p>x</p>"},
                    "tag_list": [7],
                    "cover_image": 42,
                    "published_at": 1704067200,
                },
                {"title": "Numeric url", "url": 1234},
                {"title": "Fine", "url": "https://dev.to/a/fine", "user": {"name": "Ada"}},
            ],
        )
        source = make_source("devto", SourceKind.BLOG_API.value, category="Community")

        articles = run_adapter(fetch_blog_api, source, upstream)

        assert [a.url for a in articles] == ["https://dev.to/a/odd", "https://dev.to/a/fine"]
        odd, fine = articles
        assert odd.title == "Untitled"
        assert odd.author is None
        assert odd.summary is None
        assert odd.image_url is None
        assert odd.category == "Community"
        assert fine.author == "Ada"

    def test_inline_and_oversized_images_are_skipped(self, upstream) -> None:
        inline = "data:image/png;base64," + "A" * 3000
        item = (
            "<item><title>Inline image</title><link>https://blog.example.com/inline</link>"
            f'<description>&lt;img src="{inline}"/&gt;text</description>'
            '<enclosure url="https://cdn.example.com/real.jpg" type="image/jpeg" length="0"/>'
            "</item>"
        )
        upstream.add(FEED_URL, rss_response(item))

        (article,) = run_adapter(fetch_feed, make_source(), upstream)
        assert article.image_url == "https://cdn.example.com/real.jpg"

    def test_oversized_links_are_dropped(self, upstream) -> None:
        long_link = "https://blog.example.com/" + "a" * 2100
        items = (
            f"<item><title>Too long</title><link>{long_link}</link></item>",
            "<item><title>Fine</title><link>https://blog.example.com/fine</link></item>",
        )
        upstream.add(FEED_URL, rss_response(*items))

        articles = run_adapter(fetch_feed, make_source(), upstream)
        assert [a.title for a in articles] == ["Fine"]

    def test_to_model_cleans_unstorable_fields(self) -> None:
        article = FetchedArticle(
            title=12345,
            url="https://x.example/1",
            source_id="blog",
            published_at=datetime(2024, 1, 1, tzinfo=UTC),
            image_url="https://cdn.example.com/" + "i" * 2100,
            author=["someone"],
        )
        model = article.to_model()
        assert model.title == "Untitled"
        assert model.image_url is None
        assert model.author is None
