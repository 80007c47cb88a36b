"""Built-in sources seeded into an empty database."""

from typing import Any

DEVELOPER_COMMUNITY = "Developer Community"
AI_COMPANY_BLOGS = "AI Company Blogs"
TECH_BLOGS = "Tech Blogs"

# Every entry carries the same keys so they can be inserted in one statement
DEFAULT_SOURCES: list[dict[str, Any]] = [
    {
        "id": "hn",
        "name": "Hacker News",
        "kind": "link-aggregator",
        "category": DEVELOPER_COMMUNITY,
        "feed_url": None,
        "icon_url": "https://news.ycombinator.com/favicon.ico",
        "is_active": True,
    },
    {
        "id": "devto",
        "name": "DEV Community",
        "kind": "blog-api",
        "category": DEVELOPER_COMMUNITY,
        "feed_url": None,
        "icon_url": "https://dev.to/favicon.ico",
        "is_active": True,
    },
    {
        "id": "openai",
        "name": "OpenAI",
        "kind": "feed",
        "category": AI_COMPANY_BLOGS,
        "feed_url": "https://openai.com/news/rss.xml",
        "icon_url": "https://openai.com/favicon.ico",
        "is_active": True,
    },
    {
        "id": "google-ai",
        "name": "Google AI Blog",
        "kind": "feed",
        "category": AI_COMPANY_BLOGS,
        "feed_url": "https://blog.google/technology/ai/rss/",
        "icon_url": "https://blog.google/favicon.ico",
        "is_active": True,
    },
    {
        "id": "huggingface",
        "name": "Hugging Face",
        "kind": "feed",
        "category": AI_COMPANY_BLOGS,
        "feed_url": "https://huggingface.co/blog/feed.xml",
        "icon_url": "https://huggingface.co/favicon.ico",
        "is_active": True,
    },
    {
        "id": "github-blog",
        "name": "The GitHub Blog",
        "kind": "feed",
        "category": TECH_BLOGS,
        "feed_url": "https://github.blog/feed/",
        "icon_url": "https://github.blog/favicon.ico",
        "is_active": True,
    },
    {
        "id": "cloudflare",
        "name": "Cloudflare Blog",
        "kind": "feed",
        "category": TECH_BLOGS,
        "feed_url": "https://blog.cloudflare.com/rss/",
        "icon_url": "https://blog.cloudflare.com/favicon.ico",
        "is_active": True,
    },
]
