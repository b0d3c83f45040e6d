import html
import logging
from typing import Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

NEWS_API_URL = "https://newsapi.org/v2/top-headlines"
HEADLINE_COUNT = 6
HEADLINE_TIMEOUT = 8.0


def placeholder_headlines(count: int = HEADLINE_COUNT) -> List[Dict[str, str]]:
    return [
        {
            "title": f"News of the day #{idx + 1}",
            "url": "article.html",
            "image": f"https://picsum.photos/seed/rtlite-fb-{idx + 1}/800/600",
        }
        for idx in range(count)
    ]


def fetch_headlines(api_key: Optional[str], session=None, count: int = HEADLINE_COUNT) -> List[Dict[str, str]]:
    """Top headlines from the news API, or placeholders when it cannot be used."""
    if not api_key:
        return placeholder_headlines(count)

    http = session or requests
    try:
        res = http.get(
            NEWS_API_URL,
            params={"language": "en", "pageSize": count},
            headers={"X-Api-Key": api_key},
            timeout=HEADLINE_TIMEOUT,
        )
        res.raise_for_status()
        articles = res.json().get("articles")
    except (requests.RequestException, ValueError, AttributeError) as exc:
        logger.warning("Headline feed unavailable: %s", exc)
        return placeholder_headlines(count)

    items = [a for a in articles if a and a.get("title")] if isinstance(articles, list) else []
    if not items:
        return placeholder_headlines(count)

    return [
        {
            "title": html.escape(item["title"]),
            "url": item.get("url") or "article.html",
            "image": item.get("urlToImage") or f"https://picsum.photos/seed/rtlite-{idx + 1}/800/600",
        }
        for idx, item in enumerate(items)
    ]
