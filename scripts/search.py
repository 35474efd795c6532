"""Fetch articles from a running API and search them locally."""
import argparse
import asyncio

import httpx

from article_api.schemas import ArticleRead
from article_api.search import SearchState, render, search

BASE_URL = "http://localhost:8000"
PAGE_SIZE = 100


async def fetch_articles(
    client: httpx.AsyncClient, base_url: str, published_only: bool, max_pages: int
) -> list[ArticleRead]:
    path = "/api/v1/articles/published" if published_only else "/api/v1/articles"
    articles: list[ArticleRead] = []
    for page in range(max_pages):
        resp = await client.get(
            f"{base_url}{path}", params={"limit": PAGE_SIZE, "offset": page * PAGE_SIZE}
        )
        resp.raise_for_status()
        batch = [ArticleRead.model_validate(item) for item in resp.json()]
        articles.extend(batch)
        if len(batch) < PAGE_SIZE:
            break
    return articles


async def run(query: str, base_url: str, published_only: bool, max_pages: int) -> None:
    async with httpx.AsyncClient(timeout=10.0) as client:
        articles = await fetch_articles(client, base_url, published_only, max_pages)

    state = SearchState.of(articles, query)
    hits = search(state)
    if state.query.strip():
        suffix = "" if len(hits) == 1 else "s"
        print(f'{len(hits)} result{suffix} for "{state.query}" ({len(articles)} fetched)\n')

    for hit in hits:
        status = "published" if hit.article.published else "draft"
        print(f"#{hit.article.id} {render(hit.title)}  [{status}]")
        if hit.excerpt:
            print(f"    {render(hit.excerpt)}")
        print(f"    /{render(hit.slug)}")


def main():
    parser = argparse.ArgumentParser(description="Search articles by keyword")
    parser.add_argument("query", nargs="?", default="", help="Case-insensitive substring")
    parser.add_argument("--base-url", default=BASE_URL)
    parser.add_argument("--published", action="store_true", help="Only fetch published articles")
    parser.add_argument("--max-pages", type=int, default=10)
    args = parser.parse_args()
    asyncio.run(run(args.query, args.base_url, args.published, args.max_pages))


if __name__ == "__main__":
    main()
