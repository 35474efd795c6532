"""Seed the article database with sample drafts and published posts."""
import argparse
import asyncio
import random
import re
import time

from article_api.database import async_session, init_models
from article_api.errors import ConflictError
from article_api.services import article_service
from article_api import store

TOPICS = ["python", "fastapi", "postgresql", "redis", "docker", "kubernetes",
          "react", "typescript", "aws", "devops", "testing", "performance",
          "security", "microservices", "graphql", "rest-api"]

_SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
_SLUG_SPACE_RE = re.compile(r"[\s_]+")
_SLUG_DASH_RE = re.compile(r"-+")


def slugify(text: str) -> str:
    text = _SLUG_STRIP_RE.sub("", text.lower().strip())
    text = _SLUG_SPACE_RE.sub("-", text)
    return _SLUG_DASH_RE.sub("-", text).strip("-")


async def seed(count: int, published_ratio: float) -> None:
    print(f"Seeding {count} articles (~{published_ratio:.0%} published)")
    start = time.perf_counter()

    await init_models(drop=True)

    conflicts = 0
    async with async_session() as session:
        for i in range(count):
            topic = random.choice(TOPICS)
            title = f"Article {i}: Getting started with {topic}"
            try:
                await article_service.create_article(session, {
                    "title": title,
                    "content": f"This is the full content of article {i} about {topic}. " * 20,
                    "excerpt": f"A short guide to {topic}." if random.random() > 0.3 else None,
                    "slug": slugify(title),
                    "published": random.random() < published_ratio,
                })
            except ConflictError as exc:
                conflicts += 1
                print(f"  skipped duplicate slug {exc.slug!r}")

        total = await store.count(session)
        published = await store.count(session, published=True)

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Articles:  {total}")
    print(f"  Published: {published}")
    print(f"  Drafts:    {total - published}")
    if conflicts:
        print(f"  Conflicts: {conflicts}")


def main():
    parser = argparse.ArgumentParser(description="Seed the article database")
    parser.add_argument("--count", type=int, default=100, help="Number of articles to create")
    parser.add_argument(
        "--published-ratio", type=float, default=0.8,
        help="Fraction of articles created as published (0-1)",
    )
    args = parser.parse_args()
    asyncio.run(seed(args.count, args.published_ratio))


if __name__ == "__main__":
    main()
