# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Content catalog: projects and posts.

The terminal only reads the catalog. All queries return new lists and
never mutate the records.

Lookup precedence (projects and posts alike):
  exact numeric id (projects only) -> exact slug -> substring on
  title or slug, all case-insensitive.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from .config import load_catalog_data
from .errors import CatalogError

_DATE_FORMATS = ("%B %d, %Y", "%b %d, %Y", "%Y-%m-%d")


def parse_post_date(value: Any) -> date:
    """Parse a post date ("May 22, 2025" or ISO). Unknown -> date.min."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return date.min


@dataclass(frozen=True)
class Project:
    id: int
    slug: str
    title: str
    description: str = ""
    tags: tuple[str, ...] = ()
    languages: tuple[str, ...] = ()
    frameworks: tuple[str, ...] = ()
    github_url: str = ""
    live_url: str = ""
    type: str = ""

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Project:
        try:
            return cls(
                id=int(data["id"]),
                slug=str(data["slug"]),
                title=str(data["title"]),
                description=str(data.get("description") or ""),
                tags=tuple(str(t) for t in data.get("tags") or ()),
                languages=tuple(str(t) for t in data.get("languages") or ()),
                frameworks=tuple(
                    str(t) for t in data.get("frameworks") or ()
                ),
                github_url=str(data.get("github_url") or ""),
                live_url=str(data.get("live_url") or ""),
                type=str(data.get("type") or ""),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid project record {data!r}: {e}") from e


@dataclass(frozen=True)
class Post:
    slug: str
    title: str
    date: str
    excerpt: str = ""
    tags: tuple[str, ...] = ()
    external_links: dict[str, str] = field(default_factory=dict)

    @property
    def published(self) -> date:
        return parse_post_date(self.date)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Post:
        try:
            links = data.get("external_links") or {}
            return cls(
                slug=str(data["slug"]),
                title=str(data["title"]),
                date=str(data.get("date") or ""),
                excerpt=str(data.get("excerpt") or ""),
                tags=tuple(str(t) for t in data.get("tags") or ()),
                external_links={
                    str(k): str(v) for k, v in dict(links).items() if v
                },
            )
        except (KeyError, TypeError, ValueError) as e:
            raise CatalogError(f"Invalid post record {data!r}: {e}") from e


class Catalog:
    """Read-only lookup tables over projects and posts."""

    def __init__(
        self, projects: Iterable[Project] = (), posts: Iterable[Post] = ()
    ) -> None:
        self._projects: tuple[Project, ...] = tuple(projects)
        self._posts: tuple[Post, ...] = tuple(posts)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> Catalog:
        projects = [Project.from_mapping(p) for p in data.get("projects") or []]
        posts = [Post.from_mapping(p) for p in data.get("posts") or []]
        return cls(projects, posts)

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._projects

    @property
    def posts(self) -> tuple[Post, ...]:
        return self._posts

    # -----------------------
    # Projects
    # -----------------------

    def find_project(self, text: str) -> Project | None:
        query = (text or "").strip()
        if not query:
            return None

        try:
            wanted_id = int(query)
        except ValueError:
            wanted_id = None

        if wanted_id is not None:
            for project in self._projects:
                if project.id == wanted_id:
                    return project

        lowered = query.lower()
        for project in self._projects:
            if project.slug.lower() == lowered:
                return project

        for project in self._projects:
            if lowered in project.title.lower() or lowered in project.slug.lower():
                return project
        return None

    def find_project_by_slug(self, slug: str) -> Project | None:
        lowered = (slug or "").strip().lower()
        for project in self._projects:
            if project.slug.lower() == lowered:
                return project
        return None

    # -----------------------
    # Posts
    # -----------------------

    def find_post(self, text: str) -> Post | None:
        lowered = (text or "").strip().lower()
        if not lowered:
            return None

        post = self.find_post_by_slug(lowered)
        if post is not None:
            return post

        for post in self._posts:
            if lowered in post.title.lower() or lowered in post.slug.lower():
                return post
        return None

    def find_post_by_slug(self, slug: str) -> Post | None:
        lowered = (slug or "").strip().lower()
        for post in self._posts:
            if post.slug.lower() == lowered:
                return post
        return None

    def recent_posts(self, count: int) -> list[Post]:
        # sorted() is stable, so equal dates keep catalog order
        ordered = sorted(self._posts, key=lambda p: p.published, reverse=True)
        return ordered[: max(count, 0)]

    def posts_with_tag(self, tag: str) -> list[Post]:
        wanted = (tag or "").strip().lower()
        if not wanted:
            return []
        return [
            post for post in self._posts
            if any(t.lower() == wanted for t in post.tags)
        ]

    def tag_counts(self) -> list[tuple[str, int]]:
        """Distinct tags across posts with post counts.

        Tags are merged case-insensitively, keeping the first-seen
        casing. Ordered by count (descending), then name.
        """
        counts: dict[str, int] = {}
        display: dict[str, str] = {}
        for post in self._posts:
            for tag in dict.fromkeys(t.lower() for t in post.tags):
                counts[tag] = counts.get(tag, 0) + 1
            for t in post.tags:
                display.setdefault(t.lower(), t)

        ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        return [(display[key], n) for key, n in ordered]

    def related_posts(self, slug: str, count: int = 2) -> list[Post]:
        current = self.find_post_by_slug(slug)
        if current is None:
            return []

        wanted = {t.lower() for t in current.tags}
        scored: list[tuple[int, Post]] = []
        for post in self._posts:
            if post.slug == current.slug:
                continue
            shared = len(wanted & {t.lower() for t in post.tags})
            if shared:
                scored.append((shared, post))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [post for _, post in scored[: max(count, 0)]]


def load_catalog(cfg: Any = None) -> Catalog:
    """Load the packaged (or configured) catalog."""
    return Catalog.from_mapping(load_catalog_data(cfg))
