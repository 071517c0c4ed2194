# Termfolio™ — Interactive Portfolio Terminal
# Copyright (c) 2025
# TriFactoria (Andrew Blankfield)
#
# Licensed under the Business Source License 1.1 (BSL 1.1).
# You may use, modify, and redistribute this file under the terms of the BSL.
# On the Change Date (2029-01-01), this file will be licensed under
# the Apache License, Version 2.0.

"""
Built-in command set.

Handlers take the argument list and return a string, a Panel, a
CommandResult (to pick the entry kind) or None when they wrote to the
transcript themselves. User-shaped problems (missing args, unknown ids,
unknown tags) are ordinary results, never exceptions.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from . import __version__
from .catalog import Catalog, Post, Project
from .dispatcher import CommandResult
from .errors import RegistryError
from .fragments import Action, Panel, panel
from .history import EntryKind, HistoryStore, RecallBuffer
from .interfaces import ConfigModel, Host, Scheduler
from .registry import CommandDefinition, CommandRegistry
from .utils import format_table, join_args, quoted_arg

DEFAULT_ROUTES: dict[str, str] = {
    "home": "/",
    "projects": "/projects",
    "blog": "/blog",
    "contact": "/contact",
    "about": "/about",
    "project": "/projects/{slug}",
    "post": "/blog/{slug}",
}

PAGE_TARGETS = ("projects", "blog", "contact", "about", "home")

SOCIAL_LABELS = {
    "github": "GitHub",
    "twitter": "Twitter",
    "linkedin": "LinkedIn",
}

OPEN_USAGE = (
    "Usage: open <projects|blog|contact|about|home> | "
    "open project <slug> | open post <slug>"
)


@dataclass
class CommandContext:
    """Everything a handler may read or side-effect."""

    history: HistoryStore
    catalog: Catalog
    config: ConfigModel
    host: Host
    scheduler: Scheduler
    recall: RecallBuffer
    request_followup: Callable[[str], None]
    clear_session: Callable[[], None]


def _ms(config: ConfigModel, key: str, default: int) -> float:
    value = config.get_path(f"timings.{key}", default)
    try:
        return max(float(value), 0.0) / 1000.0
    except (TypeError, ValueError):
        return default / 1000.0


def _limit(config: ConfigModel, key: str, default: int) -> int:
    value = config.get_path(f"limits.{key}", default)
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _real_url(url: str) -> bool:
    return bool(url) and url != "#"


class BuiltinCommands:
    def __init__(self, ctx: CommandContext) -> None:
        self.ctx = ctx
        self.registry: CommandRegistry | None = None

    # -----------------------
    # Helpers
    # -----------------------

    @property
    def profile(self) -> dict:
        return self.ctx.config.profile or {}

    def route(self, name: str, **params: str) -> str:
        routes = self.ctx.config.get_path("system.routes", {}) or {}
        template = routes.get(name) or DEFAULT_ROUTES[name]
        return template.format(**params)

    def navigate_later(self, message: str, path: str, delay: float) -> None:
        """Post an info entry now and navigate after delay."""
        self.ctx.history.append(EntryKind.INFO, message)
        host = self.ctx.host
        self.ctx.scheduler.after(delay, lambda: host.navigate(path))

    def summon_items(self) -> dict[str, str]:
        items = self.ctx.config.commands.get("summon", {}) or {}
        return {str(k).lower(): str(v) for k, v in items.items()}

    # -----------------------
    # Informational
    # -----------------------

    def help(self, args: list[str]) -> Panel:
        if self.registry is None:
            raise RegistryError("help is not bound to a command registry")
        visible = self.registry.visible()
        width = max((len(d.name) for d in visible), default=0)
        lines = [f"  {d.name.ljust(width)}  {d.description}" for d in visible]
        return panel("Available commands:", lines)

    def whoami(self, args: list[str]) -> Panel:
        p = self.profile
        title = f"{p.get('name', '')} ({p.get('handle', '')})"
        lines = [p.get("headline", ""), p.get("tagline", "")]
        return panel(
            title,
            [line for line in lines if line],
            Action("About me", "about"),
            Action("Projects", "projects"),
            Action("Contact", "contact"),
        )

    def about(self, args: list[str]) -> Panel:
        lines = list(self.profile.get("about") or [])
        return panel(
            "About",
            lines,
            Action("Skills", "skills"),
            Action("Open about page", "open about"),
        )

    def skills(self, args: list[str]) -> Panel:
        skills = self.profile.get("skills") or {}
        lines = [f"- {area}: {', '.join(items)}" for area, items in skills.items()]
        return panel("Technical skills:", lines)

    def contact(self, args: list[str]) -> Panel:
        p = self.profile
        links = p.get("links") or {}
        lines = [f"- Email: {p.get('email', '')}"]
        for key, label in SOCIAL_LABELS.items():
            if links.get(key):
                lines.append(f"- {label}: {links[key]}")
        return panel(
            "Get in touch:",
            lines,
            Action("Copy email", "copy-email"),
            Action("Open contact page", "open contact"),
        )

    def version(self, args: list[str]) -> str:
        name = self.ctx.config.get_path("system.name", "Termfolio")
        return f"{name} v{__version__}"

    # -----------------------
    # Catalog
    # -----------------------

    def projects(self, args: list[str]) -> Panel | str:
        limit = _limit(self.ctx.config, "projects", 5)
        shown = list(self.ctx.catalog.projects[:limit])
        if not shown:
            return "No projects yet."

        table = format_table(
            ["ID", "Title", "Type", "Tags"],
            [[p.id, p.title, p.type, ", ".join(p.tags)] for p in shown],
        )
        first = shown[0]
        return panel(
            "Recent projects:",
            table.splitlines(),
            Action(f"View {first.title}", f"project {first.id}"),
            Action("All projects", "open projects"),
        )

    def project(self, args: list[str]) -> Panel | str:
        if not args:
            return "Usage: project <id-or-name>"

        catalog = self.ctx.catalog
        found: Project | None = None
        try:
            wanted = int(args[0])
        except ValueError:
            wanted = None
        if wanted is not None:
            found = next((p for p in catalog.projects if p.id == wanted), None)
        if found is None:
            found = catalog.find_project(quoted_arg(args))

        if found is None:
            return (
                f"Project not found: {join_args(args)}. "
                "Type 'projects' to see the list."
            )
        return self._project_panel(found)

    def _project_panel(self, p: Project) -> Panel:
        lines = [p.description, ""]
        if p.type:
            lines.append(f"Type:       {p.type}")
        if p.tags:
            lines.append(f"Tags:       {', '.join(p.tags)}")
        if p.languages:
            lines.append(f"Languages:  {', '.join(p.languages)}")
        if p.frameworks:
            lines.append(f"Frameworks: {', '.join(p.frameworks)}")
        if _real_url(p.github_url):
            lines.append(f"GitHub:     {p.github_url}")
        if _real_url(p.live_url) and p.live_url != p.github_url:
            lines.append(f"Live:       {p.live_url}")
        return panel(
            f"{p.title} (#{p.id})",
            lines,
            Action("View full details", f"open project {p.slug}"),
            Action("All projects", "projects"),
        )

    def blog(self, args: list[str]) -> Panel | str:
        limit = _limit(self.ctx.config, "blog", 5)
        recent = self.ctx.catalog.recent_posts(limit)
        if not recent:
            return "No posts yet."

        lines: list[str] = []
        for i, post in enumerate(recent, 1):
            lines.append(f"{i}. {post.title}")
            lines.append(f"   {post.date} | {', '.join(post.tags)}")
            for mirror, url in sorted(post.external_links.items()):
                lines.append(f"   {_mirror_label(mirror)}: {url}")
        return panel(
            "Recent posts:",
            lines,
            Action(f"Read '{recent[0].title}'", f"post {recent[0].slug}"),
            Action("Open blog", "open blog"),
        )

    def post(self, args: list[str]) -> Panel | str:
        query = quoted_arg(args)
        if not query:
            return 'Usage: post <slug or "title">'

        found = self.ctx.catalog.find_post(query)
        if found is None:
            return f"Post not found: {query}. Type 'blog' to see recent posts."
        return self._post_panel(found)

    def _post_panel(self, post: Post) -> Panel:
        lines = [post.date, "", post.excerpt, ""]
        if post.tags:
            lines.append(f"Tags: {', '.join(post.tags)}")
        for mirror, url in sorted(post.external_links.items()):
            lines.append(f"{_mirror_label(mirror)}: {url}")

        actions: list[Action] = []
        if post.tags:
            first = post.tags[0]
            actions.append(Action(f"More on {first}", f'tag "{first}"'))
        actions.append(Action("Open post page", f"open post {post.slug}"))
        related = self.ctx.catalog.related_posts(
            post.slug, _limit(self.ctx.config, "related_posts", 2)
        )
        for other in related:
            actions.append(Action(f"Related: {other.title}", f"post {other.slug}"))
        return panel(post.title, lines, *actions)

    def tags(self, args: list[str]) -> Panel | str:
        counts = self.ctx.catalog.tag_counts()
        if not counts:
            return "No tags yet."
        table = format_table(["Tag", "Posts"], [[t, n] for t, n in counts])
        return panel("Tags:", table.splitlines())

    def tag(self, args: list[str]) -> Panel | str:
        wanted = quoted_arg(args)
        if not wanted:
            return 'Usage: tag <"name">'

        posts = self.ctx.catalog.posts_with_tag(wanted)
        if not posts:
            return f'No posts tagged "{wanted}". Type \'tags\' to see all tags.'

        lines = [f"- {p.title} ({p.date})" for p in posts]
        actions = [Action(f"Read '{p.title}'", f"post {p.slug}") for p in posts[:9]]
        return panel(f'Posts tagged "{wanted}":', lines, *actions)

    # -----------------------
    # Session + effects
    # -----------------------

    def clear(self, args: list[str]) -> None:
        self.ctx.clear_session()
        return None

    def exit(self, args: list[str]) -> None:
        self.navigate_later(
            "Redirecting to homepage...",
            self.route("home"),
            _ms(self.ctx.config, "exit_redirect_ms", 1000),
        )
        return None

    def open(self, args: list[str]) -> CommandResult | str | None:
        if not args:
            return CommandResult(OPEN_USAGE, EntryKind.ERROR)

        target = args[0].lower()
        delay = _ms(self.ctx.config, "open_redirect_ms", 800)

        if target in PAGE_TARGETS:
            self.navigate_later(
                f"Opening {target} page...", self.route(target), delay
            )
            return None

        if target in ("project", "post"):
            if len(args) < 2:
                return CommandResult(
                    f"Usage: open {target} <slug>", EntryKind.ERROR
                )
            slug = args[1]
            catalog = self.ctx.catalog
            record: Project | Post | None
            if target == "project":
                record = catalog.find_project_by_slug(slug)
            else:
                record = catalog.find_post_by_slug(slug)
            if record is None:
                return f"{target.capitalize()} not found: {slug}"

            self.navigate_later(
                f"Opening {record.title}...",
                self.route(target, slug=record.slug),
                delay,
            )
            return None

        return CommandResult(
            f"Unknown target: {args[0]}. {OPEN_USAGE}", EntryKind.ERROR
        )

    def summon(self, args: list[str]) -> CommandResult | str:
        items = self.summon_items()
        item = quoted_arg(args).lower()
        valid = ", ".join(items)
        if item in items:
            return items[item]
        if not item:
            return CommandResult(
                f"Usage: summon <item>. Valid items: {valid}", EntryKind.ERROR
            )
        return CommandResult(
            f"Unknown item: {item}. Valid items: {valid}", EntryKind.ERROR
        )

    def echo(self, args: list[str]) -> str:
        return join_args(args)

    def social(self, network: str) -> Callable[[list[str]], str]:
        label = SOCIAL_LABELS[network]

        def _open(args: list[str]) -> str:
            url = (self.profile.get("links") or {}).get(network)
            if not url:
                return f"No {label} profile configured."
            self.ctx.host.open_external(url)
            return f"Opening {label} profile: {url}"

        return _open

    def copy_email(self, args: list[str]) -> CommandResult:
        email = self.profile.get("email", "")
        if email and self.ctx.host.copy_to_clipboard(email):
            return CommandResult(f"Copied {email} to clipboard.", EntryKind.SUCCESS)
        return CommandResult(
            f"Could not access the clipboard. Email: {email}", EntryKind.WARNING
        )

    def history(self, args: list[str]) -> str:
        lines = self.ctx.recall.chronological()
        if not lines:
            return "No commands yet."
        width = len(str(len(lines)))
        return "\n".join(
            f"{str(i).rjust(width)}  {line}" for i, line in enumerate(lines, 1)
        )


def _mirror_label(key: str) -> str:
    return {"medium": "Medium", "dev_to": "dev.to"}.get(key, key)


def build_registry(ctx: CommandContext) -> CommandRegistry:
    """Build the built-in registry bound to one session context."""
    c = BuiltinCommands(ctx)

    def cmd(
        name: str,
        description: str,
        handler: Callable,
        aliases: tuple[str, ...] = (),
        hidden: bool = False,
        usage: str = "",
    ) -> CommandDefinition:
        return CommandDefinition(
            name=name,
            description=description,
            handler=handler,
            aliases=frozenset(aliases),
            hidden=hidden,
            usage=usage or name,
        )

    registry = CommandRegistry(
        [
            cmd("help", "List available commands", c.help, ("?", "man")),
            cmd("whoami", "Display information about me", c.whoami),
            cmd("about", "A little more about me", c.about),
            cmd("projects", "List my projects", c.projects, ("ls",)),
            cmd("project", "Show one project by id or name", c.project,
                usage="project <id-or-name>"),
            cmd("blog", "Show recent blog posts", c.blog, ("posts",)),
            cmd("post", "Show one post by slug or title", c.post,
                usage='post <slug or "title">'),
            cmd("tags", "List post tags with counts", c.tags),
            cmd("tag", "List posts with a tag", c.tag, usage='tag <"name">'),
            cmd("skills", "List my technical skills", c.skills),
            cmd("contact", "How to get in touch", c.contact),
            cmd("version", "Show the terminal version", c.version),
            cmd("history", "Show previously entered commands", c.history),
            cmd("clear", "Clear the terminal", c.clear, ("cls",)),
            cmd("exit", "Return to homepage", c.exit, ("quit",)),
            cmd("open", "Open a page of the site", c.open,
                usage="open <target> [slug]"),
            cmd("echo", "Print the arguments", c.echo, usage="echo <text>"),
            cmd("github", "Open my GitHub profile", c.social("github"), ("gh",)),
            cmd("twitter", "Open my Twitter profile", c.social("twitter"), ("x",)),
            cmd("linkedin", "Open my LinkedIn profile", c.social("linkedin"),
                ("li",)),
            cmd("summon", "Cast a spell", c.summon, hidden=True,
                usage='summon("item")'),
            cmd("copy-email", "Copy my email to the clipboard", c.copy_email,
                hidden=True),
        ]
    )
    c.registry = registry
    return registry
