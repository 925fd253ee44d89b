"""Unified Rich theme and reusable UI helper functions for the CLI."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.theme import Theme
from rich.tree import Tree

from tools.text_utils import count_words, is_error_marker

BOOK_THEME = Theme({
    "app.title": "bold",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "info": "blue",
    "muted": "dim",
    "accent": "cyan",
    "stat.label": "dim",
    "stat.value": "bold",
    "node.id": "dim cyan",
    "chapter.title": "bold cyan",
})


def get_console() -> Console:
    """Return a Console instance with the book theme applied."""
    return Console(theme=BOOK_THEME)


def app_header(title: str = "bookforge") -> Rule:
    """Return a Rule element for the application header banner."""
    return Rule(title=f"[bold]{title}[/]", style="dim")


def command_panel(title: str, fields: dict[str, str]) -> Panel:
    """Return a Panel displaying command parameters.

    Args:
        title: Panel title (e.g. "New project").
        fields: Ordered dict of label -> value pairs.
    """
    lines = []
    for label, value in fields.items():
        lines.append(f"  [stat.label]{label}:[/] [stat.value]{value}[/]")
    body = "\n".join(lines)
    return Panel(body, title=f"[bold]{title}[/]", box=box.ROUNDED, border_style="dim", padding=(0, 2))


def success_panel(title: str, body: str) -> Panel:
    """Return a green-bordered Panel for success results."""
    return Panel(body, title=f"[success]{title}[/]", box=box.ROUNDED, border_style="green", padding=(0, 2))


def project_summary_panel(project) -> Panel:
    """Return a Panel with project summary stats."""
    chapters = project.book_structure.chapters if project.book_structure else []
    subchapters = sum(len(c.subchapters) for c in chapters)
    description = project.description or ""
    if len(description) > 150:
        description = description[:150] + "..."

    body = (
        f"  [stat.label]Topic:[/] {project.topic or '-'}\n"
        f"  [stat.label]Book title:[/] {project.book_title or '-'}  "
        f"[muted]|[/]  [stat.label]Author:[/] {project.author or '-'}\n"
        f"  [stat.label]Chapters:[/] [stat.value]{len(chapters)}[/]  "
        f"[muted]|[/]  [stat.label]Subchapters:[/] [stat.value]{subchapters}[/]  "
        f"[muted]|[/]  [stat.label]Blocks:[/] [stat.value]{len(project.content_blocks)}[/]"
    )
    if description:
        body += f"\n  [stat.label]Description:[/] {description}"
    if project.metadata_keywords:
        body += f"\n  [stat.label]Keywords:[/] {', '.join(project.metadata_keywords)}"
    if project.categories:
        body += f"\n  [stat.label]Categories:[/] {', '.join(project.categories)}"
    if project.cover_image:
        body += "\n  [stat.label]Cover:[/] [success]set[/]"
    return Panel(
        body,
        title=f"[bold]{project.project_title}[/] [muted](ID: {project.id})[/]",
        box=box.ROUNDED,
        border_style="dim",
        padding=(0, 2),
    )


def _node_label(node) -> str:
    title = node.title or "[muted](untitled)[/]"
    if is_error_marker(node.content):
        status = "[error]error[/]"
    elif node.content:
        status = f"[success]{count_words(node.content)} words[/]"
    else:
        status = "[muted]empty[/]"
    return f"{title}  {status}  [node.id]{node.id}[/]"


def structure_tree(structure) -> Tree:
    """Build a Rich Tree of chapters and subchapters with their ids."""
    tree = Tree("[bold]Structure[/]")
    if structure is None or not structure.chapters:
        tree.add("[muted](no chapters)[/]")
        return tree
    for number, chapter in enumerate(structure.chapters, 1):
        branch = tree.add(f"[chapter.title]{number}.[/] {_node_label(chapter)}")
        for sub in chapter.subchapters:
            branch.add(_node_label(sub))
    return tree


def project_table(projects: list) -> Table:
    """Build a table listing archived projects, newest first."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("ID", style="node.id")
    table.add_column("Project", style="bold")
    table.add_column("Book title")
    table.add_column("Chapters", justify="right")
    table.add_column("Last saved", style="muted")

    for project in sorted(projects, key=lambda p: p.last_saved, reverse=True):
        chapters = len(project.book_structure.chapters) if project.book_structure else 0
        table.add_row(
            project.id,
            project.project_title,
            project.book_title or "-",
            str(chapters),
            project.last_saved.strftime("%Y-%m-%d %H:%M"),
        )
    return table


def research_table(result) -> Table:
    """Build a table of ranked titles, subtitles and keywords."""
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("Kind", style="muted")
    table.add_column("Suggestion")
    table.add_column("Relevance", justify="right", style="stat.value")

    for kind, items in (("title", result.titles), ("subtitle", result.subtitles), ("keyword", result.keywords)):
        for item in items:
            table.add_row(kind, item.text, f"{item.relevance:.0f}")
    return table


def trends_table(trends: list) -> Table:
    table = Table(box=box.ROUNDED, border_style="dim", show_header=True, padding=(0, 1))
    table.add_column("Score", justify="right", style="stat.value")
    table.add_column("Topic", style="bold")
    table.add_column("Why", style="muted")
    for trend in trends:
        table.add_row(f"{trend.trend_score:.0f}", trend.topic, trend.reason)
    return table
