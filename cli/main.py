"""CLI entry point: BookForge book writing system.

Usage:
  bookforge new "Mediterranean Cooking"     start a project
  bookforge list                            list archived projects
  bookforge outline -p ID                   generate the chapter tree
  bookforge write NODE_ID -p ID             stream one section
  bookforge write-all -p ID                 generate every section
  bookforge research -p ID --apply          research keywords and titles
  bookforge translate en -p ID -o out.json  translate a copy of the project
  bookforge cover -p ID                     generate cover options
  bookforge backup backup.db                copy the snapshot database
  bookforge --help                          show all commands
"""

import asyncio
import json
import logging
import sys
from pathlib import Path

import click
from rich.markup import escape

from cli.theme import (
    get_console,
    app_header,
    command_panel,
    success_panel,
    project_summary_panel,
    structure_tree,
    project_table,
    research_table,
    trends_table,
)
from config.exceptions import BookForgeError, OperationCancelledError
from config.logging_config import setup_logging
from config.settings import Settings
from models.database import SqliteSnapshotStore
from models.document_store import DocumentStore
from models.enums import TargetAudience, ToneOfVoice, WritingStyle
from models.identity import StaticIdentity
from tools.text_utils import count_words

console = get_console()
logger = logging.getLogger(__name__)


def _init_logging(verbose: bool, settings: Settings):
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    setup_logging(level=level, log_dir=settings.log_dir, console_enabled=False)


def _open_store(settings: Settings, adapter: SqliteSnapshotStore, user: str | None) -> DocumentStore:
    identity = StaticIdentity(user_id=user or settings.user_id, auth_enabled=settings.auth_enabled)
    return DocumentStore(adapter, identity, settings)


def _load(ctx, project_id: str) -> DocumentStore:
    """Return the context's store with ``project_id`` active, or exit."""
    store: DocumentStore = ctx.obj["store"]
    try:
        store.load_project(project_id)
    except BookForgeError as e:
        console.print(f"[error]{e}[/]")
        sys.exit(1)
    return store


def _provider(settings: Settings):
    from tools.generation_client import ClaudeGenerationProvider
    return ClaudeGenerationProvider(settings=settings)


def _report_usage(ctx, provider) -> None:
    """Print provider call statistics when running with --verbose."""
    if ctx.obj.get("verbose"):
        summary = provider.get_usage_summary()
        console.print(f"[muted]Provider calls: {summary['total_calls']}[/]")


def _split_keywords(raw: str) -> list[str]:
    return [k.strip() for k in raw.split(",") if k.strip()]


def _fail(message: str, error: Exception | None = None):
    console.print(f"[error]{message}[/]")
    if error is not None:
        logger.error("%s: %s", message, error)
    sys.exit(1)


project_option = click.option("--project", "-p", "project_id", required=True, help="Project ID")


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--user", "-u", default=None, help="User namespace for the project archive")
@click.pass_context
def cli(ctx, verbose, user):
    """BookForge: AI-assisted non-fiction book writing.

    \b
    Projects live in a per-user archive; without --user the shared
    guest archive is used unless authentication is enabled.
    """
    try:
        settings = Settings()
    except ValueError as e:
        console.print(f"[error]Invalid configuration: {e}[/]")
        sys.exit(1)
    _init_logging(verbose, settings)
    ctx.ensure_object(dict)
    adapter = SqliteSnapshotStore(settings.snapshot_db_path, settings.snapshot_max_bytes)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    ctx.obj["adapter"] = adapter
    ctx.obj["store"] = _open_store(settings, adapter, user)


# ---------------------------------------------------------------------------
# project commands
# ---------------------------------------------------------------------------

@cli.command()
@click.argument("title")
@click.option("--topic", "-t", default="", help="Book topic (defaults to the title)")
@click.option("--book-title", default="", help="Title printed on the book")
@click.option("--subtitle", default="", help="Book subtitle")
@click.option("--author", "-a", default="", help="Author name")
@click.pass_context
def new(ctx, title, topic, book_title, subtitle, author):
    """Start a new project.

    Example:
      bookforge new "Mediterranean Cooking" -a "Ada Rossi"
    """
    store: DocumentStore = ctx.obj["store"]
    console.print(app_header())
    console.print()

    try:
        project = store.start_new_project(title)
        if project is None:
            _fail("No archive namespace: pass --user or disable authentication")
        updates = {
            key: value
            for key, value in {
                "topic": topic,
                "book_title": book_title,
                "subtitle": subtitle,
                "author": author,
            }.items()
            if value
        }
        if updates:
            project = store.update_project(**updates)
        if author:
            store.add_author_to_archive(author)
    except BookForgeError as e:
        _fail(f"Could not create project: {e}", e)

    console.print(success_panel(
        "Project created",
        f"  [stat.label]ID:[/] [stat.value]{project.id}[/]\n"
        f"  [stat.label]Topic:[/] {project.topic}\n\n"
        f"  Next: [accent]bookforge outline -p {project.id}[/]",
    ))


@cli.command(name="list")
@click.pass_context
def list_projects(ctx):
    """List archived projects."""
    store: DocumentStore = ctx.obj["store"]
    projects = store.archived_projects
    if not projects:
        console.print("[muted]No projects yet. Create one with: bookforge new TITLE[/]")
        return
    console.print(project_table(projects))


@cli.command()
@project_option
@click.option("--node", "-n", "node_id", default=None, help="Print the content of one node")
@click.pass_context
def show(ctx, project_id, node_id):
    """Show a project's structure, or the text of a single node."""
    store = _load(ctx, project_id)
    project = store.project

    if node_id:
        try:
            node, parent = store.find_node(node_id)
        except BookForgeError as e:
            _fail(str(e))
        heading = node.title if node is parent else f"{parent.title} / {node.title}"
        console.print(app_header(heading or node_id))
        console.print(node.content or "[muted](empty)[/]", markup=False if node.content else True)
        console.print(f"\n[muted]{count_words(node.content)} words[/]")
        return

    from agents.research_agent import research_from_project

    console.print(project_summary_panel(project))
    console.print(structure_tree(project.book_structure))
    research_result = research_from_project(project.research_data)
    if research_result is not None:
        console.print(research_table(research_result))


@cli.command()
@project_option
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
def delete(ctx, project_id, force):
    """Delete a project from the archive."""
    store = _load(ctx, project_id)
    title = store.project.project_title
    if not force and not click.confirm(f"Delete project '{title}' ({project_id})?"):
        console.print("[muted]Cancelled[/]")
        return
    try:
        store.end_current_project()
        store.delete_project(project_id)
    except BookForgeError as e:
        _fail(f"Delete failed: {e}", e)
    console.print(f"[success]Deleted '{title}'[/]")


# ---------------------------------------------------------------------------
# generation commands
# ---------------------------------------------------------------------------

@cli.command()
@project_option
@click.option("--chapters", "-c", default=10, show_default=True, help="Number of chapters")
@click.option("--subchapters", "-s", default=4, show_default=True, help="Subchapters per chapter")
@click.option("--keywords", "-k", default="", help="Comma-separated keywords")
@click.option("--force", "-f", is_flag=True, help="Replace an existing structure without asking")
@click.pass_context
def outline(ctx, project_id, chapters, subchapters, keywords, force):
    """Generate the chapter/subchapter structure for a project."""
    from agents.planner_agent import PlannerAgent

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    project = store.project

    if project.book_structure and project.book_structure.chapters and not force:
        if not click.confirm("The project already has a structure. Replace it?"):
            console.print("[muted]Cancelled[/]")
            return

    keyword_list = _split_keywords(keywords) or project.metadata_keywords
    console.print(command_panel("Outline", {
        "Topic": project.topic,
        "Chapters": str(chapters),
        "Subchapters": str(subchapters),
    }))

    provider = _provider(settings)
    planner = PlannerAgent(provider=provider, settings=settings)
    try:
        with console.status("Planning structure..."):
            structure = asyncio.run(planner.generate_structure(
                topic=project.topic,
                title=project.book_title or project.project_title,
                subtitle=project.subtitle,
                keywords=keyword_list,
                chapter_count=chapters,
                subchapter_count=subchapters,
            ))
        store.set_book_structure(structure)
    except BookForgeError as e:
        _fail(f"Outline failed: {e}", e)

    console.print(structure_tree(store.project.book_structure))
    _report_usage(ctx, provider)


def _generation_params(tone, audience, style, words, keywords, existing_text=None):
    from agents.writer_agent import GenerationParams
    return GenerationParams(
        tone=tone,
        audience=audience,
        style=style,
        target_word_count=words,
        keywords=_split_keywords(keywords),
        existing_text=existing_text,
    )


def _params_options(fn):
    fn = click.option("--keywords", "-k", default="", help="Comma-separated keywords")(fn)
    fn = click.option("--words", "-w", default=None, type=int, help="Target word count")(fn)
    fn = click.option("--style", type=click.Choice([s.value for s in WritingStyle]), default=None)(fn)
    fn = click.option("--audience", type=click.Choice([a.value for a in TargetAudience]), default=None)(fn)
    fn = click.option("--tone", type=click.Choice([t.value for t in ToneOfVoice]), default=None)(fn)
    return fn


@cli.command()
@click.argument("node_id")
@project_option
@_params_options
@click.option("--regenerate", "-r", is_flag=True, help="Rewrite from the node's current text")
@click.pass_context
def write(ctx, node_id, project_id, tone, audience, style, words, keywords, regenerate):
    """Stream content for one chapter or subchapter."""
    from workflow.generation import GenerationOrchestrator
    from agents.writer_agent import WriterAgent

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    try:
        node, _ = store.find_node(node_id)
    except BookForgeError as e:
        _fail(str(e))

    params = _generation_params(
        tone, audience, style, words, keywords,
        existing_text=node.content if regenerate and node.content else None,
    )
    provider = _provider(settings)
    orchestrator = GenerationOrchestrator(
        store, writer=WriterAgent(provider=provider, settings=settings), settings=settings,
    )

    console.print(app_header(node.title or node_id))
    printed = [0]

    def on_fragment(buffer: str) -> None:
        console.print(buffer[printed[0]:], end="", markup=False, highlight=False)
        printed[0] = len(buffer)

    try:
        text = asyncio.run(orchestrator.generate(node_id, params, on_fragment=on_fragment))
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted; nothing was saved[/]")
        sys.exit(130)
    except BookForgeError as e:
        console.print()
        _fail(f"Generation failed: {e}", e)

    console.print()
    console.print(f"\n[success]Saved {count_words(text)} words[/]")
    _report_usage(ctx, provider)


@cli.command(name="write-all")
@project_option
@_params_options
@click.pass_context
def write_all(ctx, project_id, tone, audience, style, words, keywords):
    """Generate every titled leaf section in order."""
    from agents.writer_agent import WriterAgent
    from workflow.batch import BatchScheduler, build_worklist
    from workflow.callbacks import RichProgressCallback
    from workflow.generation import GenerationOrchestrator

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    worklist = build_worklist(store.project.book_structure)
    if not worklist:
        console.print("[warning]Nothing to generate: add titled chapters first[/]")
        return

    params = _generation_params(
        tone, audience, style, words or settings.batch_target_word_count, keywords,
    )
    provider = _provider(settings)
    orchestrator = GenerationOrchestrator(
        store, writer=WriterAgent(provider=provider, settings=settings), settings=settings,
    )
    scheduler = BatchScheduler(orchestrator, settings=settings)

    console.print(command_panel("Generate all", {
        "Sections": str(len(worklist)),
        "Target words": str(params.target_word_count),
    }))

    try:
        with RichProgressCallback(console=console, description="Writing") as callback:
            run = asyncio.run(scheduler.run(params=params, callback=callback))
    except KeyboardInterrupt:
        console.print("\n[warning]Interrupted; finished sections are saved[/]")
        sys.exit(130)
    except BookForgeError as e:
        _fail(f"Generate-all failed: {e}", e)

    body = (
        f"  [stat.label]Written:[/] [success]{len(run.succeeded)}[/]  "
        f"[stat.label]Failed:[/] [error]{len(run.failed)}[/]  "
        f"[stat.label]Total:[/] {run.total}"
    )
    console.print(success_panel("Generate-all finished", body))
    _report_usage(ctx, provider)


@cli.command()
@click.argument("language")
@project_option
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), default=None,
              help="Write the translated project as JSON (default: stdout)")
@click.pass_context
def translate(ctx, language, project_id, output):
    """Translate a copy of the project into LANGUAGE (e.g. en, de, fr)."""
    from agents.translator_agent import TranslatorAgent, language_name
    from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, MofNCompleteColumn
    from workflow.translation import BatchTranslator

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    provider = _provider(settings)
    translator = BatchTranslator(
        TranslatorAgent(provider=provider, settings=settings), settings=settings,
    )

    progress = Progress(
        SpinnerColumn("dots"),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    )
    task_id = progress.add_task(f"Translating to {language_name(language)}", total=None)

    def on_progress(completed: int, total: int) -> None:
        progress.update(task_id, completed=completed, total=total)

    try:
        with progress:
            translated = asyncio.run(
                translator.translate_project(store.project, language, on_progress=on_progress)
            )
    except KeyboardInterrupt:
        console.print("\n[warning]Translation interrupted[/]")
        sys.exit(130)
    except OperationCancelledError as e:
        _fail(str(e))
    except BookForgeError as e:
        _fail(f"Translation failed: {e}", e)

    payload = json.dumps(translated.to_dict(), ensure_ascii=False, indent=2)
    if output is None:
        click.echo(payload)
        return
    output.write_text(payload, encoding="utf-8")
    console.print(success_panel("Translation saved", f"  [stat.label]File:[/] {output}"))
    _report_usage(ctx, provider)


# ---------------------------------------------------------------------------
# research and metadata commands
# ---------------------------------------------------------------------------

@cli.command()
@project_option
@click.option("--apply", "apply_best", is_flag=True, help="Use the top title and subtitle for the book")
@click.pass_context
def research(ctx, project_id, apply_best):
    """Research keywords, titles and subtitles for the project topic."""
    from agents.research_agent import ResearchAgent

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    provider = _provider(settings)
    agent = ResearchAgent(provider=provider, settings=settings)

    try:
        with console.status(f"Researching '{store.project.topic}'..."):
            result = asyncio.run(agent.research_topic(store.project.topic))
        updates = {"research_data": result.to_dict(), "metadata_keywords": result.top_keywords()}
        if apply_best and result.titles:
            updates["book_title"] = result.titles[0].text
        if apply_best and result.subtitles:
            updates["subtitle"] = result.subtitles[0].text
        store.update_project(**updates)
    except BookForgeError as e:
        _fail(f"Research failed: {e}", e)

    if result.market_summary:
        console.print(success_panel("Market summary", f"  {escape(result.market_summary)}"))
    console.print(research_table(result))
    _report_usage(ctx, provider)


@cli.command()
@click.argument("period", default="last month")
@click.pass_context
def trends(ctx, period):
    """Discover trending non-fiction topics (e.g. "last quarter")."""
    from agents.research_agent import ResearchAgent

    settings: Settings = ctx.obj["settings"]
    provider = _provider(settings)
    agent = ResearchAgent(provider=provider, settings=settings)
    try:
        with console.status(f"Looking for trends in the {period}..."):
            found = asyncio.run(agent.discover_trends(period))
    except BookForgeError as e:
        _fail(f"Trend discovery failed: {e}", e)

    if not found:
        console.print("[muted]No trends found[/]")
        return
    console.print(trends_table(found))
    _report_usage(ctx, provider)


@cli.command()
@click.option("--project", "-p", "project_id", default=None, help="Project to assign categories to")
@click.option("--choose", "-c", "chosen", multiple=True, help="Category to assign (repeatable)")
@click.pass_context
def categories(ctx, project_id, chosen):
    """List store categories, or assign some to a project."""
    from agents.research_agent import ResearchAgent

    settings: Settings = ctx.obj["settings"]
    if chosen:
        if not project_id:
            _fail("--choose needs --project")
        store = _load(ctx, project_id)
        try:
            store.update_project(categories=list(dict.fromkeys(chosen)))
        except BookForgeError as e:
            _fail(f"Could not save categories: {e}", e)
        console.print(f"[success]Categories set: {', '.join(store.project.categories)}[/]")
        return

    agent = ResearchAgent(provider=_provider(settings), settings=settings)
    with console.status("Fetching categories..."):
        names = asyncio.run(agent.fetch_categories())
    for name in names:
        console.print(f"  {name}")


@cli.command()
@project_option
@click.pass_context
def describe(ctx, project_id):
    """Write the store description from the title and chapters."""
    from agents.metadata_agent import MetadataAgent

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    project = store.project
    provider = _provider(settings)
    agent = MetadataAgent(provider=provider, settings=settings)

    try:
        with console.status("Writing description..."):
            description = asyncio.run(agent.generate_description(
                project.book_title or project.project_title, project.book_structure,
            ))
        store.update_project(description=description)
    except BookForgeError as e:
        _fail(f"Description failed: {e}", e)

    console.print(success_panel("Description", escape(description)))
    _report_usage(ctx, provider)


@cli.command()
@project_option
@click.option("--count", "-n", default=None, type=int, help="Number of cover options")
@click.option("--pick", default=1, show_default=True, help="Option to keep as the cover")
@click.option("--save-dir", type=click.Path(file_okay=False, path_type=Path), default=None,
              help="Also write every option as a PNG file")
@click.pass_context
def cover(ctx, project_id, count, pick, save_dir):
    """Generate cover options and keep one as the project cover."""
    import base64
    from agents.metadata_agent import MetadataAgent

    settings: Settings = ctx.obj["settings"]
    store = _load(ctx, project_id)
    project = store.project
    provider = _provider(settings)
    agent = MetadataAgent(provider=provider, settings=settings)

    try:
        with console.status("Designing cover..."):
            prompt = asyncio.run(agent.generate_cover_prompt(
                project.topic,
                project.book_title or project.project_title,
                project.metadata_keywords,
                project.categories[0] if project.categories else "",
            ))
        console.print(command_panel("Cover prompt", {"Prompt": escape(prompt)}))
        with console.status("Rendering cover options..."):
            options = asyncio.run(agent.generate_cover_options(prompt, count))
        if not 1 <= pick <= len(options):
            _fail(f"--pick must be between 1 and {len(options)}")
        store.update_project(cover_options=options, cover_image=options[pick - 1])
    except BookForgeError as e:
        _fail(f"Cover generation failed: {e}", e)

    if save_dir is not None:
        save_dir.mkdir(parents=True, exist_ok=True)
        for number, option in enumerate(options, 1):
            path = save_dir / f"cover_{number}.png"
            path.write_bytes(base64.b64decode(option.split(",", 1)[1]))
            console.print(f"  [muted]{path}[/]")
    console.print(f"[success]Cover set to option {pick} of {len(options)}[/]")
    _report_usage(ctx, provider)


@cli.command()
@click.argument("target", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def backup(ctx, target):
    """Copy the snapshot database to TARGET."""
    adapter: SqliteSnapshotStore = ctx.obj["adapter"]
    try:
        path = adapter.backup_database(target)
    except OSError as e:
        _fail(f"Backup failed: {e}", e)
    console.print(success_panel("Backup written", f"  [stat.label]File:[/] {path}"))


if __name__ == "__main__":
    cli()
