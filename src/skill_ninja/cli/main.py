"""Main CLI entry point for skill-ninja."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table
from rich.text import Text

from skill_ninja.catalog import CatalogStore, localized_description, search_skills
from skill_ninja.config import Settings, get_settings
from skill_ninja.core.exceptions import RemoteAuthError, SkillNinjaError
from skill_ninja.core.logging import configure_logging
from skill_ninja.ui.console import console, error_console

app = typer.Typer(
    help="Keep AI assistant instruction documents in sync with workspace skills.",
    add_completion=False,
)
catalog_app = typer.Typer(help="Browse and maintain the skill catalog.")
app.add_typer(catalog_app, name="catalog")

RootOption = Annotated[
    Path,
    typer.Option("--root", "-r", help="Workspace root", file_okay=False, resolve_path=True),
]


def _print_section_header(title: str, color: str = "blue") -> None:
    width = console.size.width
    left = f"[{color}]▎[/{color}][dim {color}]▶[/dim {color}] [{color}]{title}[/{color}]"
    left_text = Text.from_markup(left)
    separator_count = max(1, width - left_text.cell_len - 1)

    combined = Text()
    combined.append_text(left_text)
    combined.append(" ")
    combined.append("─" * separator_count, style="dim")

    console.print()
    console.print(combined)
    console.print()


def _print_hint(message: str) -> None:
    console.print(f"[dim]▎• {message}[/dim]")


def _fail(message: str) -> typer.Exit:
    error_console.print(message)
    return typer.Exit(1)


def _store(settings: Settings) -> CatalogStore:
    return CatalogStore.from_settings(settings.catalog)


def _fetcher(settings: Settings):
    from skill_ninja.catalog.github import GitHubFetcher

    return GitHubFetcher(token=settings.catalog.github_token)


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to skill-ninja.yaml", dir_okay=False),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """skill-ninja - manage agent skills and the instruction document that lists them."""
    settings = get_settings(config)
    if verbose:
        settings.logger.level = "debug"
    configure_logging(settings)


@app.command()
def sync(
    root: RootOption = Path("."),
    remove: Annotated[
        bool, typer.Option("--remove", help="Remove the skills section instead of updating it")
    ] = False,
) -> None:
    """Write the installed and local skills into the instruction document."""
    from skill_ninja.instructions.manager import remove_skill_section, update_instruction_file

    settings = get_settings()
    try:
        if remove:
            removed = asyncio.run(remove_skill_section(root, settings=settings))
            if removed:
                console.print("[green]Removed skills section.[/green]")
            else:
                console.print("[yellow]No skills section found.[/yellow]")
            return
        result = asyncio.run(update_instruction_file(root, settings=settings))
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc

    status = "Updated" if result.changed else "Up to date:"
    console.print(
        f"[green]{status}[/green] [cyan]{result.path}[/cyan] "
        f"({result.installed_count} installed, {result.local_count} local, "
        f"format {result.output_format.value})"
    )


@app.command()
def scan(
    root: RootOption = Path("."),
    all_skills: Annotated[
        bool, typer.Option("--all", help="Include skills inside the install directory")
    ] = False,
) -> None:
    """List SKILL.md files found in the workspace."""
    from skill_ninja.skills.scanner import scan_local_skills

    settings = get_settings()
    descriptors = asyncio.run(
        scan_local_skills(root, include_installed=all_skills, settings=settings)
    )

    _print_section_header("Workspace Skills")
    if not descriptors:
        console.print("[yellow]No skills found.[/yellow]")
        return

    table = Table(show_header=True, box=None)
    table.add_column("Name", style="cyan", header_style="bold bright_white")
    table.add_column("Path", style="dim", header_style="bold bright_white")
    table.add_column("Installed", header_style="bold bright_white")
    table.add_column("Registered", header_style="bold bright_white")
    for descriptor in descriptors:
        table.add_row(
            descriptor.name,
            descriptor.relative_path,
            "[green]yes[/green]" if descriptor.is_installed else "[dim]no[/dim]",
            f"[green]{descriptor.registration_file}[/green]"
            if descriptor.is_registered
            else "[dim]no[/dim]",
        )
    console.print(table)
    _print_hint(f"{len(descriptors)} skill(s)")


@app.command()
def detect(root: RootOption = Path(".")) -> None:
    """Show which AI assistants the workspace is configured for."""
    from skill_ninja.tools.detector import detect_ai_tools

    result = detect_ai_tools(root)
    _print_section_header("Detected Tools")
    if not result.detected_tools:
        console.print("[yellow]No AI tools detected.[/yellow]")
    else:
        table = Table(show_header=True, box=None)
        table.add_column("Tool", style="cyan", header_style="bold bright_white")
        table.add_column("Config", style="dim", header_style="bold bright_white")
        table.add_column("Confidence", header_style="bold bright_white")
        table.add_column("Format", header_style="bold bright_white")
        for tool in result.detected_tools:
            try:
                config_path = tool.config_path.relative_to(root).as_posix()
            except ValueError:
                config_path = str(tool.config_path)
            table.add_row(
                tool.display_name, config_path, tool.confidence, tool.suggested_format.value
            )
        console.print(table)
    _print_hint(
        f"Recommended: {result.recommended_format.value} -> {result.recommended_instruction_file}"
    )


@app.command("when-to-use")
def when_to_use(
    name: Annotated[str, typer.Argument(help="Installed skill name")],
    text: Annotated[
        str | None, typer.Argument(help="Override text; an empty string clears it")
    ] = None,
    root: RootOption = Path("."),
) -> None:
    """Show or set the 'when to use' text of an installed skill."""
    from skill_ninja.skills.installed import find_installed_skill, set_custom_when_to_use

    settings = get_settings()
    if text is None:
        skill = find_installed_skill(root, name, settings)
        if skill is None:
            raise _fail(f"Installed skill not found: {name}")
        console.print(f"[cyan]{skill.name}[/cyan]: {skill.display_text or '[dim](none)[/dim]'}")
        return

    try:
        meta = set_custom_when_to_use(root, name, text, settings)
    except FileNotFoundError as exc:
        raise _fail(str(exc)) from exc
    if meta.custom_when_to_use:
        console.print(f"[green]Updated[/green] [cyan]{meta.name}[/cyan]")
    else:
        console.print(f"[green]Cleared override for[/green] [cyan]{meta.name}[/cyan]")
    if settings.instructions.auto_update:
        sync(root=root, remove=False)


@app.command()
def install(
    name: Annotated[str, typer.Argument(help="Catalog skill name")],
    source: Annotated[
        str | None, typer.Option("--source", "-s", help="Source ID when the name is ambiguous")
    ] = None,
    root: RootOption = Path("."),
    force: Annotated[bool, typer.Option("--force", help="Replace an existing install")] = False,
) -> None:
    """Download a catalog skill into the workspace's install directory."""
    from skill_ninja.skills.installer import install_skill

    settings = get_settings()
    try:
        snapshot = _store(settings).load()
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc

    name_lower = name.lower()
    matches = [
        skill
        for skill in snapshot.skills
        if skill.name.lower() == name_lower and (source is None or skill.source == source)
    ]
    if not matches:
        raise _fail(f"Skill not found in catalog: {name}")
    if len(matches) > 1:
        candidates = ", ".join(skill.source for skill in matches)
        raise _fail(f"Skill '{name}' exists in several sources ({candidates}). Use --source.")

    try:
        installed = asyncio.run(
            install_skill(
                root,
                matches[0],
                _fetcher(settings),
                settings,
                sources=snapshot.sources,
                overwrite=force,
            )
        )
    except RemoteAuthError as exc:
        raise _fail(f"{exc.message} (HTTP {exc.status_code}). Set catalog.github_token.") from exc
    except FileExistsError as exc:
        raise _fail(f"{exc}. Use --force to replace it.") from exc
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc

    console.print(
        f"[green]Installed[/green] [cyan]{installed.name}[/cyan] -> {installed.relative_path}"
    )
    if settings.instructions.auto_update:
        sync(root=root, remove=False)


@app.command()
def uninstall(
    target: Annotated[
        str, typer.Argument(help="Installed skill name, or the path of a SKILL.md to remove")
    ],
    root: RootOption = Path("."),
) -> None:
    """Remove an installed skill, or a workspace skill by its SKILL.md path."""
    from skill_ninja.skills.installer import uninstall_skill, uninstall_skill_by_path

    settings = get_settings()
    try:
        if target.lower().endswith("skill.md"):
            removed = uninstall_skill_by_path(root, target)
        else:
            removed = uninstall_skill(root, target, settings)
    except (FileNotFoundError, ValueError) as exc:
        raise _fail(str(exc)) from exc

    console.print(f"[green]Removed[/green] [cyan]{removed}[/cyan]")
    if settings.instructions.auto_update:
        sync(root=root, remove=False)



@catalog_app.command("show")
def catalog_show() -> None:
    """List catalog sources and their skill counts."""
    settings = get_settings()
    try:
        snapshot = _store(settings).load()
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc

    _print_section_header(f"Skill Catalog v{snapshot.version}")
    console.print(f"[dim]▎• Last updated:[/dim] {snapshot.last_updated}")
    if not snapshot.sources:
        console.print("[yellow]No sources in catalog.[/yellow]")
        _print_hint("Add one with: skill-ninja catalog add <github-url>")
        return

    table = Table(show_header=True, box=None)
    table.add_column("ID", style="cyan", header_style="bold bright_white")
    table.add_column("Type", style="dim", header_style="bold bright_white")
    table.add_column("Skills", justify="right", header_style="bold bright_white")
    table.add_column("Description", header_style="bold bright_white")
    for source in snapshot.sources:
        table.add_row(
            source.id,
            source.type,
            str(len(snapshot.skills_for_source(source.id))),
            localized_description(source, settings.catalog.language),
        )
    console.print(table)


@catalog_app.command("merge")
def catalog_merge() -> None:
    """Merge the bundled catalog into the local one."""
    settings = get_settings()
    if not settings.catalog.bundled_index:
        raise _fail("No bundled index configured (catalog.bundled_index).")
    try:
        merged = _store(settings).merge_with_bundled()
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc
    console.print(
        f"[green]Catalog v{merged.version}[/green]: "
        f"{len(merged.sources)} sources, {len(merged.skills)} skills"
    )


@catalog_app.command("add")
def catalog_add(url: Annotated[str, typer.Argument(help="GitHub repository URL")]) -> None:
    """Add a GitHub repository as a skill source."""
    from skill_ninja.catalog.repository import add_source

    settings = get_settings()
    try:
        _, count = asyncio.run(add_source(_store(settings), url, _fetcher(settings)))
    except RemoteAuthError as exc:
        raise _fail(f"{exc.message} (HTTP {exc.status_code}). Set catalog.github_token.") from exc
    except (SkillNinjaError, ValueError) as exc:
        raise _fail(str(exc)) from exc
    console.print(f"[green]Added {count} skill(s)[/green] from [cyan]{url}[/cyan]")


@catalog_app.command("remove")
def catalog_remove(source_id: Annotated[str, typer.Argument(help="Source ID")]) -> None:
    """Remove a source and its skills from the catalog."""
    from skill_ninja.catalog.repository import remove_source

    settings = get_settings()
    try:
        _, removed = remove_source(_store(settings), source_id)
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc
    console.print(f"[green]Removed[/green] [cyan]{source_id}[/cyan] ({removed} skill(s))")


@catalog_app.command("refresh")
def catalog_refresh() -> None:
    """Rescan every source in the catalog."""
    from skill_ninja.catalog.repository import refresh_from_sources

    settings = get_settings()

    def progress(source, index: int, total: int) -> None:
        console.print(f"[dim]▎• ({index}/{total}) {source.id}[/dim]")

    try:
        result = asyncio.run(
            refresh_from_sources(_store(settings), _fetcher(settings), progress=progress)
        )
    except RemoteAuthError as exc:
        raise _fail(f"{exc.message} (HTTP {exc.status_code}). Set catalog.github_token.") from exc
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc

    console.print(
        f"[green]Refreshed {result.succeeded} source(s)[/green], "
        f"{len(result.failed)} failed, {len(result.snapshot.skills)} skills"
    )
    for source_id, error in result.failed.items():
        _print_hint(f"{source_id}: {error}")


@catalog_app.command("search")
def catalog_search(
    query: Annotated[list[str] | None, typer.Argument(help="Keywords")] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results")] = 20,
) -> None:
    """Search the catalog by keyword."""
    settings = get_settings()
    try:
        snapshot = _store(settings).load()
    except SkillNinjaError as exc:
        raise _fail(str(exc)) from exc
    hits = search_skills(snapshot, " ".join(query or []), limit=limit)

    if not hits:
        console.print("[yellow]No matching skills.[/yellow]")
        return

    table = Table(show_header=True, box=None)
    table.add_column("Name", style="cyan", header_style="bold bright_white")
    table.add_column("Source", style="dim", header_style="bold bright_white")
    table.add_column("Description", header_style="bold bright_white")
    for hit in hits:
        table.add_row(
            hit.skill.name,
            hit.skill.source,
            localized_description(hit.skill, settings.catalog.language),
        )
    console.print(table)


if __name__ == "__main__":
    app()
