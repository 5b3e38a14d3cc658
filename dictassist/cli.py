"""Click CLI for DictAssist."""

import logging
import sys

import click

from dictassist.config import settings

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)


def _format_detection(kind: str, result) -> str:
    if result is None:
        return f"  {kind:10s} (none)"
    keywords = ", ".join(result.matched_keywords)
    return f"  {kind:10s} {result.label:18s} {result.confidence:3d}%  [{keywords}]"


@click.group()
def cli():
    """DictAssist: clinical context detection and macro expansion."""


@cli.command()
def init_db():
    """Create SQLite schema and seed the global macros."""
    from dictassist.database import init_db
    init_db()
    click.echo("Database initialized successfully.")


@cli.command()
@click.argument("text")
@click.option("--auto-detect/--no-auto-detect", default=None, help="Also detect modality (default: AUTO_DETECT_MODALITY)")
@click.option("--explain", is_flag=True, help="Show every scoring candidate")
def detect(text, auto_detect, explain):
    """Detect body part (and optionally modality) in TEXT."""
    from dictassist.engine.classifier import rank
    from dictassist.engine.context_bridge import ContextBridge
    from dictassist.errors import PatternTableError

    try:
        table = settings.load_patterns()
    except PatternTableError as e:
        click.echo(str(e), err=True)
        sys.exit(1)

    if auto_detect is None:
        auto_detect = settings.auto_detect_modality
    bridge = ContextBridge(table.modality, table.body_part, auto_detect=auto_detect)
    snapshot = bridge.update(text)

    click.echo(_format_detection("body part", snapshot.body_part))
    if auto_detect:
        click.echo(_format_detection("modality", snapshot.modality))

    if explain:
        sets = [("body part", table.body_part)]
        if auto_detect:
            sets.append(("modality", table.modality))
        for kind, groups in sets:
            click.echo(f"\n  {kind} candidates:")
            for s in rank(text, groups):
                click.echo(f"    {s.label:18s} {s.score:6.2f}  [{', '.join(s.matched_keywords)}]")


@cli.command()
@click.argument("text")
@click.option("--user", "user_id", default=None, help="Apply this user's personal macros")
@click.option("--context", "body_part", default=None, help="Body part context (skips detection)")
@click.option("--no-detect", is_flag=True, help="Do not detect a body part from TEXT")
def expand(text, user_id, body_part, no_detect):
    """Expand macros in TEXT."""
    from dictassist.database import init_db
    from dictassist.engine.context_bridge import ContextBridge
    from dictassist.engine.expander import MacroExpander
    from dictassist.macro_store import get_macro_store

    init_db()
    macros = get_macro_store().registry_for(user_id).active()

    if body_part is None and not no_detect:
        table = settings.load_patterns()
        bridge = ContextBridge(table.modality, table.body_part)
        bridge.update(text)
        body_part = bridge.body_part_context

    report = MacroExpander().expand_with_report(text, macros, body_part)
    click.echo(report.text)
    click.echo(
        f"[context: {body_part or 'none'}; {len(report.applied)} macro(s) applied, {report.skipped} skipped]",
        err=True,
    )


@cli.group()
def macros():
    """Manage personal macros."""


@macros.command("list")
@click.option("--user", "user_id", default=None, help="Show this user's personal macros too")
def list_macros(user_id):
    """List macros in expansion order."""
    from dictassist.database import init_db
    from dictassist.macro_store import get_macro_store

    init_db()
    registry = get_macro_store().registry_for(user_id)
    for m in (*registry.personal, *registry.global_macros):
        scope = "global" if m.is_global else "personal"
        status = "active" if m.is_active else "inactive"
        smart = " smart" if m.is_smart_macro else ""
        click.echo(f"  {m.id!s:>5}  {m.name:16s}  {scope:8s}  [{status}{smart}]  {m.replacement_text}")
        for exp in m.context_expansions:
            click.echo(f"         {'':16s}    {exp.body_part}: {exp.text}")


@macros.command("add")
@click.option("--user", "user_id", required=True)
@click.option("--name", required=True, help="Trigger word")
@click.option("--text", "replacement_text", required=True, help="Default replacement text")
@click.option("--context", "contexts", multiple=True, metavar="BODY_PART=TEXT",
              help="Body part specific text; makes this a smart macro")
def add_macro(user_id, name, replacement_text, contexts):
    """Create a personal macro."""
    from dictassist.database import init_db
    from dictassist.errors import MacroValidationError
    from dictassist.macro_store import get_macro_store

    expansions = []
    for item in contexts:
        body_part, sep, text = item.partition("=")
        if not sep:
            click.echo(f"Invalid --context '{item}', expected BODY_PART=TEXT", err=True)
            sys.exit(1)
        expansions.append({"bodyPart": body_part.strip(), "text": text.strip()})

    init_db()
    try:
        macro = get_macro_store().create(
            user_id,
            name,
            replacement_text,
            is_smart_macro=bool(expansions),
            context_expansions=expansions or None,
        )
    except MacroValidationError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(f"Created macro '{macro.name}' (id {macro.id}).")


@macros.command("delete")
@click.option("--user", "user_id", required=True)
@click.argument("macro_id", type=int)
def delete_macro(user_id, macro_id):
    """Delete a personal macro."""
    from dictassist.database import init_db
    from dictassist.errors import MacroNotFoundError
    from dictassist.macro_store import get_macro_store

    init_db()
    try:
        get_macro_store().delete(macro_id, user_id)
    except MacroNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(f"Deleted macro {macro_id}.")


@macros.command("toggle")
@click.option("--user", "user_id", required=True)
@click.argument("macro_id", type=int)
def toggle_macro(user_id, macro_id):
    """Activate or deactivate a personal macro."""
    from dictassist.database import init_db
    from dictassist.errors import MacroNotFoundError
    from dictassist.macro_store import get_macro_store

    init_db()
    try:
        active = get_macro_store().toggle(macro_id, user_id)
    except MacroNotFoundError as e:
        click.echo(str(e), err=True)
        sys.exit(1)
    click.echo(f"Macro {macro_id} is now {'active' if active else 'inactive'}.")


@cli.command()
def run_web():
    """Start the FastAPI web interface."""
    import uvicorn
    from dictassist.database import init_db
    init_db()
    uvicorn.run(
        "dictassist.web.app:app",
        host=settings.web_host,
        port=settings.web_port,
        reload=False,
    )


if __name__ == "__main__":
    cli()
