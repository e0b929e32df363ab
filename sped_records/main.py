"""Console portal for staff, student, service and claim records."""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Confirm, Prompt
from rich.status import Status

from sped_records import settings
from sped_records.editors import ClaimEditor, EntityEditor, UserEditor
from sped_records.entities import CLAIM, SERVICE, STUDENT, USER, EntityConfig
from sped_records.field_normalizer import FieldKind
from sped_records.page_controller import PageController
from sped_records.records.database import get_record_store
from sped_records.views import full_name, render_table

console = Console()
logger = logging.getLogger(__name__)

PAGES = {
    "1": USER,
    "2": STUDENT,
    "3": SERVICE,
    "4": CLAIM,
}

PAGE_TITLES = {
    USER.name: "User Management",
    STUDENT.name: "Student Management",
    SERVICE.name: "Service Management",
    CLAIM.name: "Billing & Claims",
}

CLEAR_VALUE = "-"

COMMANDS_HELP = "add | edit <id> | delete <id> | refresh | dismiss | back"


def configure_logging(level: str | None = None) -> None:
    """Route log records through rich."""
    logging.basicConfig(
        level=level or settings.LOG_LEVEL,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def confirm_with_user(message: str) -> bool:
    return Confirm.ask(f"[bold red]{message}[/bold red]", console=console, default=False)


def parse_command(text: str) -> tuple[str, int | None]:
    """Split a page command into its action and optional record id."""
    parts = text.strip().split()
    if not parts:
        return "", None
    action = parts[0].lower()
    record_id = None
    if len(parts) > 1 and parts[1].lstrip("-").isdigit():
        record_id = int(parts[1])
    return action, record_id


def field_label(editor: EntityEditor, field: str) -> str:
    label = field.replace("_", " ").capitalize()
    if field in editor.config.required:
        label += " *"
    choices = editor.config.choices.get(field)
    if choices and field != "grade":
        label += f" ({'/'.join(str(c) for c in choices)})"
    if field == "grade":
        label += " (-1 = Pre-K, 0 = K, 1-12)"
    return label


def show_options(editor: EntityEditor, key: str) -> None:
    options = editor.options.get(key)
    if not options:
        return
    for option in options:
        extra = option.get("ssid") or option.get("role") or ""
        console.print(f"  [cyan]{option['id']}[/cyan] {escape(full_name(option))} [dim]{escape(str(extra))}[/dim]")


def prompt_districts(editor: UserEditor) -> None:
    console.print(f"Districts: {escape(', '.join(editor.form['districts'])) or 'none'}")
    while True:
        entry = Prompt.ask("Add district (prefix with - to remove, blank to finish)", default="", console=console)
        if not entry.strip():
            return
        if entry.startswith(CLEAR_VALUE):
            editor.remove_district(entry[1:].strip())
        elif not editor.add_district(entry):
            console.print("[dim]Already listed.[/dim]")
        console.print(f"Districts: {escape(', '.join(editor.form['districts'])) or 'none'}")


def prompt_field(editor: EntityEditor, field: str) -> None:
    kind = editor.config.field_types[field]
    label = field_label(editor, field)

    if kind == FieldKind.BOOLEAN:
        editor.set_field(field, Confirm.ask(label, default=bool(editor.form[field]), console=console))
        return

    if kind == FieldKind.LABELS:
        if isinstance(editor, UserEditor):
            prompt_districts(editor)
        return

    show_options(editor, field)
    value = Prompt.ask(label, default=str(editor.form[field]), console=console)
    editor.set_field(field, "" if value.strip() == CLEAR_VALUE else value)


def prompt_claim_student(editor: ClaimEditor) -> None:
    students = editor.options.get("student") or []
    if not students:
        return
    show_options(editor, "student")
    choice = Prompt.ask("Copy details from student id (blank to skip)", default="", console=console)
    for student in students:
        if str(student["id"]) == choice.strip():
            editor.select_student(student)
            return


def fill_form(editor: EntityEditor) -> None:
    console.rule(f"[bold]{editor.title}[/bold]")
    console.print(f"[dim]Enter keeps the shown value; '{CLEAR_VALUE}' clears it.[/dim]")
    for title, fields in editor.sections():
        console.rule(title, style="cyan")
        if isinstance(editor, ClaimEditor) and "student_ssid" in fields:
            prompt_claim_student(editor)
        for field in fields:
            prompt_field(editor, field)


def run_form(page: PageController) -> None:
    """Fill and submit the open form until it saves or the user gives up."""
    while page.editor is not None:
        editor = page.editor
        fill_form(editor)
        with Status("Saving...", console=console, spinner="dots"):
            saved = page.submit()
        if saved:
            console.print(f"[green]{editor.config.label} saved.[/green]\n")
            return
        if editor.form_error:
            console.print(f"[bold red]Error:[/bold red] {escape(editor.form_error)}")
        elif page.error:
            console.print(f"[bold red]Error:[/bold red] {escape(page.error)}")
        if not Confirm.ask("Edit and resubmit?", default=True, console=console):
            page.close_form()


def run_page(config: EntityConfig, store) -> None:
    page = PageController(config, store, confirm=confirm_with_user)
    with Status(f"Loading {config.name} records...", console=console, spinner="dots"):
        page.mount()

    try:
        while True:
            console.rule(f"[bold blue]{PAGE_TITLES[config.name]}[/bold blue]")
            if page.error:
                console.print(f"[bold red]Error:[/bold red] {escape(page.error)} [dim](dismiss to hide)[/dim]")
            console.print(render_table(config, page.records))
            console.print(f"[dim]{COMMANDS_HELP}[/dim]")

            action, record_id = parse_command(console.input("[bold green]>[/bold green] "))
            if action in ("back", "quit", "exit"):
                return

            try:
                if action == "add":
                    page.open_create()
                    run_form(page)
                elif action == "edit" and record_id is not None:
                    if page.open_edit(record_id):
                        run_form(page)
                elif action == "delete" and record_id is not None:
                    if page.delete(record_id):
                        console.print(f"[green]{config.label} {record_id} deleted.[/green]")
                elif action == "refresh":
                    page.refresh()
                elif action == "dismiss":
                    page.dismiss_error()
                elif action:
                    console.print(f"[yellow]Unknown command.[/yellow] {COMMANDS_HELP}")
            except (EOFError, KeyboardInterrupt):
                page.close_form()
                console.print()
            except Exception as e:
                logger.exception("Unexpected error on %s page", config.name)
                console.print(f"[bold red]Error:[/bold red] {escape(str(e))}\n")
    finally:
        page.unmount()


def main():
    """Portal menu loop."""
    configure_logging()
    store = get_record_store()

    console.print("[bold blue]Special Education Services Portal[/bold blue]")
    console.print("Type 'quit' or 'exit' to leave.\n")

    while True:
        for key, config in PAGES.items():
            console.print(f"  [cyan]{key}[/cyan] {PAGE_TITLES[config.name]}")
        try:
            choice = console.input("[bold green]Section:[/bold green] ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            console.print("\n[bold blue]Goodbye![/bold blue]")
            break

        if choice in ("quit", "exit"):
            console.print("[bold blue]Goodbye![/bold blue]")
            break

        config = PAGES.get(choice)
        if config is None:
            continue
        try:
            run_page(config, store)
        except (EOFError, KeyboardInterrupt):
            console.print("\n[bold blue]Goodbye![/bold blue]")
            break


if __name__ == "__main__":
    main()
