"""Command-line interface for repo-secret-manager.

Keeps secrets out of git: secret values are swapped for placeholder tokens
(``<!secret_{name}!>``) in files, and the real values live in a
password-protected vault at the repository root.

Commands:
    add / modify / delete / name / list   Manage the secret catalogue
    export / import                       CSV transfer
    index / listindex / clearindex        Maintain the file index
    encrypt / decrypt                     Rewrite files in place
    redact / unredact                     Write .redacted sibling files
    check                                 Report plaintext secrets (for hooks)
    install-hook / remove-hook            Manage the git pre-commit hook

Configuration:
    Supports config files: repo-secret-manager.toml, .rsm.yml, etc.
    CLI flags override config file values.
"""

from __future__ import annotations

import functools
import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .catalogue import Catalogue
from .config import (
    HOOK_BACKUP_SUFFIX,
    PRE_COMMIT_HOOK,
    HookStatus,
    RunStats,
    SiblingStatus,
)
from .config_loader import load_config, merge_cli_with_config
from .errors import SecretManagerError, VaultError
from .gitops import GitRepository, install_pre_commit_hook, remove_pre_commit_hook
from .operations import (
    RepoContext,
    decrypt_files,
    encrypt_files,
    index_files,
    redact_files,
    unredact_files,
    uses_index,
)
from .substitution import find_plaintext_secrets
from .transfer import import_csv, write_csv
from .utils import truncate_string
from .vault import load_catalogue, resolve_password, save_catalogue
from .walker import walk

# Initialize CLI app
app = typer.Typer(
    name="repo-secret-manager",
    help="""Manage secrets in the files of a git repository.

Secret values are replaced by placeholder tokens so files can be committed
safely; the values themselves are kept in an encrypted vault.

Examples:
    rsm add db_password s3cr3t "Production database"
    rsm encrypt
    rsm redact config/
    rsm index --all
""",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """Global options shared by every command."""

    repo: Path | None = None
    password: str | None = None
    password_file: Path | None = None
    vault_file: str | None = None
    config_file: Path | None = None
    verbose: bool = False


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"repo-secret-manager version {__version__}")
        raise typer.Exit()


def setup_logging(verbose: bool) -> None:
    """Route library logging through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=False)],
        force=True,
    )


def create_spinner_progress() -> Progress:
    """Create a simple spinner progress for indeterminate tasks."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )


class Session:
    """
    One command's view of the repository: git root, merged settings, vault.

    Loads the catalogue once and writes it back once.
    """

    def __init__(self, state: AppState, **cli_settings):
        self.state = state
        self.repo = GitRepository.discover(state.repo)
        self.project_config = load_config(self.repo.root, state.config_file)
        if self.project_config._config_file and state.verbose:
            console.print(f"[dim]Using config: {self.project_config._config_file.name}[/dim]")

        self.settings = merge_cli_with_config(
            self.project_config,
            vault_file=state.vault_file,
            password_file=state.password_file,
            **cli_settings,
        )
        self.ctx = RepoContext(
            self.repo.root,
            self.repo.root / self.settings["vault_file"],
            self.repo,
        )
        self._password: str | None = None

    @property
    def vault_exists(self) -> bool:
        return self.ctx.vault_path.exists()

    def password(self, new_vault: bool = False) -> str:
        if self._password is not None:
            return self._password

        password = resolve_password(
            password_file=self.settings["password_file"],
            password=self.state.password,
            env_var=self.settings["password_env"],
            stdin=sys.stdin,
        )
        if password is None and sys.stdin.isatty():
            password = typer.prompt(
                "Vault password",
                hide_input=True,
                confirmation_prompt=new_vault,
            )
        if not password:
            raise VaultError(
                "No vault password given. Use --password, --password-file, "
                f"${self.settings['password_env']} or pipe it on stdin."
            )

        self._password = password
        return password

    def load(self, create: bool = False) -> Catalogue:
        """Decrypt the vault. With ``create``, a missing vault is an empty catalogue."""
        if not self.vault_exists:
            if create:
                self.password(new_vault=True)
                return Catalogue()
            raise VaultError(
                "Vault file does not exist. "
                "Create a vault by adding a secret with: rsm add <secret>"
            )
        with create_spinner_progress() as progress:
            progress.add_task("Decrypting vault...", total=None)
            return load_catalogue(self.ctx.vault_path, self.password())

    def save(self, catalogue: Catalogue) -> None:
        with create_spinner_progress() as progress:
            progress.add_task("Encrypting vault...", total=None)
            save_catalogue(self.ctx.vault_path, self.password(), catalogue)

    def target(self, path: Path | None) -> Path | None:
        if path is None:
            return None
        return path.resolve()


def fail(message: str) -> None:
    console.print(f"[red]Error: {escape(message)}[/red]")
    raise typer.Exit(1)


def run_guarded(func):
    """Turn library errors into a red message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (SecretManagerError, OSError) as e:
            logger.debug("Command failed", exc_info=True)
            fail(str(e))

    return wrapper


def _state(ctx: typer.Context) -> AppState:
    return ctx.obj if isinstance(ctx.obj, AppState) else AppState()


@app.callback()
def main_callback(
    ctx: typer.Context,
    repo: Path | None = typer.Option(
        None,
        "--repo",
        "-r",
        help="Path inside the git repository. [default: current directory]",
        file_okay=False,
        dir_okay=True,
    ),
    password: str | None = typer.Option(
        None,
        "--password",
        "-p",
        help="Vault password.",
    ),
    password_file: Path | None = typer.Option(
        None,
        "--password-file",
        "-f",
        help="Read the vault password from this file.",
        dir_okay=False,
    ),
    vault_file: str | None = typer.Option(
        None,
        "--vault",
        help="Vault file, relative to the repository root. [default: repo-secret-manager.vault]",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to config file (repo-secret-manager.toml or .rsm.yml).",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Manage secrets in the files of a git repository."""
    setup_logging(verbose)
    ctx.obj = AppState(
        repo=repo,
        password=password,
        password_file=password_file,
        config_file=config_file,
        vault_file=vault_file,
        verbose=verbose,
    )


# ----------------------------------------------------------------------
# Catalogue commands
# ----------------------------------------------------------------------


@app.command()
@run_guarded
def add(
    ctx: typer.Context,
    args: list[str] | None = typer.Argument(
        None,
        metavar="[NAME] SECRET [DESCRIPTION]",
        help="One argument: secret only. Two: name and secret. Three: name, secret, description.",
    ),
) -> None:
    """Add a secret to the vault.

    \b
    EXAMPLES:
      rsm add s3cr3t
      rsm add db_password s3cr3t
      rsm add db_password s3cr3t "Production database"
    """
    args = args or []
    if not args:
        fail("Secret value is required. Usage: add [name] <secret> [description]")
    if len(args) > 3:
        fail("Too many arguments. Usage: add [name] <secret> [description]")

    name: str | None = None
    description: str | None = None
    if len(args) == 1:
        secret = args[0]
    else:
        name, secret = args[0], args[1]
        description = args[2] if len(args) == 3 else None

    session = Session(_state(ctx))
    catalogue = session.load(create=True)

    result = catalogue.add_record(secret, name=name, description=description)
    if not result.ok:
        fail(str(result.error))

    session.save(catalogue)
    record = result.record
    console.print(f"[green]✓[/green] Secret added with placeholder: {escape(record.placeholder)}")
    if description:
        console.print(f"  Description: {escape(description)}")
    if name:
        console.print(f"  Name: {escape(name)}")


@app.command()
@run_guarded
def modify(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Name or id of the secret."),
    secret: str = typer.Argument(..., help="New secret value."),
    description: str | None = typer.Argument(None, help="New description."),
) -> None:
    """Change the value (and optionally description) of a secret.

    Files that already contain placeholders keep working; run 'decrypt' to
    write the new value into them.
    """
    session = Session(_state(ctx))
    catalogue = session.load()

    existing = catalogue.find_by_identifier(identifier)
    old_value = existing.value if existing else ""

    result = catalogue.modify_record(identifier, secret, description)
    if not result.ok:
        fail(str(result.error))

    session.save(catalogue)
    record = result.record
    console.print(f"[green]✓[/green] Secret \"{escape(identifier)}\" modified")
    console.print(f"  Placeholder: {escape(record.placeholder)}")
    if description is not None:
        console.print(f"  Description: {escape(description)}")
    console.print(f"  Previous value: {escape(truncate_string(old_value, 23))}")


@app.command("name")
@run_guarded
def name_secret(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Id of an unnamed secret."),
    name: str = typer.Argument(..., help="Display name to assign."),
) -> None:
    """Give an unnamed secret a display name. Names cannot be changed later.

    Placeholders already written with the id are not rewritten; run
    'decrypt' before and 'encrypt' after to switch files to the new name.
    """
    session = Session(_state(ctx))
    catalogue = session.load()

    result = catalogue.assign_name(identifier, name)
    if not result.ok:
        fail(str(result.error))

    session.save(catalogue)
    console.print(f"[green]✓[/green] Placeholder is now: {escape(result.record.placeholder)}")


@app.command()
@run_guarded
def delete(
    ctx: typer.Context,
    identifier: str = typer.Argument(..., help="Name or id of the secret."),
) -> None:
    """Delete a secret by name or id."""
    session = Session(_state(ctx))
    catalogue = session.load()

    result = catalogue.delete(identifier)
    if not result.ok:
        fail(str(result.error))

    session.save(catalogue)
    console.print(f"[green]✓[/green] Secret \"{escape(identifier)}\" deleted")
    console.print(
        f"[yellow]Note: placeholders in files ({escape(result.record.placeholder)}) "
        "will remain but can no longer be decrypted.[/yellow]"
    )


@app.command("list")
@run_guarded
def list_secrets(ctx: typer.Context) -> None:
    """List all secrets in the vault."""
    session = Session(_state(ctx))
    catalogue = session.load()

    console.print("[cyan]Secrets:[/cyan]")
    console.print("━" * 80)
    for record in catalogue:
        console.print()
        console.print(f"UUID: {record.id}")
        if record.name:
            console.print(f"Name: {escape(record.name)}")
        console.print(f"Secret: {escape(record.value)}")
        if record.description:
            console.print(f"Description: {escape(record.description)}")
        if record.created:
            console.print(f"Created: {escape(record.created)}")
        console.print(f"Placeholder: {escape(record.placeholder)}")
    console.print()
    console.print("━" * 80)
    console.print(f"Total secrets: {len(catalogue)}")


@app.command("export")
@run_guarded
def export_secrets(
    ctx: typer.Context,
    csv_path: Path = typer.Argument(..., help="CSV file to write.", dir_okay=False),
) -> None:
    """Export secrets to a CSV file."""
    session = Session(_state(ctx))
    catalogue = session.load()

    count = write_csv(catalogue, csv_path)
    console.print(f"[green]✓[/green] Exported {count} secrets to: {escape(str(csv_path.resolve()))}")


@app.command("import")
@run_guarded
def import_secrets(
    ctx: typer.Context,
    csv_path: Path = typer.Argument(
        ..., help="CSV file created by 'export'.", exists=True, dir_okay=False
    ),
) -> None:
    """Import secrets from a CSV file. Existing ids are overwritten."""
    session = Session(_state(ctx))
    catalogue = session.load(create=True)

    result, parsed = import_csv(catalogue, csv_path)
    for line in parsed.skipped_lines:
        console.print(f"[yellow]Warning: Skipped line {line}[/yellow]")
    if not result.ok:
        fail(str(result.error))

    session.save(catalogue)
    console.print(
        f"[green]✓[/green] Imported {result.imported} secrets "
        f"({result.overwritten} overwritten, {len(parsed.skipped_lines)} skipped)"
    )


# ----------------------------------------------------------------------
# Index commands
# ----------------------------------------------------------------------


@app.command()
@run_guarded
def index(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="Directory to index. [default: repository root]"),
    pattern: str | None = typer.Argument(None, help="File name filter, e.g. '*.json' or '(*.js|*.json)'."),
    all_files: bool = typer.Option(
        False,
        "--all",
        help="Index all files and replace the index. [default: git-modified files only]",
    ),
) -> None:
    """Index files containing secrets for faster encrypt/decrypt/redact.

    \b
    By default only git-modified files and files listed in .gitignore are
    scanned and merged into the existing index. Use --all to rebuild.
    """
    session = Session(_state(ctx), pattern=pattern)
    catalogue = session.load()

    m_pattern = session.settings["pattern"]
    if m_pattern:
        console.print(f"[dim]Pattern: {escape(m_pattern)}[/dim]")
    mode = "all files" if all_files else "git-modified and .gitignore files"
    console.print(f"[cyan]Indexing {mode}...[/cyan]")

    with create_spinner_progress() as progress:
        progress.add_task("Scanning files...", total=None)
        stats = index_files(
            catalogue,
            session.ctx,
            target=session.target(path),
            pattern=m_pattern,
            rebuild=all_files,
        )

    session.save(catalogue)

    entries = catalogue.index or []
    console.print(f"[green]✓[/green] Indexed {len(entries)} files containing secrets")
    if stats.files_unreadable:
        console.print(f"[dim]Skipped {stats.files_unreadable} unreadable or binary files[/dim]")
    for entry in entries:
        console.print(f"  {escape(entry.path)} ({len(entry.secret_ids)} secret(s))")


@app.command()
@run_guarded
def listindex(ctx: typer.Context) -> None:
    """Show the file index."""
    session = Session(_state(ctx))
    catalogue = session.load()

    if not catalogue.has_index:
        console.print("No index found in the vault.")
        console.print("Run 'index' to create one.")
        return

    console.print("[cyan]Index contents:[/cyan]")
    console.print("━" * 80)
    console.print(f"Total indexed files: {len(catalogue.index)}")
    console.print()
    for number, entry in enumerate(catalogue.index, start=1):
        names = ", ".join(catalogue.display_name(i) for i in entry.secret_ids)
        console.print(f"{number}. {escape(entry.path)}")
        console.print(f"   Secrets: {len(entry.secret_ids)}")
        console.print(f"   IDs: {escape(names)}")
        console.print()


@app.command()
@run_guarded
def clearindex(ctx: typer.Context) -> None:
    """Remove the file index. Run 'index --all' afterwards to rebuild it."""
    session = Session(_state(ctx))
    catalogue = session.load()

    if not catalogue.has_index:
        console.print("No index found in the vault.")
        return

    removed = catalogue.clear_index()
    session.save(catalogue)
    console.print(f"[green]✓[/green] Index cleared (removed {removed} indexed file(s))")


# ----------------------------------------------------------------------
# File commands
# ----------------------------------------------------------------------


def _describe_source(catalogue: Catalogue, path: Path | None, use_index: bool) -> None:
    if uses_index(catalogue, path, use_index):
        console.print(f"[dim]Using index: {len(catalogue.index)} indexed file(s)[/dim]")
    elif path is not None:
        console.print(f"[dim]Scanning {escape(str(path))}[/dim]")
    elif not use_index:
        console.print("[dim]Performing full directory scan (--noindex)[/dim]")
    else:
        console.print("[dim]No index found. Performing full directory scan[/dim]")
        console.print("[dim]Tip: run 'index' first for faster operation[/dim]")


def _print_sibling_results(stats: RunStats, created: str, updated: str) -> None:
    for rel_path, status in stats.sibling_results.items():
        if status == SiblingStatus.CREATED:
            console.print(f"{created}: {escape(rel_path)}")
        elif status == SiblingStatus.UPDATED:
            console.print(f"{updated}: {escape(rel_path)}")


def _check_path(path: Path | None) -> None:
    if path is not None and not path.exists():
        fail(f"Path does not exist: {path}")


@app.command()
@run_guarded
def encrypt(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="File or directory. [default: whole repository]"),
    noindex: bool = typer.Option(False, "--noindex", help="Ignore the index and scan the directory."),
    strict: bool = typer.Option(
        False, "--strict", help="Refuse to run when one secret value contains another."
    ),
) -> None:
    """Replace secret values with placeholders in files."""
    _check_path(path)
    session = Session(_state(ctx), no_index=noindex, strict=strict or None)
    catalogue = session.load()
    use_index = session.settings["use_index"]
    target = session.target(path)

    _describe_source(catalogue, target, use_index)
    stats = encrypt_files(catalogue, session.ctx, target, use_index, session.settings["strict"])

    for rel_path in stats.changed_paths:
        console.print(f"Encrypted secrets in: {escape(rel_path)}")
    if stats.files_changed == 0:
        console.print("No secrets encrypted.")
    else:
        console.print(f"[green]✓[/green] Encrypted {stats.files_changed} file(s)")


@app.command()
@run_guarded
def decrypt(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="File or directory. [default: whole repository]"),
    noindex: bool = typer.Option(False, "--noindex", help="Ignore the index and scan the directory."),
    strict: bool = typer.Option(
        False, "--strict", help="Refuse to run when one secret value contains another."
    ),
) -> None:
    """Replace placeholders with secret values in files."""
    _check_path(path)
    session = Session(_state(ctx), no_index=noindex, strict=strict or None)
    catalogue = session.load()
    use_index = session.settings["use_index"]
    target = session.target(path)

    _describe_source(catalogue, target, use_index)
    stats = decrypt_files(catalogue, session.ctx, target, use_index, session.settings["strict"])

    for rel_path in stats.changed_paths:
        console.print(f"Decrypted placeholders in: {escape(rel_path)}")
    if stats.files_changed == 0:
        console.print("No placeholders decrypted.")
    else:
        console.print(f"[green]✓[/green] Decrypted {stats.files_changed} file(s)")


@app.command()
@run_guarded
def redact(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="File or directory. [default: whole repository]"),
    nogitignore: bool = typer.Option(False, "--nogitignore", help="Do not add original files to .gitignore."),
    nogitremove: bool = typer.Option(False, "--nogitremove", help="Do not remove tracked originals from git."),
    noindex: bool = typer.Option(False, "--noindex", help="Ignore the index and scan the directory."),
    strict: bool = typer.Option(
        False, "--strict", help="Refuse to run when one secret value contains another."
    ),
) -> None:
    """Write redacted copies of files (name.redacted.ext) with placeholders.

    The originals are left untouched, added to .gitignore and removed from
    the git index (kept on disk) so that only the redacted copies are
    committed.
    """
    _check_path(path)
    session = Session(
        _state(ctx),
        no_gitignore=nogitignore,
        no_git_remove=nogitremove,
        no_index=noindex,
        strict=strict or None,
    )
    catalogue = session.load()
    use_index = session.settings["use_index"]
    target = session.target(path)

    _describe_source(catalogue, target, use_index)
    stats = redact_files(
        catalogue,
        session.ctx,
        target,
        use_index=use_index,
        update_gitignore=session.settings["update_gitignore"],
        untrack=session.settings["untrack_redacted"],
        strict=session.settings["strict"],
    )

    _print_sibling_results(stats, "Created redacted file", "Updated redacted file")
    if stats.files_changed == 0:
        console.print("No redacted files created.")
        return

    console.print(f"[green]✓[/green] Wrote {stats.files_changed} redacted file(s)")
    if stats.gitignore_updated:
        console.print("Added original file(s) to .gitignore to prevent accidental commits.")
    if stats.files_untracked:
        console.print(
            f"Removed {stats.files_untracked} tracked file(s) from git (files preserved locally)."
        )


@app.command()
@run_guarded
def unredact(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="File or directory. [default: whole repository]"),
    noindex: bool = typer.Option(False, "--noindex", help="Ignore the index and scan the directory."),
    strict: bool = typer.Option(
        False, "--strict", help="Refuse to run when one secret value contains another."
    ),
) -> None:
    """Restore original files from their redacted copies."""
    _check_path(path)
    session = Session(_state(ctx), no_index=noindex, strict=strict or None)
    catalogue = session.load()
    use_index = session.settings["use_index"]
    target = session.target(path)

    _describe_source(catalogue, target, use_index)
    stats = unredact_files(catalogue, session.ctx, target, use_index, session.settings["strict"])

    _print_sibling_results(stats, "Created unredacted file", "Updated unredacted file")
    if stats.files_changed == 0:
        console.print("No redacted files found to unredact.")
    else:
        console.print(f"[green]✓[/green] Wrote {stats.files_changed} unredacted file(s)")


@app.command()
@run_guarded
def check(
    ctx: typer.Context,
    path: Path | None = typer.Argument(None, help="File or directory. [default: whole repository]"),
) -> None:
    """Report files that still contain plaintext secrets.

    Exits with status 1 when any are found, so it can guard a commit hook.
    Files ignored by git are not checked.
    """
    _check_path(path)
    session = Session(_state(ctx))
    catalogue = session.load()

    search_path = session.target(path) or session.ctx.root
    files = (
        p for p in walk(search_path, session.ctx.is_ignored)
        if not session.ctx.is_vault(p)
    )
    findings = find_plaintext_secrets(files, catalogue)

    if not findings:
        console.print("[green]✓[/green] No plaintext secrets found")
        return

    for file_path, ids in findings:
        names = ", ".join(catalogue.display_name(i) for i in ids)
        console.print(
            f"[red]{escape(session.ctx.relative(file_path))}[/red]: {escape(names)}"
        )
    console.print(
        f"[yellow]Warning: {len(findings)} file(s) contain plaintext secrets. "
        "Run 'encrypt' or 'redact' before committing.[/yellow]"
    )
    raise typer.Exit(1)


# ----------------------------------------------------------------------
# Hook commands
# ----------------------------------------------------------------------


@app.command("install-hook")
@run_guarded
def install_hook(ctx: typer.Context) -> None:
    """Install a git pre-commit hook that runs 'rsm check'.

    An existing hook is backed up to pre-commit.backup. The hook needs the
    vault password from $RSM_PASSWORD or a configured password_file.
    """
    repo = GitRepository.discover(_state(ctx).repo)
    status = install_pre_commit_hook(repo.hooks_dir)

    if status == HookStatus.ALREADY_INSTALLED:
        console.print("[yellow]Pre-commit hook already installed[/yellow]")
        return
    if status == HookStatus.BACKED_UP:
        console.print(
            f"[yellow]Existing pre-commit hook backed up to: "
            f"{PRE_COMMIT_HOOK}{HOOK_BACKUP_SUFFIX}[/yellow]"
        )
    console.print("[green]✓[/green] Git pre-commit hook installed")
    console.print("[dim]To bypass the hook (not recommended), use: git commit --no-verify[/dim]")


@app.command("remove-hook")
@run_guarded
def remove_hook(ctx: typer.Context) -> None:
    """Remove the pre-commit hook installed by 'install-hook'."""
    repo = GitRepository.discover(_state(ctx).repo)
    status = remove_pre_commit_hook(repo.hooks_dir)

    if status == HookStatus.NOT_FOUND:
        console.print("[yellow]No pre-commit hook found[/yellow]")
    elif status == HookStatus.FOREIGN:
        console.print("[yellow]Pre-commit hook is not from repo-secret-manager; left in place[/yellow]")
    elif status == HookStatus.RESTORED:
        console.print("[green]✓[/green] Pre-commit hook removed and backup restored")
    else:
        console.print("[green]✓[/green] Pre-commit hook removed")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
