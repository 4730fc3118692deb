# -----------------------------------------------------------------------------
# FLATPAK BUNDLER - COMMAND LINE
# -----------------------------------------------------------------------------
# Commands:
# - build --config bundle.yaml [--remote NAME]: run the bundle pipeline
# - open URL [--with PROGRAM] [--ask]: open a URL (program table or desktop portal)
# - info: show the Flatpak sandbox we are running in, if any
#
# Exit code 1 on any failure, with a panel naming the failed stage.
# -----------------------------------------------------------------------------

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from flatpak_bundler.core.config import SettingsError, load_settings
from flatpak_bundler.core.pipeline import bundle_project
from flatpak_bundler.core.shell import ShellOpenError, UnknownProgramError, open_path
from flatpak_bundler.domain.errors import BundleError
from flatpak_bundler.infra.portal import PortalError
from flatpak_bundler.infra.sandbox_info import FlatpakInfo, SandboxInfoError

console = Console()


def _fail(title: str, message: str) -> int:
    console.print(Panel(f"[bold red]{escape(message)}[/bold red]", title=title, border_style="red"))
    return 1


def cmd_build(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(args.config)
    except SettingsError as e:
        return _fail("SETTINGS", str(e))

    if args.remote:
        settings = settings.model_copy(
            update={"flatpak": settings.flatpak.model_copy(update={"remote": args.remote})}
        )

    try:
        bundles = bundle_project(settings)
    except BundleError as e:
        return _fail(f"BUNDLE FAILED: {e.stage.value.upper()}", str(e))

    console.print(
        Panel(
            "\n".join(f"[bold green]{path}[/bold green]" for path in bundles),
            title="BUNDLE COMPLETE",
            border_style="green",
        )
    )
    return 0


def cmd_open(args: argparse.Namespace) -> int:
    try:
        open_path(args.url, args.with_, ask=args.ask)
    except (ShellOpenError, UnknownProgramError, PortalError) as e:
        return _fail("OPEN FAILED", str(e))
    return 0


def cmd_info(args: argparse.Namespace) -> int:
    try:
        info = FlatpakInfo.try_load(args.path)
    except SandboxInfoError as e:
        return _fail("SANDBOX INFO", str(e))

    if info is None:
        console.print("[yellow]Not running inside a Flatpak sandbox[/yellow]")
        return 0

    console.print(f"[bold cyan]{info.identifier_triple()}[/bold cyan]")
    console.print(f"[dim]runtime: {info.application_runtime}[/dim]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flatpak-bundler", description="Bundle a compiled desktop app as a Flatpak"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build a single-file .flatpak bundle")
    build.add_argument("--config", type=Path, default=Path("bundle.yaml"), help="Settings YAML")
    build.add_argument("--remote", help="Remote for --install-deps-from (default: flathub)")
    build.set_defaults(func=cmd_build)

    open_ = sub.add_parser("open", help="Open a URL")
    open_.add_argument("url")
    open_.add_argument("--with", dest="with_", help="Program name (e.g., firefox, xdg-desktop-portal)")
    open_.add_argument(
        "--ask", action="store_true", help="Let the user choose the application (portal only)"
    )
    open_.set_defaults(func=cmd_open)

    info = sub.add_parser("info", help="Show Flatpak sandbox info")
    info.add_argument("--path", type=Path, default=Path("/.flatpak-info"), help=argparse.SUPPRESS)
    info.set_defaults(func=cmd_info)

    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
