"""The command line of the program."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from . import commands
from .commands import OutdatedDetails, PrintConfigOptions
from .settings import TriState
from .status import Failure

_DESCRIPTION = "Build a custom pacman repository from a collection of PKGBUILD directories"


class _Parser(argparse.ArgumentParser):
    def error(self, message: str):  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _parse_bool(text: str) -> bool:
    if text == "true":
        return True
    if text == "false":
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean: {text}")


def _choice(parse):
    def convert(text: str):
        try:
            return parse(text)
        except ValueError as error:
            raise argparse.ArgumentTypeError(str(error)) from None

    return convert


def _run_sort(args: argparse.Namespace) -> None:
    commands.sort()


def _run_outdated(args: argparse.Namespace) -> None:
    commands.outdated(args.details)


def _run_sync_srcinfo(args: argparse.Namespace) -> None:
    commands.sync_srcinfo(args.update)


def _run_deref_db(args: argparse.Namespace) -> None:
    commands.deref_db()


def _run_print_config(args: argparse.Namespace) -> None:
    commands.print_config(
        PrintConfigOptions(
            repository=args.repository,
            containers=list(args.containers or []),
            require_pkgbuild=args.require_pkgbuild,
            require_srcinfo=args.require_srcinfo,
            with_record_failed_builds=args.with_record_failed_builds,
            with_install_missing_dependencies=args.with_install_missing_dependencies,
            with_clean_before_build=args.with_clean_before_build,
            with_clean_after_build=args.with_clean_after_build,
            with_force_rebuild=args.with_force_rebuild,
            with_arch_filter=list(args.with_arch_filter or []),
            with_check=args.with_check,
            with_pacman=args.with_pacman,
            with_packager=args.with_packager,
            with_allow_failure=args.with_allow_failure,
            with_dereference_database_symlinks=args.with_dereference_database_symlinks,
        )
    )


def build_parser() -> argparse.ArgumentParser:
    """The argument parser with every subcommand."""
    parser = _Parser(prog="build-pacman-repo", description=_DESCRIPTION)
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="<command>")

    sort_parser = subparsers.add_parser(
        "sort", help="List packages in build order", description="List packages in build order"
    )
    sort_parser.set_defaults(run=_run_sort)

    config = subparsers.add_parser(
        "print-config",
        help="Generate manifest YAML from a list of directories",
        description="Generate manifest YAML from a list of directories",
    )
    config.add_argument(
        "-D", "--container", dest="containers", action="append", type=Path,
        help="containers of build directories",
    )
    config.add_argument(
        "-T", "--repository", required=True, type=Path, help="paths to repository file"
    )
    config.add_argument(
        "--require-pkgbuild", action="store_true",
        help="skip if directory does not contains build script",
    )
    config.add_argument(
        "--require-srcinfo", action="store_true",
        help="skip if directory does not contains package info file",
    )
    config.add_argument("--with-record-failed-builds", type=Path, help="set record-failed-builds")
    for name in (
        "install-missing-dependencies",
        "clean-before-build",
        "clean-after-build",
        "force-rebuild",
    ):
        config.add_argument(f"--with-{name}", type=_parse_bool, help=f"set {name}")
    config.add_argument("--with-arch-filter", action="append", help="set arch-filter")
    config.add_argument("--with-check", type=_choice(TriState.parse), help="set check")
    config.add_argument("--with-pacman", help="set pacman")
    config.add_argument("--with-packager", help="set packager")
    for name in ("allow-failure", "dereference-database-symlinks"):
        config.add_argument(f"--with-{name}", type=_parse_bool, help=f"set {name}")
    config.set_defaults(run=_run_print_config)

    outdated_parser = subparsers.add_parser(
        "outdated", help="List outdated packages", description="List outdated packages"
    )
    outdated_parser.add_argument(
        "--details",
        type=_choice(OutdatedDetails.parse),
        help="level of details of information (pkgname|pkg-file-path|lossy-yaml|strict-yaml)",
    )
    outdated_parser.set_defaults(run=_run_outdated)

    sync_parser = subparsers.add_parser(
        "sync-srcinfo",
        help="Synchronization of PKGBUILD and .SRCINFO",
        description="Synchronization of PKGBUILD and .SRCINFO",
    )
    sync_parser.add_argument(
        "-u", "--update", action="store_true", help="update outdated build information files"
    )
    sync_parser.set_defaults(run=_run_sync_srcinfo)

    deref_parser = subparsers.add_parser(
        "deref-db",
        help="Make *.db and *.files in repository directory real files",
        description="Make *.db and *.files in repository directory real files",
    )
    deref_parser.set_defaults(run=_run_deref_db)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the program and return its exit code."""
    args = build_parser().parse_args(argv)
    try:
        args.run(args)
    except Failure as failure:
        return failure.code
    return 0


if __name__ == "__main__":
    sys.exit(main())