import subprocess
from pathlib import Path
from unittest import mock

import pytest
import yaml

from pacman_repo_builder.cli import build_parser, main
from pacman_repo_builder.commands import OutdatedDetails
from pacman_repo_builder.manifest import BuildPacmanRepo
from pacman_repo_builder.settings import GlobalSettings, Member, TriState
from pacman_repo_builder.status import Code


def _srcinfo(pkgbase, pkgver="1.0", depends=()):
    lines = [f"pkgbase = {pkgbase}", f"\tpkgver = {pkgver}", "\tpkgrel = 1", "\tarch = any"]
    lines += [f"\tdepends = {d}" for d in depends]
    lines += ["", f"pkgname = {pkgbase}", ""]
    return "\n".join(lines)


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _write_manifest(root, members):
    manifest = BuildPacmanRepo(
        GlobalSettings(repository=Path("repo/repo.db.tar.gz")),
        [Member(directory=Path(name)) for name in members],
    )
    (root / "build-pacman-repo.yaml").write_text(yaml.safe_dump(manifest.to_dict()))


def test_parse_print_config():
    args = build_parser().parse_args([
        "print-config", "-T", "r.db", "-D", "a", "--container", "b",
        "--with-check", "enabled", "--with-install-missing-dependencies", "false",
        "--with-arch-filter", "x86_64", "--with-arch-filter", "i686",
    ])
    assert args.repository == Path("r.db")
    assert args.containers == [Path("a"), Path("b")]
    assert args.with_check is TriState.ENABLED
    assert args.with_install_missing_dependencies is False
    assert args.with_arch_filter == ["x86_64", "i686"]
    assert args.require_pkgbuild is False


def test_parse_outdated_details():
    parser = build_parser()
    assert parser.parse_args(["outdated"]).details is None
    assert parser.parse_args(["outdated", "--details", "strict-yaml"]).details is OutdatedDetails.STRICT_YAML


def test_parse_sync_srcinfo_update():
    parser = build_parser()
    assert parser.parse_args(["sync-srcinfo", "-u"]).update is True
    assert parser.parse_args(["sync-srcinfo"]).update is False


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["unknown"],
        ["outdated", "--details", "bogus"],
        ["print-config", "-T", "r.db", "--with-force-rebuild", "yes"],
        ["print-config"],
    ],
)
def test_invalid_arguments_exit_with_one(argv):
    with pytest.raises(SystemExit) as info:
        build_parser().parse_args(argv)
    assert info.value.code == 1


def test_main_sort(workdir, capsys):
    for name, content in {"low": _srcinfo("low"), "high": _srcinfo("high", depends=["low"])}.items():
        (workdir / name).mkdir()
        (workdir / name / ".SRCINFO").write_text(content)
    _write_manifest(workdir, ["low", "high"])
    assert main(["sort"]) == 0
    assert capsys.readouterr().out.split() == ["low", "high"]


def test_main_bad_manifest(workdir):
    (workdir / "build-pacman-repo.yaml").write_text("::: not yaml [")
    assert main(["deref-db"]) == Code.MANIFEST_LOADING_FAILURE


def test_main_sync_srcinfo_exit_codes(workdir):
    (workdir / "pkg").mkdir()
    (workdir / "pkg" / "PKGBUILD").write_text("")
    (workdir / "pkg" / ".SRCINFO").write_text(_srcinfo("pkg"))
    _write_manifest(workdir, ["pkg"])
    completed = subprocess.CompletedProcess([], 0, _srcinfo("pkg", pkgver="2.0").encode(), b"")
    with mock.patch("pacman_repo_builder.makepkg.subprocess.run", return_value=completed):
        assert main(["sync-srcinfo"]) == Code.SRCINFO_OUT_OF_SYNC
        assert main(["sync-srcinfo", "--update"]) == 0
        assert main(["sync-srcinfo"]) == 0


def test_main_print_config(workdir, capsys):
    (workdir / "c" / "x").mkdir(parents=True)
    assert main(["print-config", "-T", "repo/r.db.tar.gz", "-D", "c", "--with-pacman", "yay"]) == 0
    manifest = BuildPacmanRepo.from_dict(yaml.safe_load(capsys.readouterr().out))
    assert manifest.global_settings.pacman == "yay"
    assert [m.directory for m in manifest.members] == [Path("c/x")]