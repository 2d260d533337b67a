import os
import subprocess
from pathlib import Path
from unittest import mock

import pytest
import yaml

from pacman_repo_builder.commands import (
    OutdatedDetails,
    PrintConfigOptions,
    deref_db,
    outdated,
    print_config,
    sort,
    sync_srcinfo,
)
from pacman_repo_builder.manifest import BuildPacmanRepo
from pacman_repo_builder.package_file_name import PackageFileName
from pacman_repo_builder.settings import BuildMetadata, GlobalSettings, Member
from pacman_repo_builder.status import Code, Failure


def _srcinfo(pkgbase, pkgver="1.0", pkgrel="1", arch=("x86_64",), depends=()):
    lines = [f"pkgbase = {pkgbase}", f"\tpkgver = {pkgver}", f"\tpkgrel = {pkgrel}"]
    lines += [f"\tarch = {a}" for a in arch]
    lines += [f"\tdepends = {d}" for d in depends]
    lines += ["", f"pkgname = {pkgbase}", ""]
    return "\n".join(lines)


def _write_manifest(root, members, **settings):
    manifest = BuildPacmanRepo(
        GlobalSettings(repository=Path("repo/repo.db.tar.gz"), **settings),
        [Member(directory=Path(name)) for name in members],
    )
    (root / "build-pacman-repo.yaml").write_text(yaml.safe_dump(manifest.to_dict()))


def _make_packages(root, packages):
    for name, content in packages.items():
        (root / name).mkdir()
        (root / name / ".SRCINFO").write_text(content)
    _write_manifest(root, list(packages))


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_outdated_details_parse():
    assert OutdatedDetails.parse("pkgname") is OutdatedDetails.PKGNAME
    assert OutdatedDetails.parse("pkg-file-path") is OutdatedDetails.PKG_FILE_PATH
    assert OutdatedDetails.parse("lossy-yaml") is OutdatedDetails.LOSSY_YAML
    assert OutdatedDetails.parse("strict-yaml") is OutdatedDetails.STRICT_YAML


def test_outdated_details_parse_invalid():
    with pytest.raises(ValueError, match="invalid choice: nope"):
        OutdatedDetails.parse("nope")


def test_sort_puts_dependency_first(workdir, capsys):
    _make_packages(workdir, {"bottom": _srcinfo("bottom"), "top": _srcinfo("top", depends=["bottom"])})
    sort()
    lines = capsys.readouterr().out.split()
    assert set(lines) == {"bottom", "top"}
    assert lines.index("bottom") < lines.index("top")


def test_sort_cycle_fails(workdir, capsys):
    _make_packages(workdir, {"self": _srcinfo("self", depends=["self"])})
    with pytest.raises(Failure) as info:
        sort()
    assert info.value.code == Code.GENERIC_FAILURE
    assert "Dependency cycle detected at self" in capsys.readouterr().err


def test_sort_bad_manifest(workdir):
    (workdir / "build-pacman-repo.yaml").write_text("members: [")
    with pytest.raises(Failure) as info:
        sort()
    assert info.value.code == Code.MANIFEST_LOADING_FAILURE


def _outdated_setup(workdir):
    _make_packages(
        workdir,
        {"foo": _srcinfo("foo"), "bar": _srcinfo("bar", pkgver="2.0", arch=("any",))},
    )
    (workdir / "repo").mkdir()
    (workdir / "repo" / str(PackageFileName("foo", "1.0-1", "x86_64"))).write_text("")


def test_outdated_pkg_file_path(workdir, capsys):
    _outdated_setup(workdir)
    outdated()
    lines = capsys.readouterr().out.splitlines()
    assert lines == [str(PackageFileName("bar", "2.0-1", "any"))]


def test_outdated_pkgname(workdir, capsys):
    _outdated_setup(workdir)
    outdated(OutdatedDetails.PKGNAME)
    assert capsys.readouterr().out.splitlines() == ["bar"]


def test_outdated_yaml_forms_agree(workdir, capsys):
    _outdated_setup(workdir)
    outdated(OutdatedDetails.LOSSY_YAML)
    lossy = capsys.readouterr().out
    outdated(OutdatedDetails.STRICT_YAML)
    strict = capsys.readouterr().out
    load = lambda text: [yaml.safe_load(part) for part in text.split("---")[1:]]
    assert load(lossy) == load(strict)
    assert load(strict) == [
        {"file-name": str(PackageFileName("bar", "2.0-1", "any")),
         "pkgname": "bar", "version": "2.0-1", "arch": "any"}
    ]


def test_outdated_skips_failed_builds(workdir, capsys):
    _outdated_setup(workdir)
    (workdir / "failed.yaml").write_text(
        yaml.safe_dump([PackageFileName("bar", "2.0-1", "any").to_dict()])
    )
    _write_manifest(workdir, ["foo", "bar"], record_failed_builds=Path("failed.yaml"))
    outdated()
    assert capsys.readouterr().out == ""


def test_outdated_missing_repository_directory(workdir):
    _make_packages(workdir, {"foo": _srcinfo("foo")})
    with pytest.raises(Failure) as info:
        outdated()
    assert info.value.error is not None


def test_print_config_lists_directories(workdir, capsys):
    (workdir / "mixed" / "one").mkdir(parents=True)
    (workdir / "mixed" / "one" / "PKGBUILD").write_text("")
    (workdir / "mixed" / "two").mkdir()
    (workdir / "mixed" / "two" / ".SRCINFO").write_text("")
    (workdir / "mixed" / "readme").write_text("")
    print_config(PrintConfigOptions(repository=Path("repo/repo.db.tar.gz"),
                                    containers=[Path("mixed")]))
    out = capsys.readouterr().out
    assert out.startswith("global-settings:")
    manifest = BuildPacmanRepo.from_dict(yaml.safe_load(out))
    assert [m.directory for m in manifest.members] == [Path("mixed/one"), Path("mixed/two")]
    assert manifest.global_settings.read_build_metadata is BuildMetadata.EITHER
    assert manifest.global_settings.repository == Path("repo/repo.db.tar.gz")


def test_print_config_require_pkgbuild(workdir, capsys):
    (workdir / "c" / "one").mkdir(parents=True)
    (workdir / "c" / "one" / "PKGBUILD").write_text("")
    (workdir / "c" / "two").mkdir()
    print_config(PrintConfigOptions(repository=Path("r.db"), containers=[Path("c")],
                                    require_pkgbuild=True, with_arch_filter=["x86_64", "any"],
                                    with_force_rebuild=True))
    manifest = BuildPacmanRepo.from_dict(yaml.safe_load(capsys.readouterr().out))
    assert [m.directory for m in manifest.members] == [Path("c/one")]
    assert manifest.global_settings.read_build_metadata is BuildMetadata.PKGBUILD
    assert manifest.global_settings.arch_filter.is_any
    assert manifest.global_settings.force_rebuild is True


def test_print_config_missing_container(workdir, capsys):
    with pytest.raises(Failure) as info:
        print_config(PrintConfigOptions(repository=Path("r.db"), containers=[Path("absent")]))
    assert info.value.code == Code.GENERIC_FAILURE
    assert "Cannot read directory" in capsys.readouterr().err


def _sync_setup(workdir, old):
    (workdir / "pkg").mkdir()
    (workdir / "pkg" / "PKGBUILD").write_text("")
    (workdir / "pkg" / ".SRCINFO").write_text(old)
    _write_manifest(workdir, ["pkg"])


def _makepkg_output(content, returncode=0):
    return mock.patch(
        "pacman_repo_builder.makepkg.subprocess.run",
        return_value=subprocess.CompletedProcess([], returncode, content.encode(), b""),
    )


def test_sync_srcinfo_up_to_date(workdir, capsys):
    new = _srcinfo("pkg")
    _sync_setup(workdir, new.replace("\n", "  \n\n"))
    with _makepkg_output(new):
        sync_srcinfo(False)
    assert capsys.readouterr().out == ""


def test_sync_srcinfo_out_of_sync(workdir, capsys):
    _sync_setup(workdir, _srcinfo("pkg"))
    with _makepkg_output(_srcinfo("pkg", pkgver="2.0")):
        with pytest.raises(Failure) as info:
            sync_srcinfo(False)
    assert info.value.code == Code.SRCINFO_OUT_OF_SYNC
    assert capsys.readouterr().out.splitlines() == ["pkg"]
    assert (workdir / "pkg" / ".SRCINFO").read_text() == _srcinfo("pkg")


def test_sync_srcinfo_update(workdir, capsys):
    _sync_setup(workdir, _srcinfo("pkg"))
    new = _srcinfo("pkg", pkgver="2.0")
    with _makepkg_output(new):
        sync_srcinfo(True)
    assert capsys.readouterr().out.splitlines() == ["pkg"]
    assert (workdir / "pkg" / ".SRCINFO").read_text() == new


def test_sync_srcinfo_makepkg_failure(workdir):
    _sync_setup(workdir, _srcinfo("pkg"))
    with _makepkg_output("", returncode=1):
        with pytest.raises(Failure) as info:
            sync_srcinfo(False)
    assert info.value.code == Code.GENERIC_FAILURE


def test_sync_srcinfo_skips_without_pkgbuild(workdir, capsys):
    _make_packages(workdir, {"only": _srcinfo("only")})
    sync_srcinfo(False)
    assert capsys.readouterr().out == ""


def test_deref_db(workdir):
    repo = workdir / "repo"
    repo.mkdir()
    (repo / "repo.db.tar.gz").write_bytes(b"database")
    os.symlink("repo.db.tar.gz", repo / "repo.db")
    _write_manifest(workdir, [])
    result = deref_db()
    assert result is None
    assert not (repo / "repo.db").is_symlink()
    assert (repo / "repo.db").read_bytes() == b"database"
    assert (repo / "repo.db.tar.gz").read_bytes() == b"database"


def test_deref_db_bad_manifest(workdir):
    (workdir / "build-pacman-repo.yaml").write_text("global-settings: 3\nmembers: []\n")
    with pytest.raises(Failure) as info:
        deref_db()
    assert info.value.code == Code.MANIFEST_LOADING_FAILURE