# pacman-repo-builder

Tools for managing a custom pacman repository that is built from a collection
of PKGBUILD directories.

The commands read a manifest named `build-pacman-repo.yaml` in the current
directory. The manifest names the repository database, the build directories
that belong to the repository, and settings that apply either to every member
or to one member. When the manifest file does not exist, an empty manifest is
used.

## Installation

```sh
pip install .
```

This installs the `build-pacman-repo` command. It needs Python 3.10 or later
and PyYAML. Commands that read build information from a `PKGBUILD` run
`makepkg --printsrcinfo`, so `makepkg` must be on the `PATH` for them.

## Manifest

```yaml
global-settings:
  repository: repo/repo.db.tar.gz
  container: container
  read-build-metadata: either
  record-failed-builds: failed-builds.yaml
  arch-filter: [x86_64, i686]
  check: enabled
  packager: Bob <bob@example.com>
  dereference-database-symlinks: true
members:
  - directory: foo
  - directory: bar
    force-rebuild: true
    check: disabled
```

A member's own setting takes precedence over the global one. When
`container` is set, each member directory is taken relative to it.

- `read-build-metadata` is `srcinfo`, `pkgbuild` or `either` (the default).
  It decides whether package information comes from `.SRCINFO`, from running
  `makepkg --printsrcinfo`, or from `.SRCINFO` when present and `PKGBUILD`
  otherwise.
- `arch-filter` is either `any` or a list of architectures. Packages built
  for the `any` architecture always pass the filter.
- `check` is `enabled`, `disabled` or `inherit`.
- `record-failed-builds` names a YAML file listing package files (with
  `pkgname`, `version` and `arch`) whose builds failed; `outdated` does not
  report them. A missing or unparsable record counts as empty.

## Commands

### sort

Print every pkgbase of the manifest, one per line, with the packages it
depends on before it:

```sh
build-pacman-repo sort
```

A dependency cycle is reported on standard error and the command exits with
status 1.

### outdated

List packages whose files (`pkgname-version-arch.pkg.tar.zst`) are missing
from the directory of the repository database, leaving out those in the
failed build record:

```sh
build-pacman-repo outdated --details pkgname
```

`--details` chooses the output: `pkgname`, `pkg-file-path` (the default),
`lossy-yaml` or `strict-yaml`. The two YAML forms print one document per
package with `file-name`, `pkgname`, `version` and `arch`; the strict form
quotes every value.

### print-config

Print a manifest that lists every directory found inside one or more
container directories:

```sh
build-pacman-repo print-config --repository repo/repo.db.tar.gz --container packages --require-pkgbuild
```

- `-T`, `--repository` (required): path of the repository database.
- `-D`, `--container`: a directory holding build directories; may be given
  more than once.
- `--require-pkgbuild`, `--require-srcinfo`: skip directories without a
  `PKGBUILD` or a `.SRCINFO` file. They also set `read-build-metadata`.
- `--with-record-failed-builds PATH`, `--with-arch-filter ARCH` (repeatable),
  `--with-check enabled|disabled|inherit`, `--with-pacman NAME`,
  `--with-packager TEXT`, and `--with-install-missing-dependencies`,
  `--with-clean-before-build`, `--with-clean-after-build`,
  `--with-force-rebuild`, `--with-allow-failure`,
  `--with-dereference-database-symlinks`, each taking `true` or `false`:
  fill in the matching global settings.

Members are listed in sorted order of their directories.

### sync-srcinfo

Compare each member's `.SRCINFO` with the output of `makepkg --printsrcinfo`
(ignoring blank lines and trailing spaces) and print the directories that
differ:

```sh
build-pacman-repo sync-srcinfo --update
```

Members without a `PKGBUILD` are passed over unless their
`read-build-metadata` is `pkgbuild`. Without `--update` the command exits with
status 3 if any directory is out of sync. With `--update` (or `-u`) the stale
`.SRCINFO` files are rewritten.

### deref-db

Replace every symbolic link named `*.db` or `*.files` in the directory of the
repository database with a copy of the file it points to:

```sh
build-pacman-repo deref-db
```

## Exit status

| Code | Meaning                                             |
|------|-----------------------------------------------------|
| 0    | success                                             |
| 1    | generic failure, including invalid arguments        |
| 2    | the manifest could not be loaded                    |
| 3    | `.SRCINFO` files are out of sync                    |
| 6    | the failed build record could not be read           |

When a file operation fails, the command exits with the operating system's
error number.

## What it does not do

This package does not build packages. It does not run `makepkg` to produce
package files, install missing dependencies, add packages to the repository
database with `repo-add`, or write the failed build record. It has no command
for fetching build directories from the AUR and none for replacing the
system's `makepkg`.

## Using it from Python

The modules can also be used directly, for example:

- `pacman_repo_builder.manifest.BuildPacmanRepo.from_file(path)` loads a
  manifest, and `resolve_members()` yields members with global settings filled in.
- `pacman_repo_builder.srcinfo.SrcInfo(text)` reads fields such as
  `pkgbase()`, `pkgname()`, `version()` and `depends()` from `.SRCINFO` text.
- `pacman_repo_builder.version.vercmp(left, right)` compares two version
  strings and returns -1, 0 or 1.
- `pacman_repo_builder.database.Database` collects build information and
  gives a `build_order()`.
- `pacman_repo_builder.cli.main(argv)` runs the command line and returns its
  exit code.

## Development

```sh
pip install -e '.[test]'
pytest
```