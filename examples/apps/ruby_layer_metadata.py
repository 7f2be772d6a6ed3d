"""Decide whether a cached Ruby layer can be reused, and say why not."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import cachekit


def diff_os(old: "RubyLayerMetadata", new: "RubyLayerMetadata") -> list[str]:
    before = f"{old.distro_name} {old.distro_version}"
    after = f"{new.distro_name} {new.distro_version}"
    if before == after:
        return []
    return [f"OS ({before} to {after})"]


@cachekit.cache_diff(custom=diff_os, value_style="backtick")
@dataclass
class RubyLayerMetadata:
    ruby_version: str = cachekit.cache_field(rename="Ruby version")
    cpu_architecture: str = cachekit.cache_field(rename="CPU architecture")
    install_dir: Path = cachekit.cache_field(default=Path("/layers/ruby"), display=lambda path: path.as_posix())
    distro_name: str = cachekit.cache_field(default="ubuntu", ignore="custom")
    distro_version: str = cachekit.cache_field(default="22.04", ignore="custom")
    written_at: str = cachekit.cache_field(default="", ignore="timestamps do not affect the cache")


def reuse_or_clear(cached: RubyLayerMetadata, current: RubyLayerMetadata) -> list[str]:
    changes = current.diff(cached)
    if not changes:
        print("Using cache")
        return changes
    print("Clearing cache due to:")
    for change in changes:
        print(f"  - {change}")
    return changes


def main() -> None:
    cached = RubyLayerMetadata(
        ruby_version="3.3.0",
        cpu_architecture="amd64",
        written_at="2026-01-01T00:00:00Z",
    )
    same = RubyLayerMetadata(
        ruby_version="3.3.0",
        cpu_architecture="amd64",
        written_at="2026-02-01T00:00:00Z",
    )
    upgraded = RubyLayerMetadata(
        ruby_version="3.4.0",
        cpu_architecture="amd64",
        distro_version="24.04",
    )

    assert reuse_or_clear(cached, same) == []
    assert reuse_or_clear(cached, upgraded) == [
        "Ruby version (`3.3.0` to `3.4.0`)",
        "OS (ubuntu 22.04 to ubuntu 24.04)",
    ]


if __name__ == "__main__":
    main()
