"""Tests for the copy engine (blocking API)."""

from __future__ import annotations

import os
import socket
import stat
from pathlib import Path

import pytest
from pydantic import ValidationError

from pathops import (
    COPYFILE_EXCL,
    AlreadyExistsError,
    CopyOptions,
    SameFileError,
    SelfSubdirectoryError,
    SourceIsDirectoryError,
    TypeMismatchError,
    UnsupportedFileTypeError,
    WouldBreakSourceError,
    copy,
)

from conftest import TreeBuilder, snapshot_tree


def _mode(path: Path) -> int:
    return stat.S_IMODE(path.lstat().st_mode)


class TestCopyFile:
    """Tests for copying single files."""

    def test_round_trip_bytes(self, tmp_path: Path) -> None:
        """Test the copy is byte-identical to the source."""
        src = tmp_path / "blob.bin"
        src.write_bytes(os.urandom(64 * 1024))
        dest = tmp_path / "copy.bin"

        copy(src, dest)

        assert dest.read_bytes() == src.read_bytes()

    def test_overwrite_policy_scenario(self, tmp_path: Path) -> None:
        """Test fresh copy, skip, error_on_exist and force in sequence."""
        src = tmp_path / "a.txt"
        src.write_text("hi")
        os.chmod(src, 0o644)
        dest = tmp_path / "b.txt"

        copy(src, dest)
        assert dest.read_text() == "hi"
        assert _mode(dest) == 0o644

        dest.write_text("local edit")
        copy(src, dest)
        assert dest.read_text() == "local edit"

        with pytest.raises(AlreadyExistsError):
            copy(src, dest, {"errorOnExist": True})

        copy(src, dest, CopyOptions(force=True))
        assert dest.read_text() == "hi"

    def test_already_exists_is_file_exists_error(self, tmp_path: Path) -> None:
        """Test AlreadyExistsError can be caught as FileExistsError."""
        src = tmp_path / "a.txt"
        src.write_text("hi")
        dest = tmp_path / "b.txt"
        dest.write_text("there")

        with pytest.raises(FileExistsError):
            copy(src, dest, CopyOptions(error_on_exist=True))

    def test_permission_bits_follow_source(self, tmp_path: Path) -> None:
        """Test the copy gets the source permission bits."""
        src = tmp_path / "script.sh"
        src.write_text("#!/bin/sh\n")
        os.chmod(src, 0o751)

        copy(src, tmp_path / "copy.sh")

        assert _mode(tmp_path / "copy.sh") == 0o751

    def test_creates_missing_parents(self, tmp_path: Path) -> None:
        """Test missing destination parents are created."""
        src = tmp_path / "a.txt"
        src.write_text("hi")
        dest = tmp_path / "x" / "y" / "z" / "a.txt"

        copy(src, dest)

        assert dest.read_text() == "hi"

    def test_onto_itself(self, tmp_path: Path) -> None:
        """Test copying a file onto itself raises SameFileError."""
        src = tmp_path / "a.txt"
        src.write_text("hi")

        with pytest.raises(SameFileError):
            copy(src, src)

    def test_onto_directory(self, tmp_path: Path) -> None:
        """Test a file cannot overwrite a directory."""
        src = tmp_path / "a.txt"
        src.write_text("hi")
        (tmp_path / "dir").mkdir()

        with pytest.raises(TypeMismatchError):
            copy(src, tmp_path / "dir")

    def test_missing_source(self, tmp_path: Path) -> None:
        """Test a missing source raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            copy(tmp_path / "missing", tmp_path / "dest")

    def test_preserve_timestamps(self, tmp_path: Path) -> None:
        """Test preserve_timestamps copies access and modify times."""
        src = tmp_path / "old.txt"
        src.write_text("old")
        os.utime(src, ns=(1_600_000_000 * 10**9, 1_500_000_000 * 10**9))
        dest = tmp_path / "new.txt"

        copy(src, dest, CopyOptions(preserve_timestamps=True))

        src_after = src.stat()
        dest_stat = dest.stat()
        assert dest_stat.st_mtime_ns == 1_500_000_000 * 10**9
        assert dest_stat.st_atime_ns == src_after.st_atime_ns

    def test_timestamps_not_preserved_by_default(self, tmp_path: Path) -> None:
        """Test timestamps are fresh unless asked otherwise."""
        src = tmp_path / "old.txt"
        src.write_text("old")
        os.utime(src, ns=(1_500_000_000 * 10**9, 1_500_000_000 * 10**9))

        copy(src, tmp_path / "new.txt")

        assert (tmp_path / "new.txt").stat().st_mtime_ns != 1_500_000_000 * 10**9

    def test_preserve_timestamps_on_read_only_source(self, tmp_path: Path) -> None:
        """Test timestamps are set even when the source is read-only."""
        src = tmp_path / "locked.txt"
        src.write_text("locked")
        os.utime(src, ns=(1_500_000_000 * 10**9, 1_500_000_000 * 10**9))
        os.chmod(src, 0o444)
        dest = tmp_path / "copy.txt"

        copy(src, dest, CopyOptions(preserve_timestamps=True))

        assert dest.stat().st_mtime_ns == 1_500_000_000 * 10**9
        assert _mode(dest) == 0o444

    @pytest.mark.skipif(not os.path.exists("/dev/null"), reason="needs /dev/null")
    def test_char_device_is_copied_as_file(self, tmp_path: Path) -> None:
        """Test a character device is copied by content."""
        dest = tmp_path / "null-copy"

        copy("/dev/null", dest)

        assert dest.is_file()
        assert dest.read_bytes() == b""

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs FIFO support")
    def test_fifo_is_rejected(self, tmp_path: Path) -> None:
        """Test a FIFO raises UnsupportedFileTypeError."""
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)

        with pytest.raises(UnsupportedFileTypeError, match="FIFO"):
            copy(fifo, tmp_path / "pipe-copy")

    @pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="needs unix sockets")
    def test_socket_is_rejected(self, tmp_path: Path) -> None:
        """Test a socket raises UnsupportedFileTypeError."""
        sock_path = tmp_path / "s.sock"
        server = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            server.bind(str(sock_path))
            with pytest.raises(UnsupportedFileTypeError, match="socket"):
                copy(sock_path, tmp_path / "s-copy")
        finally:
            server.close()

    def test_unknown_copy_flags_rejected(self) -> None:
        """Test unknown mode bits fail validation."""
        with pytest.raises(ValidationError):
            CopyOptions(mode=8)

    def test_excl_flag_on_fresh_destination(self, tmp_path: Path) -> None:
        """Test COPYFILE_EXCL copies when the destination is absent."""
        src = tmp_path / "a.txt"
        src.write_text("hi")

        copy(src, tmp_path / "b.txt", CopyOptions(mode=COPYFILE_EXCL))

        assert (tmp_path / "b.txt").read_text() == "hi"


class TestCopyDirectory:
    """Tests for recursive directory copies."""

    def test_tree_is_reproduced(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test structure, content and modes of a tree are reproduced."""
        dest = tmp_path / "dest"

        copy(sample_tree, dest)

        assert snapshot_tree(dest) == snapshot_tree(sample_tree)

    def test_new_directory_takes_source_mode(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test a created directory gets the source directory mode."""
        os.chmod(sample_tree, 0o705)
        dest = tmp_path / "dest"

        copy(sample_tree, dest)

        assert _mode(dest) == 0o705
        assert _mode(dest / "sub") == 0o750

    def test_merges_into_existing_directory(
        self, sample_tree: Path, tmp_path: Path, build_tree: TreeBuilder
    ) -> None:
        """Test copying into an existing directory keeps its other entries."""
        dest = build_tree(tmp_path / "dest", {"keep.txt": "mine", "a.txt": "stale"})

        copy(sample_tree, dest)

        assert (dest / "keep.txt").read_text() == "mine"
        assert (dest / "a.txt").read_text() == "stale"
        assert (dest / "sub" / "b.txt").read_text() == "beta"

    def test_merge_with_force_overwrites_files(
        self, sample_tree: Path, tmp_path: Path, build_tree: TreeBuilder
    ) -> None:
        """Test force overwrites clashing files during a merge."""
        dest = build_tree(tmp_path / "dest", {"keep.txt": "mine", "a.txt": "stale"})

        copy(sample_tree, dest, CopyOptions(force=True))

        assert (dest / "keep.txt").read_text() == "mine"
        assert (dest / "a.txt").read_text() == "alpha"

    def test_non_recursive_rejects_directory(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test recursive=False refuses a directory source."""
        with pytest.raises(SourceIsDirectoryError) as exc_info:
            copy(sample_tree, tmp_path / "dest", CopyOptions(recursive=False))
        assert isinstance(exc_info.value, IsADirectoryError)
        assert not (tmp_path / "dest").exists()

    def test_into_own_subdirectory(self, sample_tree: Path) -> None:
        """Test copying a directory into itself raises SelfSubdirectoryError."""
        with pytest.raises(SelfSubdirectoryError):
            copy(sample_tree, sample_tree / "sub" / "nested")

    def test_into_own_subdirectory_through_symlink(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test nesting is detected through a symlinked ancestor."""
        alias = tmp_path / "alias"
        alias.symlink_to(sample_tree, target_is_directory=True)

        with pytest.raises(SelfSubdirectoryError):
            copy(sample_tree, alias / "sub" / "nested")

    def test_directory_over_file(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test a directory cannot overwrite a file."""
        (tmp_path / "file").write_text("x")

        with pytest.raises(TypeMismatchError):
            copy(sample_tree, tmp_path / "file")

    def test_filter_skips_entries(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test the filter sees every pair and can skip subtrees."""
        seen: list[tuple[str, str]] = []

        def no_binaries(src: str, dest: str) -> bool:
            seen.append((src, dest))
            return not src.endswith(".bin")

        dest = tmp_path / "dest"
        copy(sample_tree, dest, CopyOptions(filter=no_binaries))

        assert (dest / "sub" / "b.txt").exists()
        assert (dest / "sub" / "deep").is_dir()
        assert not (dest / "sub" / "deep" / "c.bin").exists()
        assert (str(sample_tree), str(dest)) in seen

    def test_filter_rejecting_root_copies_nothing(self, sample_tree: Path, tmp_path: Path) -> None:
        """Test a rejected root leaves the destination untouched."""
        copy(sample_tree, tmp_path / "dest", {"filter": lambda s, d: False})

        assert not (tmp_path / "dest").exists()

    def test_read_only_directory(self, tmp_path: Path, build_tree: TreeBuilder) -> None:
        """Test a read-only source directory is still filled in."""
        src = build_tree(tmp_path / "ro", {"f.txt": "x"})
        os.chmod(src, 0o555)
        try:
            copy(src, tmp_path / "dest")
        finally:
            os.chmod(src, 0o755)

        assert (tmp_path / "dest" / "f.txt").read_text() == "x"
        assert _mode(tmp_path / "dest") == 0o555
        os.chmod(tmp_path / "dest", 0o755)


class TestCopySymlink:
    """Tests for copying symbolic links."""

    def test_relative_target_becomes_absolute(self, tmp_path: Path, build_tree: TreeBuilder) -> None:
        """Test relative link targets are resolved against the link."""
        src = build_tree(tmp_path / "src", {"target.txt": "t"})
        (src / "link").symlink_to("target.txt")

        copy(src, tmp_path / "dest")

        assert os.readlink(tmp_path / "dest" / "link") == str(src / "target.txt")

    def test_verbatim_symlinks(self, tmp_path: Path, build_tree: TreeBuilder) -> None:
        """Test verbatim_symlinks keeps the target text as-is."""
        src = build_tree(tmp_path / "src", {"target.txt": "t"})
        (src / "link").symlink_to("target.txt")

        copy(src, tmp_path / "dest", CopyOptions(verbatim_symlinks=True))

        assert os.readlink(tmp_path / "dest" / "link") == "target.txt"
        assert (tmp_path / "dest" / "link").read_text() == "t"

    def test_dereference_copies_content(self, tmp_path: Path) -> None:
        """Test dereference copies the target instead of the link."""
        target = tmp_path / "target.txt"
        target.write_text("content")
        link = tmp_path / "link"
        link.symlink_to(target)
        dest = tmp_path / "dest"

        copy(link, dest, CopyOptions(dereference=True))

        assert not dest.is_symlink()
        assert dest.read_text() == "content"

    def test_dangling_link_is_copied(self, tmp_path: Path) -> None:
        """Test a dangling link is copied as a link."""
        link = tmp_path / "dangling"
        link.symlink_to(tmp_path / "nowhere")

        copy(link, tmp_path / "copy")

        assert os.readlink(tmp_path / "copy") == str(tmp_path / "nowhere")

    def test_replaces_existing_link(self, tmp_path: Path) -> None:
        """Test an existing destination link is repointed."""
        (tmp_path / "one").write_text("1")
        (tmp_path / "two").write_text("2")
        src = tmp_path / "src-link"
        src.symlink_to(tmp_path / "one")
        dest = tmp_path / "dest-link"
        dest.symlink_to(tmp_path / "two")

        copy(src, dest)

        assert os.readlink(dest) == str(tmp_path / "one")

    def test_replaces_regular_file(self, tmp_path: Path) -> None:
        """Test an existing regular file is replaced by the link."""
        (tmp_path / "one").write_text("1")
        src = tmp_path / "src-link"
        src.symlink_to(tmp_path / "one")
        dest = tmp_path / "plain.txt"
        dest.write_text("plain")

        copy(src, dest)

        assert dest.is_symlink()
        assert os.readlink(dest) == str(tmp_path / "one")

    def test_link_into_its_own_target(self, tmp_path: Path) -> None:
        """Test a link cannot be copied into the tree it points to."""
        (tmp_path / "x" / "y").mkdir(parents=True)
        src = tmp_path / "src-link"
        src.symlink_to(tmp_path / "x")
        dest = tmp_path / "dest-link"
        dest.symlink_to(tmp_path / "x" / "y")

        with pytest.raises(SelfSubdirectoryError):
            copy(src, dest)

    def test_overwrite_would_break_source(self, tmp_path: Path) -> None:
        """Test replacing a link that holds the source target fails."""
        (tmp_path / "d" / "sub").mkdir(parents=True)
        src = tmp_path / "src-link"
        src.symlink_to(tmp_path / "d" / "sub")
        dest = tmp_path / "dest-link"
        dest.symlink_to(tmp_path / "d")

        with pytest.raises(WouldBreakSourceError):
            copy(src, dest)
        assert os.readlink(dest) == str(tmp_path / "d")

    def test_same_target_is_refreshed(self, tmp_path: Path) -> None:
        """Test links with equal targets are refreshed without error."""
        (tmp_path / "d").mkdir()
        src = tmp_path / "src-link"
        src.symlink_to(tmp_path / "d")
        dest = tmp_path / "dest-link"
        dest.symlink_to(tmp_path / "d")

        copy(src, dest)

        assert os.readlink(dest) == str(tmp_path / "d")
