"""Tests for the pass-backed secret store adapter.

subprocess.run is replaced by a recorder; filesystem queries run
against a real directory laid out like a password store.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from pass_sshkey.config import SshkeyConfig
from pass_sshkey.errors import AlreadyExists, SubprocessFailure
from pass_sshkey.lifecycle import KeyLifecycle
from pass_sshkey.store import PassStore

from conftest import FakeKeygen, FakePrompter


class Recorder:
    """Stands in for subprocess.run, answering from a script."""

    def __init__(self, returncode: int = 0, stdout=b"", stderr=b""):
        self.calls: list[tuple[list[str], dict]] = []
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.raise_exc: Exception | None = None

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs))
        if self.raise_exc:
            raise self.raise_exc
        if kwargs.get("capture_output"):
            return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)
        return subprocess.CompletedProcess(cmd, self.returncode)


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    root = tmp_path / ".password-store"
    (root / "work" / "github").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / ".gpg-id").write_text("ABCDEF\n")
    (root / "work" / "github" / "id_rsa.gpg").write_bytes(b"x")
    (root / "work" / "github" / "id_rsa.pub.gpg").write_bytes(b"x")
    (root / "work" / "github" / "passphrase.gpg").write_bytes(b"x")
    (root / ".git" / "stray.gpg").write_bytes(b"x")
    return root


@pytest.fixture
def pass_store(store_dir: Path) -> PassStore:
    return PassStore(SshkeyConfig(store_dir=store_dir, ssh_dir=store_dir.parent / ".ssh"))


@pytest.fixture
def recorder(monkeypatch) -> Recorder:
    rec = Recorder()
    monkeypatch.setattr("pass_sshkey.store.subprocess.run", rec)
    return rec


class TestFilesystemQueries:

    def test_initialized(self, pass_store, store_dir):
        assert pass_store.is_initialized()
        (store_dir / ".gpg-id").unlink()
        assert not pass_store.is_initialized()

    def test_exists(self, pass_store):
        assert pass_store.exists("work/github/id_rsa")
        assert not pass_store.exists("work/github/id_ed25519")

    def test_has_directory(self, pass_store):
        assert pass_store.has_directory("work/github")
        assert pass_store.has_directory("work")
        assert not pass_store.has_directory("work/github/id_rsa")
        assert not pass_store.has_directory("nonexistent/name")

    def test_location(self, pass_store, store_dir):
        assert pass_store.location("work/github/id_rsa") == str(
            store_dir / "work" / "github" / "id_rsa.gpg"
        )

    def test_leading_slash_stays_under_root(self, pass_store, store_dir):
        assert pass_store.has_directory("/work/github")
        assert pass_store.exists("/work/github/id_rsa")
        assert pass_store.location("/work/github/id_rsa") == str(
            store_dir / "work" / "github" / "id_rsa.gpg"
        )

    def test_list_entries_skips_git(self, pass_store):
        assert pass_store.list_entries() == [
            "work/github/id_rsa", "work/github/id_rsa.pub", "work/github/passphrase",
        ]

    def test_list_entries_missing_root(self, tmp_path):
        store = PassStore(SshkeyConfig(store_dir=tmp_path / "nope"))
        assert store.list_entries() == []

    def test_versioned(self, pass_store, store_dir):
        assert pass_store.is_versioned
        (store_dir / ".git" / "stray.gpg").unlink()
        (store_dir / ".git").rmdir()
        assert not pass_store.is_versioned


class TestPassCommands:

    def test_insert(self, pass_store, recorder, store_dir):
        pass_store.insert("work/github/id_rsa", b"PRIVATE\n")

        cmd, kwargs = recorder.calls[0]
        assert cmd == ["pass", "insert", "--multiline", "work/github/id_rsa"]
        assert kwargs["input"] == b"PRIVATE\n"
        assert kwargs["env"]["PASSWORD_STORE_DIR"] == str(store_dir)

    def test_insert_force(self, pass_store, recorder):
        pass_store.insert("n/passphrase", b"p\n", force=True)
        assert recorder.calls[0][0] == ["pass", "insert", "--multiline", "--force", "n/passphrase"]

    def test_generate(self, pass_store, recorder):
        pass_store.generate("n/passphrase", 32, force=True)
        assert recorder.calls[0][0] == ["pass", "generate", "--force", "n/passphrase", "32"]

    def test_show_strips_trailing_newline(self, pass_store, recorder):
        recorder.stdout = b"s3cret\n"
        assert pass_store.show("n/passphrase") == "s3cret"
        assert pass_store.show_bytes("n/passphrase") == b"s3cret\n"
        assert recorder.calls[0][0] == ["pass", "show", "n/passphrase"]

    def test_clip(self, pass_store, recorder):
        pass_store.clip("n/passphrase")
        assert recorder.calls[0][0] == ["pass", "show", "--clip", "n/passphrase"]

    def test_failure_raises(self, pass_store, recorder):
        recorder.returncode = 1
        recorder.stderr = b"gpg: decryption failed\n"

        with pytest.raises(SubprocessFailure, match="decryption failed") as excinfo:
            pass_store.show("n/passphrase")

        assert excinfo.value.returncode == 1
        assert excinfo.value.exit_code == 1

    def test_missing_binary(self, pass_store, recorder):
        recorder.raise_exc = FileNotFoundError("pass")

        with pytest.raises(SubprocessFailure) as excinfo:
            pass_store.show("n/passphrase")

        assert excinfo.value.returncode == 127

    def test_remove_forced_is_captured(self, pass_store, recorder):
        pass_store.remove("work/github", force=True)

        cmd, kwargs = recorder.calls[0]
        assert cmd == ["pass", "rm", "--recursive", "--force", "work/github"]
        assert kwargs.get("capture_output") is True

    def test_remove_unforced_is_interactive(self, pass_store, recorder):
        pass_store.remove("work/github")

        cmd, kwargs = recorder.calls[0]
        assert cmd == ["pass", "rm", "--recursive", "work/github"]
        assert "capture_output" not in kwargs

    def test_remove_declined(self, pass_store, recorder):
        recorder.returncode = 1

        with pytest.raises(SubprocessFailure) as excinfo:
            pass_store.remove("work/github")

        assert excinfo.value.exit_code == 1


class TestCommit:

    def test_commit(self, pass_store, recorder, store_dir):
        assert pass_store.commit(["work/github/id_rsa"], "Add ssh key-pair for work/github")

        add, commit = recorder.calls
        assert add[0] == [
            "git", "-C", str(store_dir), "add", str(store_dir / "work" / "github" / "id_rsa.gpg"),
        ]
        assert commit[0] == [
            "git", "-C", str(store_dir), "commit", "-m", "Add ssh key-pair for work/github",
        ]

    def test_commit_failure(self, pass_store, recorder):
        recorder.returncode = 1
        recorder.stderr = "nothing to commit"

        assert pass_store.commit(["a/id_rsa"], "msg") is False
        assert len(recorder.calls) == 1

    def test_git_missing(self, pass_store, recorder):
        recorder.raise_exc = FileNotFoundError("git")
        assert pass_store.commit(["a/id_rsa"], "msg") is False


class TestLifecycleOverPass:
    """The coordinator driving the real adapter for names with a leading slash."""

    def test_remove_leading_slash(self, pass_store, recorder, store_dir):
        lifecycle = KeyLifecycle(
            config=pass_store.config,
            store=pass_store,
            keygen=FakeKeygen(),
            prompter=FakePrompter(),
        )

        result = lifecycle.remove("/work/github", force=True)

        assert result.found
        assert recorder.calls[0][0] == ["pass", "rm", "--recursive", "--force", "work/github"]

    def test_generate_leading_slash_detects_existing(self, pass_store, recorder):
        lifecycle = KeyLifecycle(
            config=pass_store.config,
            store=pass_store,
            keygen=FakeKeygen(),
            prompter=FakePrompter(),
        )

        with pytest.raises(AlreadyExists) as excinfo:
            lifecycle.generate("/work/github", nopass=True)

        assert excinfo.value.location == pass_store.location("work/github/id_rsa")
        assert recorder.calls == []
