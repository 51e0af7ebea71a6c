import os
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest


@pytest.fixture
def tmp_git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repository."""
    subprocess.run(
        ["git", "init", str(tmp_path)],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(tmp_path), "config", "user.name", "Test User"],
        capture_output=True, check=True,
    )
    subprocess.run(
        ["git", "-C", str(tmp_path), "config", "user.email", "test@example.com"],
        capture_output=True, check=True,
    )
    return tmp_path


def _commit_env(days_ago: int, author_name: str, author_email: str) -> dict[str, str]:
    date = datetime.now(timezone.utc) - timedelta(days=days_ago)
    date_str = date.strftime("%Y-%m-%dT%H:%M:%S %z")
    return {
        **os.environ,
        "GIT_AUTHOR_DATE": date_str,
        "GIT_COMMITTER_DATE": date_str,
        "GIT_AUTHOR_NAME": author_name,
        "GIT_AUTHOR_EMAIL": author_email,
        "GIT_COMMITTER_NAME": author_name,
        "GIT_COMMITTER_EMAIL": author_email,
    }


def commit_files(
    repo: Path,
    files: dict[str, str | bytes | None],
    message: str,
    days_ago: int = 0,
    author_name: str = "Test User",
    author_email: str = "test@example.com",
) -> None:
    """Create a single commit touching several files at a known relative date.

    A ``None`` content deletes the file; ``bytes`` content is written as-is.
    """
    for file_path, content in files.items():
        full_path = repo / file_path
        if content is None:
            subprocess.run(
                ["git", "-C", str(repo), "rm", "-q", file_path],
                capture_output=True, check=True,
            )
            continue
        full_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            full_path.write_bytes(content)
        else:
            full_path.write_text(content)
        subprocess.run(
            ["git", "-C", str(repo), "add", file_path],
            capture_output=True, check=True,
        )

    subprocess.run(
        ["git", "-C", str(repo), "commit", "-m", message],
        capture_output=True, check=True,
        env=_commit_env(days_ago, author_name, author_email),
    )


def commit_file(
    repo: Path,
    file_path: str,
    content: str | bytes | None,
    message: str,
    days_ago: int = 0,
    author_name: str = "Test User",
    author_email: str = "test@example.com",
) -> None:
    """Create a commit at a known relative date."""
    commit_files(
        repo, {file_path: content}, message,
        days_ago=days_ago, author_name=author_name, author_email=author_email,
    )


def head_hash(repo: Path) -> str:
    result = subprocess.run(
        ["git", "-C", str(repo), "rev-parse", "HEAD"],
        capture_output=True, check=True, text=True,
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo_with_history(tmp_git_repo: Path) -> Path:
    """Create a repo with 5 commits across 3 files over 60 days.

    Newest first: Update README, Fix crash in main, Add utils, Add main,
    Initial commit (root, so its diff cannot be resolved).
    """
    commit_file(tmp_git_repo, "README.md", "# Project\n", "Initial commit", days_ago=60)
    commit_file(tmp_git_repo, "src/main.py", "print('hello')\n", "Add main", days_ago=45)
    commit_file(tmp_git_repo, "src/utils.py", "def helper(): pass\n", "Add utils", days_ago=30)
    commit_file(
        tmp_git_repo, "src/main.py", "print('hello world')\n", "Fix crash in main",
        days_ago=15,
    )
    commit_file(
        tmp_git_repo, "README.md", "# Project\nUpdated.\n", "Update README", days_ago=5,
    )
    return tmp_git_repo


@pytest.fixture
def multi_author_repo(tmp_git_repo: Path) -> Path:
    """Create a repo with 3 authors, 3 files, 9 commits.

    Alice: dominates main.py (3 commits), 1 utils.py commit
    Bob:   1 main.py bug fix, dominates config.py (2 commits)
    Carol: 1 utils.py commit, 1 config.py commit
    """
    commit_file(tmp_git_repo, "main.py", "print('v1')\n", "Alice: create main",
                days_ago=30, author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "main.py", "print('v2')\n", "Alice: update main",
                days_ago=25, author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "main.py", "print('v3')\n", "Alice: update main again",
                days_ago=20, author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "main.py", "print('v4')\n", "Bob: fix typo in main",
                days_ago=18, author_name="Bob", author_email="bob@example.com")
    commit_file(tmp_git_repo, "utils.py", "def util(): pass\n", "Alice: add utils",
                days_ago=15, author_name="Alice", author_email="alice@example.com")
    commit_file(tmp_git_repo, "utils.py", "def util(): pass\ndef other(): pass\n",
                "Carol: add to utils", days_ago=12,
                author_name="Carol", author_email="carol@example.com")
    commit_file(tmp_git_repo, "config.py", "DEBUG=True\n", "Bob: create config",
                days_ago=10, author_name="Bob", author_email="bob@example.com")
    commit_file(tmp_git_repo, "config.py", "DEBUG=False\n", "Bob: update config",
                days_ago=5, author_name="Bob", author_email="bob@example.com")
    commit_file(tmp_git_repo, "config.py", "DEBUG=False\nVERBOSE=True\n",
                "Carol: touch config", days_ago=2,
                author_name="Carol", author_email="carol@example.com")
    return tmp_git_repo


@pytest.fixture
def change_kind_repo(tmp_git_repo: Path) -> Path:
    """Repo whose last commit adds, edits, deletes and binary-updates files."""
    commit_files(
        tmp_git_repo,
        {
            "keep.py": "a = 1\nb = 2\n",
            "gone.py": "x = 1\ny = 2\n",
            "logo.png": b"\x89PNG\r\n\x1a\n" + b"\x00" * 64,
        },
        "Initial commit",
        days_ago=10,
    )
    commit_files(
        tmp_git_repo,
        {"keep.py": "a = 1\nb = 3\n", "placeholder.txt": "seed\n"},
        "Tweak keep",
        days_ago=8,
    )
    commit_files(
        tmp_git_repo,
        {
            "new.py": "print('new')\nprint('more')\n",
            "keep.py": "a = 10\nb = 3\nc = 4\n",
            "gone.py": None,
            "logo.png": b"\x89PNG\r\n\x1a\n" + b"\x00\x01" * 32,
        },
        "Reshape modules",
        days_ago=5,
    )
    return tmp_git_repo
