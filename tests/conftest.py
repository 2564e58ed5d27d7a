"""Pytest configuration and shared fixtures."""

import subprocess
from pathlib import Path

import pytest


def run_git(repo: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repo, check=True, capture_output=True, text=True
    )
    return result.stdout


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """커밋 하나가 있는 테스트용 Git 저장소."""
    repo_path = tmp_path / "test_repo"
    repo_path.mkdir()

    run_git(repo_path, "init")
    run_git(repo_path, "config", "user.email", "test@example.com")
    run_git(repo_path, "config", "user.name", "Test User")
    # GPG 서명 비활성화 (테스트 환경용)
    run_git(repo_path, "config", "commit.gpgsign", "false")
    run_git(repo_path, "config", "tag.gpgsign", "false")

    (repo_path / "main.py").write_text("print('hello')\n")
    (repo_path / "README.md").write_text("# Test\n")

    run_git(repo_path, "add", ".")
    run_git(repo_path, "commit", "-m", "Initial commit")
    return repo_path


@pytest.fixture
def sample_config() -> dict:
    """Sample configuration for testing."""
    return {
        "llm": {
            "provider": "anthropic",
            "model": "claude-3-5-haiku-latest",
            "api_key_env": "ANTHROPIC_API_KEY",
            "max_tokens": 800,
            "temperature": 0.2,
            "requests_per_minute": 5,
        },
        "diff": {
            "max_chunk_size": 2000,
            "max_files": 5,
            "ignore_files": ["*.lock"],
        },
        "message": {
            "style": "simple",
            "language": "en",
        },
        "version": {
            "push": True,
        },
        "output": {
            "default_format": "json",
            "color": False,
        },
    }
