"""Configuration management - YAML 설정 로더 및 스키마."""

import logging
import os
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = (".commit-sherpa.yaml", ".commit-sherpa.yml")
MESSAGE_STYLES = ("conventional", "simple", "detailed")
MESSAGE_LANGUAGES = ("en", "ko")
OUTPUT_FORMATS = ("console", "json", "markdown")
LLM_PROVIDERS = ("openai", "anthropic")


@dataclass
class LLMConfig:
    """LLM 설정."""

    provider: str = "openai"
    model: str | None = None
    api_key_env: str | None = None
    max_tokens: int = 1000
    temperature: float = 0.3
    requests_per_minute: int = 10


@dataclass
class DiffConfig:
    """diff 처리 설정."""

    max_chunk_size: int = 4000
    max_files: int = 20
    include_staged: bool = True
    ignore_files: list[str] = field(
        default_factory=lambda: [
            "*.lock",
            "package-lock.json",
            "yarn.lock",
            "go.sum",
            "*.min.js",
            "*.min.css",
            "*.log",
        ]
    )
    max_diff_size: int = 10000


@dataclass
class MessageConfig:
    """커밋 메시지 설정."""

    style: str = "conventional"
    max_subject_length: int = 50
    max_body_line_length: int = 72
    language: str = "en"
    enforce_imperative: bool = True
    enforce_capitalization: bool = True
    require_body: bool = False


@dataclass
class VersionConfig:
    """태그 생성 설정."""

    annotated: bool = True
    push: bool = False
    message: str = "Release {version}"


@dataclass
class OutputConfig:
    """출력 설정."""

    default_format: str = "console"
    color: bool = True


@dataclass
class AppConfig:
    """애플리케이션 전체 설정."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    diff: DiffConfig = field(default_factory=DiffConfig)
    message: MessageConfig = field(default_factory=MessageConfig)
    version: VersionConfig = field(default_factory=VersionConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _coerce(name: str, key: str, value: Any, default: Any) -> Any:
    """기본값의 타입에 맞는지 확인. float 필드는 정수도 받는다."""
    if value is None and default is None:
        return value
    if isinstance(default, bool):
        ok = isinstance(value, bool)
    elif isinstance(default, float):
        ok = isinstance(value, int | float) and not isinstance(value, bool)
        value = float(value) if ok else value
    elif isinstance(default, int):
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif isinstance(default, list):
        ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
    else:
        ok = isinstance(value, str)

    if not ok:
        raise ValueError(f"설정 값의 타입이 올바르지 않음 ({name}.{key}): {value!r}")
    return value


def _section(cls: type, data: Any, name: str) -> Any:
    """딕셔너리를 섹션 dataclass로 변환. 모르는 키는 경고 후 무시."""
    if data is None:
        return cls()
    if not isinstance(data, dict):
        raise ValueError(f"설정 섹션 '{name}'은 매핑이어야 합니다")

    defaults = asdict(cls())
    unknown = set(data) - set(defaults)
    if unknown:
        logger.warning(f"알 수 없는 설정 키 무시 ({name}): {', '.join(sorted(unknown))}")
    return cls(
        **{
            k: _coerce(name, k, v, defaults[k])
            for k, v in data.items()
            if k in defaults
        }
    )


def _dict_to_config(data: dict[str, Any]) -> AppConfig:
    """딕셔너리를 AppConfig로 변환."""
    return AppConfig(
        llm=_section(LLMConfig, data.get("llm"), "llm"),
        diff=_section(DiffConfig, data.get("diff"), "diff"),
        message=_section(MessageConfig, data.get("message"), "message"),
        version=_section(VersionConfig, data.get("version"), "version"),
        output=_section(OutputConfig, data.get("output"), "output"),
    )


def validate_config(config: AppConfig) -> None:
    """설정 값 검증.

    Raises:
        ValueError: 허용 범위를 벗어난 값이 있는 경우
    """
    if config.llm.provider.lower() not in LLM_PROVIDERS:
        raise ValueError(f"지원하지 않는 LLM 제공자: {config.llm.provider}")
    if config.llm.max_tokens <= 0:
        raise ValueError(f"max_tokens는 0보다 커야 합니다: {config.llm.max_tokens}")
    if not 0 <= config.llm.temperature <= 2:
        raise ValueError(
            f"temperature는 0에서 2 사이여야 합니다: {config.llm.temperature}"
        )
    if config.llm.requests_per_minute <= 0:
        raise ValueError(
            f"requests_per_minute는 0보다 커야 합니다: {config.llm.requests_per_minute}"
        )
    if config.message.style not in MESSAGE_STYLES:
        raise ValueError(f"지원하지 않는 메시지 스타일: {config.message.style}")
    if config.message.language not in MESSAGE_LANGUAGES:
        raise ValueError(f"지원하지 않는 메시지 언어: {config.message.language}")
    if config.output.default_format not in OUTPUT_FORMATS:
        raise ValueError(f"지원하지 않는 출력 형식: {config.output.default_format}")


def _search_paths() -> list[Path]:
    return [Path.cwd() / name for name in CONFIG_FILE_NAMES] + [
        get_global_config_path()
    ]


def load_config(config_path: Path | None = None) -> AppConfig:
    """설정 파일 로드.

    탐색 순서는 config_path, ./.commit-sherpa.yaml, ./.commit-sherpa.yml,
    ~/.config/commit-sherpa/config.yaml 이다. 읽을 수 없는 YAML이면 경고를
    남기고 기본값을 사용한다.

    Args:
        config_path: 설정 파일 경로. None이면 기본 경로 탐색.

    Returns:
        AppConfig 인스턴스

    Raises:
        ValueError: 설정 값이 허용 범위를 벗어난 경우
    """
    candidates = [config_path, *_search_paths()]

    for path in candidates:
        if not path or not path.exists():
            continue
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"설정 파일 읽기 실패, 기본값 사용: {path} ({e})")
            return AppConfig()
        if not isinstance(data, dict):
            logger.warning(f"설정 파일 형식이 올바르지 않음, 기본값 사용: {path}")
            return AppConfig()

        logger.debug(f"설정 파일 로드: {path}")
        config = _dict_to_config(data)
        validate_config(config)
        return config

    # 설정 파일 없으면 기본값 사용
    return AppConfig()


def get_config_path() -> Path | None:
    """현재 사용 중인 설정 파일 경로 반환."""
    for path in _search_paths():
        if path.exists():
            return path
    return None


def get_global_config_path() -> Path:
    """전역 설정 파일 경로 반환."""
    return Path.home() / ".config" / "commit-sherpa" / "config.yaml"


def save_config(config: AppConfig, path: Path) -> None:
    """설정을 YAML로 저장. 임시 파일에 쓴 뒤 교체한다.

    Args:
        config: 저장할 설정
        path: 저장 경로
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                config.to_dict(), f, default_flow_style=False, allow_unicode=True
            )
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def init_config(path: Path | None = None, force: bool = False) -> tuple[Path, bool]:
    """기본 설정 파일 생성.

    Args:
        path: 생성할 경로. None이면 ./.commit-sherpa.yaml
        force: True이면 기존 파일을 덮어쓴다.

    Returns:
        (경로, 새로 생성했는지 여부)
    """
    path = path or Path.cwd() / CONFIG_FILE_NAMES[0]
    if force:
        save_config(AppConfig(), path)
        return path, True

    path.parent.mkdir(parents=True, exist_ok=True)
    try:
        # 동시에 생성된 파일도 이미 있는 것으로 취급
        with open(path, "x", encoding="utf-8") as f:
            yaml.safe_dump(
                AppConfig().to_dict(), f, default_flow_style=False, allow_unicode=True
            )
    except FileExistsError:
        logger.info(f"설정 파일이 이미 존재합니다: {path}")
        return path, False
    return path, True
