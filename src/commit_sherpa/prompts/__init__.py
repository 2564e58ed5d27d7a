"""Prompts module - 프롬프트 템플릿 로더."""

from pathlib import Path

PROMPTS_DIR = Path(__file__).parent


def load_prompt(name: str, **kwargs: str | int | float | list[str]) -> str:
    """프롬프트 템플릿 로드 및 변수 치환.

    템플릿은 str.format 문법을 쓰므로 JSON 예시의 중괄호는 `{{ }}`로 적는다.

    Args:
        name: 프롬프트 이름 (예: "commit/conventional")
        **kwargs: 템플릿 변수. 리스트는 줄바꿈으로 이어 붙인다.

    Returns:
        포맷된 프롬프트 문자열

    Raises:
        FileNotFoundError: 프롬프트 파일이 존재하지 않는 경우
        KeyError: 필수 템플릿 변수가 누락된 경우
    """
    prompt_path = PROMPTS_DIR / f"{name}.md"
    if not prompt_path.exists():
        raise FileNotFoundError(f"Prompt template not found: {name}.md")

    template = prompt_path.read_text(encoding="utf-8")
    values = {}
    for key, value in kwargs.items():
        if isinstance(value, list):
            value = "\n".join(str(item) for item in value)
        values[key] = value

    try:
        return template.format(**values)
    except KeyError as e:
        raise KeyError(f"Missing template variable: {e}") from e


def get_available_prompts() -> list[str]:
    """사용 가능한 프롬프트 이름 목록 (예: ["commit/conventional", ...])."""
    return sorted(
        str(path.relative_to(PROMPTS_DIR).with_suffix("")).replace("\\", "/")
        for path in PROMPTS_DIR.rglob("*.md")
    )
