"""Conventional commit 메시지 포매터."""

import re
from dataclasses import dataclass

from commit_sherpa.shared.models import CommitMessage

_SENTENCE_BREAK = re.compile(r"([.!?])[.!?]*\s+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


@dataclass
class FormatterConfig:
    """포매터 설정."""

    max_subject_length: int = 50
    max_body_line_length: int = 72
    auto_wrap_body: bool = True
    break_on_sentence: bool = True
    enforce_blank_line: bool = True


class MessageFormatter:
    """CommitMessage를 conventional commit 텍스트로 렌더링."""

    def __init__(self, config: FormatterConfig | None = None) -> None:
        self.config = config or FormatterConfig()

    def format(self, message: CommitMessage) -> str:
        """제목, 본문, footer를 빈 줄로 구분해 렌더링.

        Args:
            message: 구조화된 커밋 메시지

        Returns:
            포맷된 커밋 메시지 텍스트
        """
        parts = [self.format_subject(message)]

        body = self.format_body(message.body)
        if body:
            parts.append(body)
        if message.footer.strip():
            parts.append(message.footer.strip())

        separator = "\n\n" if self.config.enforce_blank_line else "\n"
        return separator.join(parts)

    def format_subject(self, message: CommitMessage) -> str:
        """`type(scope)!: Description` 제목 생성.

        설명의 첫 글자는 대문자, 끝의 마침표는 제거하고 전체 길이가
        max_subject_length를 넘으면 단어 경계에서 자른다.
        """
        prefix = ""
        if message.type:
            prefix = message.type.lower()
            if message.scope:
                prefix += f"({message.scope})"
            if message.breaking:
                prefix += "!"
            prefix += ": "

        description = message.description.strip()
        description = description[:1].upper() + description[1:]
        description = description.removesuffix(".")

        budget = self.config.max_subject_length - len(prefix)
        if len(prefix) + len(description) > self.config.max_subject_length:
            description = truncate_at_word(description, budget)
        return prefix + description

    def format_body(self, body: str) -> str:
        """본문 포맷. 기본은 문장 단위 bullet + 줄바꿈."""
        body = body.strip()
        if not body or not self.config.auto_wrap_body:
            return body

        width = self.config.max_body_line_length
        paragraphs: list[str] = []
        for paragraph in _PARAGRAPH_BREAK.split(body):
            text = " ".join(paragraph.split())
            if not text:
                continue
            if self.config.break_on_sentence:
                lines = [
                    _bullet(sentence, width) for sentence in split_sentences(text)
                ]
                paragraphs.append("\n".join(lines))
            else:
                paragraphs.append("\n".join(wrap_words(text, width)))

        return "\n\n".join(paragraphs)


def split_sentences(text: str) -> list[str]:
    """문장 끝 구두점 + 공백 기준으로 문장 분리. 구두점은 한 글자만 남긴다."""
    sentences: list[str] = []
    start = 0
    for match in _SENTENCE_BREAK.finditer(text):
        sentence = text[start : match.start()] + match.group(1)
        if sentence.strip():
            sentences.append(sentence.strip())
        start = match.end()

    tail = text[start:].strip()
    if tail:
        sentences.append(tail)
    return sentences


def wrap_words(text: str, width: int) -> list[str]:
    """단어 단위 줄바꿈. 폭보다 긴 단어는 한 줄을 차지한다."""
    lines: list[str] = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + 1 + len(word) <= width:
            current += f" {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def truncate_at_word(text: str, max_length: int) -> str:
    """max_length 안의 마지막 단어 경계에서 자른다.

    공백이 없으면 `...`을 붙여 강제로 자른다.
    """
    if len(text) <= max_length:
        return text
    if max_length <= 0:
        return ""

    cut = text[:max_length]
    if text[max_length] == " ":
        return cut.rstrip()
    last_space = cut.rfind(" ")
    if last_space > 0:
        return cut[:last_space].rstrip()
    if max_length <= 3:
        return text[:max_length]
    return text[: max_length - 3] + "..."


def _bullet(sentence: str, width: int) -> str:
    """`- ` bullet, 이어지는 줄은 두 칸 들여쓰기."""
    lines = wrap_words(sentence, max(width - 2, 1))
    return "\n".join(
        ("- " if i == 0 else "  ") + line for i, line in enumerate(lines)
    )
