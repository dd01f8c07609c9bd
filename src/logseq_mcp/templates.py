"""Outline blocks for recording articles, books, movies and exhibitions in a journal.

Blocks follow Logseq's outline format: "- " bullets indented with tabs.
Culture entries (books, movies, exhibitions) hang under a shared [[문화]]
page, each tagged with its own Hangul tag.
"""

from __future__ import annotations

ARTICLE_PAGE = "article"
CULTURE_PAGE = "문화"
BOOK_TAG = "책"
MOVIE_TAG = "영화"
EXHIBITION_TAG = "전시회"


def _bullet(level: int, text: str) -> str:
    return "\t" * level + f"- {text}"


def _nested_lines(level: int, text: str) -> list[str]:
    """One bullet per non-blank line of text."""
    return [_bullet(level, line.strip()) for line in text.split("\n") if line.strip()]


def article_block(
    title: str,
    summary: str | None = None,
    tags: str | None = None,
    url: str | None = None,
    highlights: str | None = None,
) -> str:
    lines = [
        _bullet(0, f"[[{ARTICLE_PAGE}]]"),
        _bullet(1, f"#{ARTICLE_PAGE}"),
        _bullet(2, "meta"),
        _bullet(3, f"title : {title}"),
    ]
    if summary:
        lines.append(_bullet(3, f"summary : {summary}"))
    if tags:
        lines.append(_bullet(3, f"tag : {tags}"))
    if url:
        lines.append(_bullet(3, f"url : {url}"))
    if highlights:
        lines.append(_bullet(2, "Highlights :"))
        lines.extend(_nested_lines(3, highlights))
    return "\n".join(lines)


def _culture_block(
    tag: str,
    fields: list[tuple[str, str | None]],
    memo: str | None,
) -> str:
    lines = [_bullet(0, f"[[{CULTURE_PAGE}]]"), _bullet(1, f"#{tag}")]
    for label, value in fields:
        if value:
            lines.append(_bullet(2, f"{label} : {value}"))
    if memo:
        lines.append(_bullet(2, "메모 :"))
        lines.extend(_nested_lines(3, memo))
    return "\n".join(lines)


def book_block(
    title: str,
    author: str | None = None,
    tags: str | None = None,
    memo: str | None = None,
) -> str:
    return _culture_block(
        BOOK_TAG,
        [("제목", title), ("창작자", author), ("태그", tags)],
        memo,
    )


def movie_block(title: str, director: str | None = None, memo: str | None = None) -> str:
    return _culture_block(MOVIE_TAG, [("제목", title), ("창작자", director)], memo)


def exhibition_block(
    title: str,
    venue: str | None = None,
    artist: str | None = None,
    memo: str | None = None,
) -> str:
    return _culture_block(
        EXHIBITION_TAG,
        [("제목", title), ("장소", venue), ("창작자", artist)],
        memo,
    )
