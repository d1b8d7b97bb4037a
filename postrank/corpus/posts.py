"""Blog post model and local directory loading."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator

from .markdown import extract_title, markdown_to_plain_text

log = logging.getLogger(__name__)

DEFAULT_PATTERNS = ("*.md", "*.txt")

# {id},{yyyy},{M},{d},{H},{m},{s},{slug...}
_MIN_NAME_SEGMENTS = 8


@dataclass(frozen=True)
class Post:
    """A post reduced to plain text; the title is its first line."""

    post_id: int
    title: str
    content: str
    published_at: datetime | None = None
    source: str = ""

    def __post_init__(self):
        if not self.title or not self.title.strip():
            raise ValueError("Post title may not be blank")
        if not self.content or not self.content.strip():
            raise ValueError("Post content may not be blank")


def parse_post_filename(name: str) -> tuple[int, datetime] | None:
    """Read id and publish date from a ``id,yyyy,M,d,H,m,s,slug`` file name.

    Returns None when the name does not follow the convention.
    """
    segments = Path(name).stem.split(",")
    if len(segments) < _MIN_NAME_SEGMENTS:
        return None
    try:
        post_id = int(segments[0])
        published_at = datetime.strptime(",".join(segments[1:7]), "%Y,%m,%d,%H,%M,%S")
    except ValueError:
        return None
    return post_id, published_at


def post_from_markdown(
    markdown: str,
    *,
    post_id: int,
    published_at: datetime | None = None,
    source: str = "",
) -> Post:
    """Convert raw markdown into a Post.

    Raises:
        ValueError: when the post has no text
    """
    plain_text = markdown_to_plain_text(markdown)
    return Post(
        post_id=post_id,
        title=extract_title(plain_text),
        content=plain_text,
        published_at=published_at,
        source=source,
    )


def iter_post_files(
    directory: Path,
    patterns: tuple[str, ...] = DEFAULT_PATTERNS,
) -> Iterator[Path]:
    """Post files directly inside ``directory``, sorted by name."""
    paths: set[Path] = set()
    for pattern in patterns:
        paths.update(p for p in directory.glob(pattern) if p.is_file())
    yield from sorted(paths)


def load_posts(
    directory: Path | str,
    patterns: tuple[str, ...] = DEFAULT_PATTERNS,
) -> list[Post]:
    """Load every post in a directory.

    Files following the ``id,yyyy,M,d,H,m,s,slug`` convention take their id
    and date from the name; others are numbered by sorted position. Files
    without any text are skipped with a warning.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Post directory not found: {directory}")

    posts: list[Post] = []
    for position, path in enumerate(iter_post_files(directory, patterns), 1):
        parsed = parse_post_filename(path.name)
        post_id, published_at = parsed if parsed else (position, None)

        try:
            post = post_from_markdown(
                path.read_text(encoding="utf-8"),
                post_id=post_id,
                published_at=published_at,
                source=path.name,
            )
        except ValueError as e:
            log.warning(f"Skipping {path.name}: {e}")
            continue
        posts.append(post)

    log.info(f"Loaded {len(posts)} posts from {directory}")
    return posts
