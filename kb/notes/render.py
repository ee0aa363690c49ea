import re

import markdown
from markdown.treeprocessors import Treeprocessor
from markupsafe import Markup
from sqlalchemy import select
from sqlalchemy.orm import Session

from kb.models.note import Note

WIKI_LINK = re.compile(r"\[\[([^\[\]\n]+)\]\]")
URL_SCHEME = re.compile(r"^([a-zA-Z][a-zA-Z0-9+.\-]*):")
SAFE_SCHEMES = {"http", "https", "mailto"}


def is_safe_url(url: str) -> bool:
    """Relative URLs and http(s)/mailto only."""
    cleaned = re.sub(r"[\x00-\x20\x7f]", "", url or "")
    match = URL_SCHEME.match(cleaned)
    if match:
        return match.group(1).lower() in SAFE_SCHEMES
    # markdown escape placeholders could still turn into a scheme later
    return "\x02" not in url or cleaned.startswith(("/", "#"))


class SafeLinks(Treeprocessor):
    def run(self, root):
        for el, attr in [(a, "href") for a in root.iter("a")] + [(i, "src") for i in root.iter("img")]:
            if attr in el.attrib and not is_safe_url(el.get(attr)):
                del el.attrib[attr]


def _markdown() -> markdown.Markdown:
    md = markdown.Markdown(extensions=["fenced_code", "nl2br", "sane_lists"])
    # raw HTML in a note is shown as text, never passed through
    md.preprocessors.deregister("html_block")
    md.inlinePatterns.deregister("html")
    md.treeprocessors.register(SafeLinks(md), "safe_links", 1)
    return md


def resolve_wiki_links(db: Session, owner_id: str, text: str) -> str:
    """Turn ``[[Title]]`` into a link to the owner's note with that title."""
    titles = {m.group(1).strip() for m in WIKI_LINK.finditer(text)}
    if not titles:
        return text
    rows = db.execute(
        select(Note.title, Note.id)
        .where(Note.user_id == owner_id, Note.title.in_(titles))
        .order_by(Note.created_at)
    )
    targets: dict[str, str] = {}
    for title, note_id in rows:
        targets.setdefault(title, note_id)

    def _sub(match: re.Match) -> str:
        title = match.group(1).strip()
        if title not in targets:
            return match.group(0)
        return f"[{title}](/notes/{targets[title]})"

    return WIKI_LINK.sub(_sub, text)


def render_note(db: Session, note: Note) -> Markup:
    source = resolve_wiki_links(db, note.user_id, note.content or "")
    return Markup(_markdown().convert(source))
