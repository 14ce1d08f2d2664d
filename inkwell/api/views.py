"""
Server-rendered HTML pages and flash messages.

Pages are plain strings; titles and other plain text go through _escape_html.
Article bodies are the author's own HTML and are rendered as stored.
"""

from urllib.parse import quote, unquote

from fastapi import Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from inkwell.domain.entities import Article

FLASH_COOKIE = "flash"
FLASH_MAX_AGE = 60


def _escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#x27;")
    )


# --- Flash ---


def redirect_with_flash(url: str, message: str, kind: str = "error") -> RedirectResponse:
    """303 redirect carrying a one-shot message for the next page."""
    response = RedirectResponse(url=url, status_code=303)
    response.set_cookie(
        FLASH_COOKIE,
        quote(f"{kind}|{message}"),
        max_age=FLASH_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return response


def read_flash(request: Request) -> tuple[str, str] | None:
    raw = request.cookies.get(FLASH_COOKIE)
    if not raw:
        return None
    kind, _, message = unquote(raw).partition("|")
    return kind, message


def consume_flash(request: Request, response: Response) -> None:
    if FLASH_COOKIE in request.cookies:
        response.delete_cookie(FLASH_COOKIE)


def render_flash(flash: tuple[str, str] | None) -> str:
    if flash is None:
        return ""
    kind, message = flash
    css = f"flash flash-{_escape_html(kind)}"
    return f'<div class="{css}" role="status">{_escape_html(message)}</div>'


# --- Pages ---


def render_page(title: str, body: str, description: str | None = None) -> str:
    meta = ""
    if description:
        meta = f'<meta name="description" content="{_escape_html(description)}" />'
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1.0" />
    <title>{_escape_html(title)}</title>
    {meta}
</head>
<body>
    {body}
</body>
</html>"""


def html_page(
    request: Request, title: str, body: str, description: str | None = None
) -> HTMLResponse:
    """Render a page with any pending flash, then clear the flash cookie."""
    flash_html = render_flash(read_flash(request))
    response = HTMLResponse(
        content=render_page(title, flash_html + body, description), status_code=200
    )
    consume_flash(request, response)
    return response


def article_list_body(articles: list[Article]) -> str:
    rows = []
    for article in articles:
        title = _escape_html(article.title or "Untitled")
        rows.append(
            f'<li data-id="{article.id}" data-status="{article.status}">'
            f'<a href="/articles/{article.id}/edit">{title}</a> '
            f"<span>{article.status}</span> "
            f"<small>{article.updated_at.isoformat()}</small></li>"
        )
    items = "\n".join(rows) or "<li>No articles yet.</li>"
    return f"""
    <main>
        <h1>Articles</h1>
        <p><a href="/articles/create">New article</a></p>
        <ul class="articles">
{items}
        </ul>
    </main>
    """


def editor_body(article: Article) -> str:
    scheduled = article.scheduled_at.isoformat() if article.scheduled_at else ""
    return f"""
    <main class="editor" data-id="{article.id}" data-status="{article.status}">
        <input name="title" value="{_escape_html(article.title)}" maxlength="255" />
        <p class="slug">{_escape_html(article.slug)}</p>
        <textarea name="content">{_escape_html(article.content)}</textarea>
        <p class="stats">{article.word_count} words, {article.reading_time} min read</p>
        <p class="schedule">{_escape_html(scheduled)}</p>
    </main>
    """


def article_body(article: Article, preview: bool = False) -> str:
    banner = '<p class="preview-banner">Preview</p>' if preview else ""
    published = ""
    if article.published_at is not None:
        published = f'<time datetime="{article.published_at.isoformat()}"></time>'
    return f"""
    <article>
        {banner}
        <h1>{_escape_html(article.title)}</h1>
        {published}
        <p class="reading-time">{article.reading_time} min read</p>
        <div class="content">{article.content}</div>
    </article>
    """


def seo_description(article: Article) -> str | None:
    if not article.seo:
        return None
    value = article.seo.get("description") or article.seo.get("meta_description")
    return value if isinstance(value, str) else None
