import logging

import requests

from errors import ArticleNotFound, UnsupportedBodyKind
from pipeline import WIKIPEDIA_BASE, BodyKind, FetchedArticle


logger = logging.getLogger(__name__)


REQUEST_TIMEOUT = 10


HEADERS = {
    'User-Agent': 'WikiLite/1.0 (minimal Wikipedia article renderer)'
}


def api_get(params, base_url=WIKIPEDIA_BASE, timeout=REQUEST_TIMEOUT):
    resp = requests.get(
        f'{base_url}/w/api.php',
        params={**params, 'format': 'json'},
        headers=HEADERS,
        timeout=timeout
    )
    resp.raise_for_status()
    return resp.json()


def fetch_parsed(title, base_url=WIKIPEDIA_BASE, timeout=REQUEST_TIMEOUT):
    data = api_get(
        {'action': 'parse', 'page': title, 'prop': 'text'},
        base_url=base_url,
        timeout=timeout
    )

    # {"parse": {"title": ..., "text": {"*": html}}}, or {"error": ...} for missing pages
    parsed = data.get('parse') or {}
    if not parsed.get('title'):
        info = (data.get('error') or {}).get('info', '')
        logger.info(f'Parse lookup for {title} came back empty {info}'.rstrip())
        raise ArticleNotFound(f'No content found for {title}')

    html = (parsed.get('text') or {}).get('*', '')
    return FetchedArticle(parsed['title'], html, BodyKind.HTML_FRAGMENT)


def fetch_extract(title, base_url=WIKIPEDIA_BASE, timeout=REQUEST_TIMEOUT):
    data = api_get(
        {
            'action': 'query',
            'prop': 'extracts',
            'explaintext': 1,
            'exsectionformat': 'wiki',
            'redirects': 1,
            'titles': title,
        },
        base_url=base_url,
        timeout=timeout
    )

    # {"query": {"pages": {"<id>": {"title": ..., "extract": ...}}}}
    pages = (data.get('query') or {}).get('pages') or {}
    for page in pages.values():
        if 'missing' in page or 'invalid' in page or 'extract' not in page:
            continue
        return FetchedArticle(page.get('title', title), page['extract'], BodyKind.PLAIN_EXTRACT)

    raise ArticleNotFound(f'No content found for {title}')


def fetch_article(title, kind, base_url=WIKIPEDIA_BASE, timeout=REQUEST_TIMEOUT):
    if kind is BodyKind.HTML_FRAGMENT:
        return fetch_parsed(title, base_url=base_url, timeout=timeout)
    if kind is BodyKind.PLAIN_EXTRACT:
        return fetch_extract(title, base_url=base_url, timeout=timeout)
    raise UnsupportedBodyKind(f'No upstream endpoint serves bodies of kind {kind!r}')
