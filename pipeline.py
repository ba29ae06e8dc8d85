"""Turn a fetched article body into something safe to hand to a renderer.

HTML from the parse endpoint is pruned and has its links made absolute;
plain extracts from the query endpoint are segmented into typed blocks.
Either kind can also be reduced to a one-paragraph summary.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum

from markupsafe import Markup

from errors import EmptyArticle, UnsupportedBodyKind, UnsupportedRenderMode
from htmltree import parse, serialize
from sanitize import DEFAULT_PRUNE_RULES, prune, rewrite_links, strip_tags
from segment import segment


logger = logging.getLogger(__name__)


WIKIPEDIA_BASE = 'https://en.wikipedia.org'
RELATIVE_PREFIX = '/wiki/'


class BodyKind(Enum):
    HTML_FRAGMENT = 'html'
    PLAIN_EXTRACT = 'extract'


class RenderMode(Enum):
    FULL_DOCUMENT = 'full'
    FIRST_PARAGRAPH = 'summary'


@dataclass(frozen=True)
class PipelineConfig:
    base_url: str = WIKIPEDIA_BASE
    relative_prefix: str = RELATIVE_PREFIX
    prune_rules: tuple = DEFAULT_PRUNE_RULES

    @classmethod
    def from_env(cls):
        base_url = os.environ.get('WIKIPEDIA_BASE', WIKIPEDIA_BASE).rstrip('/')
        return cls(base_url=base_url)


@dataclass
class FetchedArticle:
    title: str
    raw_body: str
    body_kind: BodyKind


@dataclass
class RenderedArticle:
    title: str
    html: str | None = None
    blocks: list | None = None
    summary: str | None = None

    def to_dict(self):
        data = {'title': self.title}
        if self.html is not None:
            data['html'] = self.html
        if self.blocks is not None:
            data['blocks'] = [block.to_dict() for block in self.blocks]
        if self.summary is not None:
            data['summary'] = self.summary
        return data


def render(article, mode=RenderMode.FULL_DOCUMENT, config=None):
    if config is None:
        config = PipelineConfig()

    if not article.raw_body or not article.raw_body.strip():
        raise EmptyArticle(f'No content found for {article.title}')
    if not isinstance(article.body_kind, BodyKind):
        raise UnsupportedBodyKind(f'Cannot render a body of kind {article.body_kind!r}')

    if mode is RenderMode.FIRST_PARAGRAPH:
        return RenderedArticle(article.title, summary=first_paragraph(article, config))
    if mode is not RenderMode.FULL_DOCUMENT:
        raise UnsupportedRenderMode(f'Unknown render mode {mode!r}')

    if article.body_kind is BodyKind.HTML_FRAGMENT:
        tree = sanitize_tree(article.raw_body, config)
        if not tree.text_content().strip():
            raise EmptyArticle(f'Nothing left of {article.title} after sanitizing')
        return RenderedArticle(article.title, html=serialize(tree))

    blocks = segment(article.raw_body)
    if not blocks:
        raise EmptyArticle(f'No content found for {article.title}')
    logger.debug(f'Segmented {article.title} into {len(blocks)} blocks')
    return RenderedArticle(article.title, blocks=blocks)


def sanitize_tree(markup, config):
    tree = parse(markup)
    for rule in config.prune_rules:
        prune(tree, rule)
    rewrite_links(tree, config.base_url, config.relative_prefix)
    return tree


def first_paragraph(article, config):
    if article.body_kind is BodyKind.PLAIN_EXTRACT:
        for line in article.raw_body.splitlines():
            if line.strip():
                return line.strip()
        raise EmptyArticle(f'No content found for {article.title}')

    tree = sanitize_tree(article.raw_body, config)
    # wikipedia often opens with an empty <p class="mw-empty-elt">
    for node_id in tree.elements('p'):
        text = strip_tags(serialize(tree, node_id))
        if text:
            return Markup(text).unescape()

    text = strip_tags(serialize(tree))
    if not text:
        raise EmptyArticle(f'Nothing left of {article.title} after sanitizing')
    return Markup(text).unescape()
