import pytest

from errors import EmptyArticle, UnsupportedBodyKind, UnsupportedRenderMode
from pipeline import (
    BodyKind,
    FetchedArticle,
    PipelineConfig,
    RenderMode,
    render,
)
from segment import ContentBlock


def test_html_article_is_pruned_and_links_rewritten(html_article):
    rendered = render(html_article)

    assert rendered.title == 'Python'
    assert rendered.blocks is None and rendered.summary is None
    assert 'infobox' not in rendered.html
    assert 'mw-editsection' not in rendered.html
    assert 'action=edit' not in rendered.html
    assert '<h2 id="History">History</h2>' in rendered.html
    assert 'href="https://en.wikipedia.org/wiki/Programming_language"' in rendered.html
    assert 'href="#History"' in rendered.html
    assert 'href="https://www.python.org/"' in rendered.html
    assert ' &amp; more.' in rendered.html


def test_extract_article_is_segmented(extract_article):
    rendered = render(extract_article)

    assert rendered.html is None and rendered.summary is None
    assert rendered.blocks == [
        ContentBlock.paragraph('Python is a high-level programming language.'),
        ContentBlock.paragraph('Its design emphasizes readability.'),
        ContentBlock.heading(2, 'History'),
        ContentBlock.paragraph('Python was conceived in the late 1980s.'),
        ContentBlock.heading(3, 'Early years'),
        ContentBlock.paragraph('Version 0.9 was released in 1991.'),
    ]


def test_summary_of_extract_is_first_line(extract_article):
    rendered = render(extract_article, RenderMode.FIRST_PARAGRAPH)

    assert rendered.summary == 'Python is a high-level programming language.'
    assert rendered.html is None and rendered.blocks is None


def test_summary_of_html_skips_empty_paragraphs(html_article):
    rendered = render(html_article, RenderMode.FIRST_PARAGRAPH)

    assert rendered.summary == 'Python is a programming language & more.'


def test_summary_of_html_without_paragraphs():
    article = FetchedArticle('Go', '<div>Just <b>text</b>\n here</div>', BodyKind.HTML_FRAGMENT)

    assert render(article, RenderMode.FIRST_PARAGRAPH).summary == 'Just text here'


def test_summary_ignores_paragraphs_inside_infobox():
    article = FetchedArticle(
        'Go',
        '<table class="infobox"><tr><td><p>Designed by</p></td></tr></table><p>Go is a language.</p>',
        BodyKind.HTML_FRAGMENT,
    )

    assert render(article, RenderMode.FIRST_PARAGRAPH).summary == 'Go is a language.'


@pytest.mark.parametrize('kind', [BodyKind.HTML_FRAGMENT, BodyKind.PLAIN_EXTRACT, 'wikitext'])
@pytest.mark.parametrize('mode', [RenderMode.FULL_DOCUMENT, RenderMode.FIRST_PARAGRAPH])
def test_empty_body_is_an_empty_article(kind, mode):
    with pytest.raises(EmptyArticle):
        render(FetchedArticle('Nothing', '', kind), mode)


@pytest.mark.parametrize('body', [None, '   ', '\n\n\t\n'])
def test_blank_body_is_an_empty_article(body):
    with pytest.raises(EmptyArticle):
        render(FetchedArticle('Nothing', body, BodyKind.PLAIN_EXTRACT))


@pytest.mark.parametrize('body', [
    '<table class="infobox"><tr><td>x</td></tr></table>',
    '<!-- c -->',
    '<p class="mw-empty-elt"></p>',
    '<div><span class="mw-editsection">[edit]</span></div>',
])
def test_html_without_text_is_empty(body):
    article = FetchedArticle('Box', body, BodyKind.HTML_FRAGMENT)

    with pytest.raises(EmptyArticle):
        render(article)
    with pytest.raises(EmptyArticle):
        render(article, RenderMode.FIRST_PARAGRAPH)


def test_unknown_body_kind():
    with pytest.raises(UnsupportedBodyKind):
        render(FetchedArticle('Go', '== Go ==', 'wikitext'))


def test_config_controls_base_url_and_rules():
    article = FetchedArticle(
        'Go',
        '<table class="infobox"><tr><td>x</td></tr></table><a href="/wiki/C">C</a>',
        BodyKind.HTML_FRAGMENT,
    )
    config = PipelineConfig(base_url='https://de.wikipedia.org', prune_rules=())

    html = render(article, config=config).html

    assert 'class="infobox"' in html
    assert 'href="https://de.wikipedia.org/wiki/C"' in html


def test_config_from_env(monkeypatch):
    monkeypatch.setenv('WIKIPEDIA_BASE', 'https://fr.wikipedia.org/')
    assert PipelineConfig.from_env().base_url == 'https://fr.wikipedia.org'


def test_to_dict_carries_one_payload(html_article, extract_article):
    assert set(render(html_article).to_dict()) == {'title', 'html'}
    assert set(render(html_article, RenderMode.FIRST_PARAGRAPH).to_dict()) == {'title', 'summary'}

    data = render(extract_article).to_dict()
    assert set(data) == {'title', 'blocks'}
    assert data['blocks'][2] == {'type': 'heading', 'text': 'History', 'level': 2}


def test_unknown_render_mode(html_article):
    with pytest.raises(UnsupportedRenderMode):
        render(html_article, 'everything')
