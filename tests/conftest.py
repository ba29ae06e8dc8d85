import os
import tempfile

import pytest

# the app opens its access log at import time
os.environ.setdefault('LOG_DIR', tempfile.mkdtemp(prefix='wikilite-logs-'))

from pipeline import BodyKind, FetchedArticle


ARTICLE_HTML = (
    '<div class="mw-parser-output">'
    '<p class="mw-empty-elt"></p>'
    '<table class="infobox vcard"><tr><th>Designed by</th><td>Guido</td></tr></table>'
    '<p><b>Python</b> is a <a href="/wiki/Programming_language">programming language</a>'
    ' &amp; more.</p>'
    '<div class="mw-heading mw-heading2"><h2 id="History">History</h2>'
    '<span class="mw-editsection">[<a href="/w/index.php?title=Python&amp;action=edit&amp;section=1">edit</a>]</span>'
    '</div>'
    '<p>See <a href="#History">above</a> and <a href="https://www.python.org/">the site</a>.</p>'
    '</div>'
)


ARTICLE_EXTRACT = (
    'Python is a high-level programming language.\n'
    'Its design emphasizes readability.\n'
    '\n'
    '\n'
    '== History ==\n'
    'Python was conceived in the late 1980s.\n'
    '=== Early years ===\n'
    'Version 0.9 was released in 1991.\n'
)


@pytest.fixture
def html_article():
    return FetchedArticle('Python', ARTICLE_HTML, BodyKind.HTML_FRAGMENT)


@pytest.fixture
def extract_article():
    return FetchedArticle('Python', ARTICLE_EXTRACT, BodyKind.PLAIN_EXTRACT)
