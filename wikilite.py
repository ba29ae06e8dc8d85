import os
import re
import logging
from logging.handlers import RotatingFileHandler
from urllib.parse import quote, quote_plus
import requests
from flask import Flask, Response, request, jsonify
from markupsafe import escape
from dotenv import load_dotenv

from errors import (
    ArticleError,
    ArticleNotFound,
    EmptyArticle,
    ParseFailure,
    UnsupportedBodyKind,
    UnsupportedRenderMode,
)
from pipeline import BodyKind, PipelineConfig, RenderMode, render
from wikipedia import fetch_article


load_dotenv()


MAX_TITLE_LENGTH = int(os.environ.get('MAX_TITLE_LENGTH', '500'))
REQUEST_TIMEOUT = float(os.environ.get('REQUEST_TIMEOUT', '10'))
LOG_DIR = os.environ.get('LOG_DIR', '/var/log/wikilite')

PIPELINE_CONFIG = PipelineConfig.from_env()


TITLE_PATTERN = re.compile(r'^[\w\s\-.,()\'\"&:;!/#+%@]+$', re.UNICODE)


SOURCES = {
    'html': BodyKind.HTML_FRAGMENT,
    'extract': BodyKind.PLAIN_EXTRACT,
}


MODES = {
    'full': RenderMode.FULL_DOCUMENT,
    'summary': RenderMode.FIRST_PARAGRAPH,
}


ERROR_STATUS = {
    ArticleNotFound: 404,
    EmptyArticle: 404,
    UnsupportedBodyKind: 400,
    UnsupportedRenderMode: 400,
    ParseFailure: 502,
}


POPULAR_TITLES = [
    'Computer',
    'Internet',
    'World_Wide_Web',
    'Python_(programming_language)',
]


DOCTYPE = '<!DOCTYPE html>'


META = '<meta charset="utf-8">'


HOME_TEMPLATE = '''{doctype}
<html>
<head>
{meta}
<title>WikiLite</title>
<link rel="stylesheet" href="/static/style.css">
</head>
<body>
<h1>WikiLite</h1>
<p>Read Wikipedia articles without the clutter.</p>
<form action="/pageContent" method="get">
<input type="text" name="title" size="30">
<input type="submit" value="Read">
</form>
<h3>Popular Links</h3>
<ul>
{popular_links}
</ul>
</body>
</html>'''


PAGE_TEMPLATE = '''{doctype}
<html>
<head>
{meta}
<title>{title_text} - WikiLite</title>
<link rel="stylesheet" href="/static/style.css">
</head>
<body>
<p><a href="/">Home</a> | {views}</p>
<hr>
<h1>{title_text}</h1>
{content}
<hr>
<p><small>Content sourced from <a href="{wikipedia_url}">this Wikipedia page</a> under
<a href="https://creativecommons.org/licenses/by-sa/4.0/">CC BY-SA 4.0</a>.</small></p>
</body>
</html>'''


ERROR_TEMPLATE = '''{doctype}
<html>
<head>
{meta}
<title>Error - WikiLite</title>
</head>
<body>
<h1>Error</h1>
<p>{message}</p>
<p><a href="/">Home</a></p>
</body>
</html>'''


os.makedirs(LOG_DIR, exist_ok=True)

file_handler = RotatingFileHandler(
    f'{LOG_DIR}/access.log',
    maxBytes=1024*1024,
    backupCount=5
)
file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
file_handler.setLevel(logging.INFO)
access_logger = logging.getLogger('wikilite.access')
access_logger.setLevel(logging.INFO)
access_logger.addHandler(file_handler)

app = Flask(__name__)


def validate_title(title):
    if not title:
        return "Missing 'title' parameter"
    if len(title) > MAX_TITLE_LENGTH:
        return 'Article title too long'
    if not TITLE_PATTERN.match(title):
        return 'Invalid article title'
    return None


def wikipedia_url(title):
    return f'{PIPELINE_CONFIG.base_url}/wiki/{quote(title.replace(" ", "_"), safe="")}'


def load_article(title, kind, mode):
    article = fetch_article(
        title,
        kind,
        base_url=PIPELINE_CONFIG.base_url,
        timeout=REQUEST_TIMEOUT
    )
    return render(article, mode, PIPELINE_CONFIG)


def render_blocks(blocks):
    lines = []
    for block in blocks:
        if block.is_heading:
            lines.append(f'<h{block.level}>{escape(block.text)}</h{block.level}>')
        else:
            lines.append(f'<p>{escape(block.text)}</p>')
    return '\n'.join(lines)


def render_content(rendered):
    if rendered.html is not None:
        return rendered.html
    if rendered.blocks is not None:
        return render_blocks(rendered.blocks)
    return f'<p>{escape(rendered.summary)}</p>'


def render_views(title):
    slug = quote_plus(title)
    return ' | '.join([
        f'<a href="/pageContent?title={slug}">Full article</a>',
        f'<a href="/extract?title={slug}">Plain text</a>',
        f'<a href="/summary?title={slug}">Summary</a>',
    ])


def render_error(message):
    return ERROR_TEMPLATE.format(
        doctype=DOCTYPE,
        meta=META,
        message=escape(message)
    )


def error_response(message, status):
    return Response(render_error(message), status=status, mimetype='text/html')


def article_page(title, kind, mode):
    problem = validate_title(title)
    if problem:
        return error_response(problem, 400)

    try:
        rendered = load_article(title, kind, mode)
    except requests.RequestException as e:
        app.logger.error(f'Could not fetch article {title}: {e}')
        return error_response('Could not fetch article. Please try again.', 502)
    except ArticleError as e:
        app.logger.warning(f'Could not render article {title}: {e}')
        return error_response(str(e), ERROR_STATUS.get(type(e), 500))

    page = PAGE_TEMPLATE.format(
        doctype=DOCTYPE,
        meta=META,
        title_text=escape(rendered.title),
        views=render_views(rendered.title),
        content=render_content(rendered),
        wikipedia_url=wikipedia_url(rendered.title),
    )
    return Response(page, mimetype='text/html')


@app.route('/')
def home():
    popular_links = [
        f'<li><a href="/pageContent?title={quote_plus(t)}">{escape(t.replace("_", " "))}</a></li>'
        for t in POPULAR_TITLES
    ]
    return HOME_TEMPLATE.format(
        doctype=DOCTYPE,
        meta=META,
        popular_links='\n'.join(popular_links),
    )


@app.route('/pageContent')
def page_content():
    return article_page(request.args.get('title', ''), BodyKind.HTML_FRAGMENT, RenderMode.FULL_DOCUMENT)


@app.route('/extract')
def extract():
    return article_page(request.args.get('title', ''), BodyKind.PLAIN_EXTRACT, RenderMode.FULL_DOCUMENT)


@app.route('/summary')
def summary():
    source = request.args.get('source', 'extract')
    if source not in SOURCES:
        return error_response(f'Unknown source: {source}', 400)
    return article_page(request.args.get('title', ''), SOURCES[source], RenderMode.FIRST_PARAGRAPH)


@app.route('/api/article')
def api_article():
    title = request.args.get('title', '')
    source = request.args.get('source', 'html')
    mode = request.args.get('mode', 'full')

    problem = validate_title(title)
    if problem:
        return jsonify({'error': problem}), 400
    if source not in SOURCES:
        return jsonify({'error': f'Unknown source: {source}'}), 400
    if mode not in MODES:
        return jsonify({'error': f'Unknown mode: {mode}'}), 400

    try:
        rendered = load_article(title, SOURCES[source], MODES[mode])
    except requests.RequestException as e:
        app.logger.error(f'Could not fetch article {title}: {e}')
        return jsonify({'error': 'Could not fetch article. Please try again.'}), 502
    except ArticleError as e:
        app.logger.warning(f'Could not render article {title}: {e}')
        return jsonify({'error': str(e)}), ERROR_STATUS.get(type(e), 500)

    return jsonify(rendered.to_dict())


@app.after_request
def log_response(response):
    access_logger.info(f'{request.remote_addr} - {request.method} {request.path} - {response.status_code}')
    return response


@app.after_request
def add_security_headers(response):
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'
    return response


if __name__ == '__main__':
    debug = os.environ.get('DEBUG', 'false').lower() == 'true'
    port = int(os.environ.get('PORT', '8080'))
    app.run(host='0.0.0.0', port=port, debug=debug)
