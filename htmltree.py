"""In-memory tree for parsed article markup.

Nodes are plain dataclasses, one per kind, so a text node can never carry
attributes and an element can never carry text. The ``Tree`` owns every
node in an arena keyed by integer ids; parent links live in a separate
id map and are only consulted when detaching.

Parsing goes through BeautifulSoup with the lxml builder, which closes
unclosed tags and accepts unknown ones instead of rejecting the markup.
"""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4 import Comment as SoupComment
from bs4 import Declaration, Doctype, ParserRejectedMarkup, ProcessingInstruction
from markupsafe import escape

from errors import ParseFailure


ROOT = 0

VOID_ELEMENTS = frozenset({
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input',
    'keygen', 'link', 'meta', 'param', 'source', 'track', 'wbr',
})

# content of these is emitted as-is, the parser reads it back as raw text
RAW_TEXT_ELEMENTS = frozenset({
    'script', 'style', 'xmp', 'iframe', 'noembed', 'noframes', 'plaintext',
})


@dataclass
class Document:
    children: list = field(default_factory=list)


@dataclass
class Element:
    tag: str
    attrs: dict = field(default_factory=dict)
    children: list = field(default_factory=list)


@dataclass
class Text:
    data: str


@dataclass
class Comment:
    data: str


class Tree:
    """Arena of nodes rooted at a single ``Document`` with id ``ROOT``."""

    def __init__(self):
        self._nodes = {ROOT: Document()}
        self._parents = {}
        self._next_id = ROOT + 1

    @property
    def root(self):
        return ROOT

    def __getitem__(self, node_id):
        return self._nodes[node_id]

    def __contains__(self, node_id):
        return node_id in self._nodes

    def __len__(self):
        return len(self._nodes)

    def append(self, parent_id, node):
        parent = self._nodes[parent_id]
        if not isinstance(parent, (Document, Element)):
            raise ValueError(f'{type(parent).__name__} nodes cannot have children')
        if isinstance(node, Document):
            raise ValueError('a tree has exactly one document node')

        node_id = self._next_id
        self._next_id += 1
        self._nodes[node_id] = node
        self._parents[node_id] = parent_id
        parent.children.append(node_id)
        return node_id

    def parent(self, node_id):
        return self._parents.get(node_id)

    def children(self, node_id):
        return tuple(getattr(self._nodes[node_id], 'children', ()))

    def detach(self, node_id):
        """Remove a node and its whole subtree. Returns the number of nodes dropped."""
        if node_id == ROOT:
            raise ValueError('the document root cannot be detached')

        subtree = list(self.walk(node_id))
        parent_id = self._parents[node_id]
        self._nodes[parent_id].children.remove(node_id)
        for descendant in subtree:
            del self._nodes[descendant]
            del self._parents[descendant]
        return len(subtree)

    def walk(self, start=ROOT):
        """Yield node ids in pre-order.

        Children are read after the caller gets control back, so a node
        detached by the caller is skipped together with its descendants,
        and its remaining siblings are still visited.
        """
        stack = [start]
        while stack:
            node_id = stack.pop()
            if node_id not in self._nodes:
                continue
            yield node_id
            if node_id in self._nodes:
                stack.extend(reversed(self.children(node_id)))

    def elements(self, tag=None, start=ROOT):
        for node_id in self.walk(start):
            node = self._nodes[node_id]
            if isinstance(node, Element) and (tag is None or node.tag == tag):
                yield node_id

    def text_content(self, node_id=ROOT):
        return ''.join(
            self._nodes[i].data for i in self.walk(node_id)
            if isinstance(self._nodes[i], Text)
        )


def parse(fragment):
    if not isinstance(fragment, str):
        raise ParseFailure(f'expected markup text, got {type(fragment).__name__}')

    try:
        soup = BeautifulSoup(fragment, 'lxml', multi_valued_attributes=None)
    except ParserRejectedMarkup as e:
        raise ParseFailure(f'markup rejected by parser: {e}') from e

    tree = Tree()
    stack = [(tree.root, iter(_fragment_nodes(soup)))]
    while stack:
        parent_id, pending = stack[-1]
        source = next(pending, None)
        if source is None:
            stack.pop()
            continue

        node = _convert(source)
        if node is None:
            continue
        node_id = tree.append(parent_id, node)
        if isinstance(node, Element):
            stack.append((node_id, iter(source.contents)))

    return tree


def _fragment_nodes(soup):
    # lxml wraps fragments in html/head/body; lift their content back up
    nodes = []
    for child in soup.contents:
        if isinstance(child, Tag) and child.name == 'html':
            for part in child.contents:
                if isinstance(part, Tag) and part.name in ('head', 'body'):
                    nodes.extend(part.contents)
                else:
                    nodes.append(part)
        else:
            nodes.append(child)
    return nodes


def _convert(source):
    if isinstance(source, Tag):
        return Element(source.name, {name: str(value) for name, value in source.attrs.items()})
    if isinstance(source, SoupComment):
        return Comment(str(source))
    if isinstance(source, (Doctype, Declaration, ProcessingInstruction)):
        return None
    if isinstance(source, NavigableString):
        return Text(str(source))
    return None


def serialize(tree, node_id=ROOT):
    out = []
    stack = [(node_id, False)]
    while stack:
        current, closing = stack.pop()
        node = tree[current]

        if closing:
            out.append(f'</{node.tag}>')
        elif isinstance(node, Text):
            parent_id = tree.parent(current)
            parent = tree[parent_id] if parent_id is not None else None
            if isinstance(parent, Element) and parent.tag in RAW_TEXT_ELEMENTS:
                out.append(node.data)
            else:
                out.append(str(escape(node.data)))
        elif isinstance(node, Comment):
            out.append(f'<!--{node.data}-->')
        elif isinstance(node, Element):
            out.append(start_tag(node))
            if node.tag in VOID_ELEMENTS:
                continue
            stack.append((current, True))
            stack.extend((child, False) for child in reversed(node.children))
        else:
            stack.extend((child, False) for child in reversed(node.children))

    return ''.join(out)


def start_tag(element):
    attrs = ''.join(f' {name}="{escape(value)}"' for name, value in element.attrs.items())
    return f'<{element.tag}{attrs}>'
