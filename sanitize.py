import logging
import re
from dataclasses import dataclass

from htmltree import Element


logger = logging.getLogger(__name__)


TAG_PATTERN = re.compile(r'<[^>]*>')


@dataclass(frozen=True)
class PruneRule:
    tag: str
    attribute: str
    contains: str

    def matches(self, node):
        if not isinstance(node, Element) or node.tag != self.tag:
            return False
        value = node.attrs.get(self.attribute)
        return value is not None and self.contains in value


INFOBOX_RULE = PruneRule('table', 'class', 'infobox')
EDIT_SECTION_RULE = PruneRule('span', 'class', 'mw-editsection')

DEFAULT_PRUNE_RULES = (INFOBOX_RULE, EDIT_SECTION_RULE)


def prune(tree, rule):
    """Detach every element matching ``rule``, skipping the inside of removed subtrees."""
    removed = 0
    for node_id in tree.walk():
        if rule.matches(tree[node_id]):
            tree.detach(node_id)
            removed += 1
    logger.debug(f'Pruned {removed} <{rule.tag}> nodes with {rule.attribute}~={rule.contains!r}')
    return removed


def rewrite_links(tree, base_prefix, relative_prefix='/wiki/'):
    """Make site-relative anchor hrefs absolute.

    Fragment-only, protocol-relative and absolute hrefs are left alone, and
    an href already starting with ``base_prefix`` is never prefixed twice.
    """
    rewritten = 0
    for node_id in tree.elements('a'):
        node = tree[node_id]
        href = node.attrs.get('href')
        if href is None:
            continue
        if href.startswith(relative_prefix) and not href.startswith(base_prefix):
            node.attrs['href'] = base_prefix + href
            rewritten += 1
    logger.debug(f'Rewrote {rewritten} links onto {base_prefix}')
    return rewritten


def strip_tags(html):
    # preview only: drops block boundaries along with the tags
    text = TAG_PATTERN.sub('', html).strip()
    return re.sub(r'\s+', ' ', text)
