"""Split plain-text extracts into headings and paragraphs.

Extracts requested with ``exsectionformat=wiki`` mark section titles the
way wikitext does, e.g. ``== History ==`` or ``=== Early years ===``.
"""

from dataclasses import dataclass
from enum import Enum


MIN_HEADING_LEVEL = 2
MAX_HEADING_LEVEL = 6


class BlockType(Enum):
    HEADING = 'heading'
    PARAGRAPH = 'paragraph'


@dataclass(frozen=True)
class ContentBlock:
    type: BlockType
    text: str
    level: int | None = None

    @classmethod
    def heading(cls, level, text):
        return cls(BlockType.HEADING, text, level)

    @classmethod
    def paragraph(cls, text):
        return cls(BlockType.PARAGRAPH, text)

    @property
    def is_heading(self):
        return self.type is BlockType.HEADING

    def to_dict(self):
        data = {'type': self.type.value, 'text': self.text}
        if self.is_heading:
            data['level'] = self.level
        return data


def segment(extract):
    blocks = []
    for line in extract.splitlines():
        line = line.strip()
        if line:
            blocks.append(classify_line(line))
    return blocks


def classify_line(line):
    if not (line.startswith('==') and line.endswith('==')):
        return ContentBlock.paragraph(line)

    level = heading_level(line)
    text = line.strip('=').strip()
    if not MIN_HEADING_LEVEL <= level <= MAX_HEADING_LEVEL or not text:
        return ContentBlock.paragraph(line)
    return ContentBlock.heading(level, text)


def heading_level(line):
    """Count the run of '=' opening the first whitespace-delimited token."""
    token = line.split()[0]
    return len(token) - len(token.lstrip('='))
