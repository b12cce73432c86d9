"""Lightweight structure detection over final document text.

Line-oriented regex heuristics for headings, references and captions. The
pattern classes are non-exclusive: a line may be both a heading and a
reference.
"""

import re

from core.documents import DocumentStructure, Section

MAX_SECTIONS = 10
MAX_REFERENCES = 5
MAX_REFERENCES_DETAILED = 20
MAX_FIGURES = 10
MAX_TABLES = 10
MAX_REFERENCE_CHARS = 200
MAX_ABSTRACT_CHARS = 500
MAX_SUMMARY_CHARS = 300
ABSTRACT_LINES = 4
SUMMARY_SENTENCES = 3

HEADING_WORDS = (
    "Abstract|Introduction|Methodology|Methods|Results|Discussion|Conclusion|"
    "References|Background|Related Work|Experiments|Evaluation|Future Work|"
    "Acknowledgments|Preface|Contents|Bibliography|Notation"
)

SECTION_PATTERNS = [
    re.compile(r"^\d+\.?\s+[A-Z]"),  # 1. Introduction / 1 Introduction
    re.compile(r"^\d+\.\d+\.?\s+[A-Z]"),  # 1.1 Subsection
    re.compile(r"^Chapter\s+\d+", re.IGNORECASE),
    re.compile(rf"^({HEADING_WORDS})", re.IGNORECASE),
    re.compile(r"^[A-Z][A-Z\s]{8,}$"),  # ALL CAPS
    re.compile(r"^Appendix\s+[A-Z]", re.IGNORECASE),
]
_TITLE_CASE = re.compile(r"^[A-Z][a-z]+(\s+[A-Z][a-z]+)*$")

_YEAR = re.compile(r"\d{4}")
REFERENCE_PATTERNS = [
    lambda line: re.match(r"^\[\d+\]", line),
    lambda line: re.match(r"^\d+\.", line) and len(line) > 50,
    lambda line: re.search(r"\(\d{4}\)", line) and len(line) > 30,
    lambda line: re.match(r"^[A-Z][a-z]+,\s+[A-Z]", line) and _YEAR.search(line),
    lambda line: re.search(r"et\s+al\.", line) and _YEAR.search(line),
    lambda line: re.match(r"^[A-Z][a-z]+\s+and\s+[A-Z][a-z]+", line) and _YEAR.search(line),
    lambda line: re.search(r"doi:|arxiv:", line, re.IGNORECASE),
]

_FIGURE = re.compile(r"Figure\s+\d+[:.]?\s*[^\n]*", re.IGNORECASE)
_TABLE = re.compile(r"Table\s+\d+[:.]?\s*[^\n]*", re.IGNORECASE)
_SENTENCE_SPLIT = re.compile(r"[.!?]+")


def is_section_heading(line: str) -> bool:
    if any(p.search(line) for p in SECTION_PATTERNS):
        return True
    return bool(_TITLE_CASE.match(line)) and 5 < len(line) < 80


def is_reference(line: str) -> bool:
    return any(check(line) for check in REFERENCE_PATTERNS)


def section_level(title: str) -> int:
    """Heading level 1-6 from a leading number or a known heading word."""
    match = re.match(r"^(\d+)\.?\s", title)
    if match:
        return max(1, min(int(match.group(1)), 6))
    if re.match(r"^(Abstract|Introduction|Conclusion)", title, re.IGNORECASE):
        return 1
    if re.match(r"^(Methodology|Results|Discussion)", title, re.IGNORECASE):
        return 2
    return 3


def summarize_sentences(text: str, count: int) -> list[str]:
    """First ``count`` sentences longer than 20 characters."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 20]
    return sentences[:count]


def build_summary(text: str) -> str:
    sentences = summarize_sentences(text, SUMMARY_SENTENCES)
    return ". ".join(sentences)[:MAX_SUMMARY_CHARS] + "..."


def analyze_structure(text: str, detailed: bool = False) -> DocumentStructure:
    """Derive sections, references, figures, tables and an abstract.

    Args:
        text: Final document text
        detailed: Keep up to 20 references instead of 5

    Returns:
        DocumentStructure; empty when ``text`` is empty
    """
    if not text or not text.strip():
        return DocumentStructure()

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    headings: list[str] = []
    references: list[str] = []
    abstract = ""

    for index, line in enumerate(lines):
        if is_section_heading(line):
            headings.append(line)

        if not abstract and len(line) < 50 and re.search("abstract", line, re.IGNORECASE):
            following = lines[index + 1 : index + 1 + ABSTRACT_LINES]
            if following:
                abstract = " ".join(following)[:MAX_ABSTRACT_CHARS] + "..."

        if is_reference(line):
            references.append(line[:MAX_REFERENCE_CHARS])

    summary = build_summary(text)
    reference_cap = MAX_REFERENCES_DETAILED if detailed else MAX_REFERENCES

    return DocumentStructure(
        sections=[
            Section(title=title, level=section_level(title))
            for title in headings[:MAX_SECTIONS]
        ],
        references=references[:reference_cap],
        figures=[m.group(0).strip() for m in _FIGURE.finditer(text)][:MAX_FIGURES],
        tables=[m.group(0).strip() for m in _TABLE.finditer(text)][:MAX_TABLES],
        abstract=abstract or summary,
        summary=summary,
    )
