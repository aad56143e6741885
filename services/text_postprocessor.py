# services/text_postprocessor.py
from __future__ import annotations

import re
from typing import List

LIST_HEADERS = ("Cities Served:", "Hotels Served:")

# Paragraph reflow kicks in for single-block text longer than this.
REFLOW_MIN_CHARS = 300
PARAGRAPH_MIN_CHARS = 150
PARAGRAPH_MAX_SENTENCES = 4

_SENTENCE_BOUNDARY = re.compile(r"(?<=\.)\s+(?=[A-Z])")

def _is_list_line(line: str) -> bool:
    return line.startswith("-") or line.startswith(LIST_HEADERS)

def _regroup_sentences(text: str) -> str:
    sentences = [" ".join(s.split()) for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]
    if len(sentences) < 2:
        return " ".join(text.split())

    groups: List[List[str]] = []
    cur: List[str] = []
    for s in sentences:
        cur.append(s)
        size = sum(len(x) for x in cur) + len(cur) - 1
        if len(cur) >= PARAGRAPH_MAX_SENTENCES or (len(cur) >= 2 and size >= PARAGRAPH_MIN_CHARS):
            groups.append(cur)
            cur = []
    if cur:
        # a lone trailing sentence joins the previous paragraph when it has room
        if len(cur) == 1 and groups and len(groups[-1]) < PARAGRAPH_MAX_SENTENCES:
            groups[-1].extend(cur)
        else:
            groups.append(cur)
    return "\n\n".join(" ".join(g) for g in groups)

def _reflow_lines(text: str) -> str:
    blocks: List[str] = []
    para: List[str] = []
    list_lines: List[str] = []
    in_list = False

    def close_blocks() -> None:
        nonlocal para, list_lines, in_list
        if para:
            # soft-wrapped prose becomes one paragraph line
            blocks.append(" ".join(para))
        if list_lines:
            blocks.append("\n".join(list_lines))
        para, list_lines = [], []
        in_list = False

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            close_blocks()
            continue
        if in_list or _is_list_line(line):
            if not in_list and para:
                blocks.append(" ".join(para))
                para = []
            # list mode: keep lines verbatim until a blank line
            in_list = True
            list_lines.append(line)
            continue
        para.append(line)
    close_blocks()
    return "\n\n".join(blocks)

def postprocess_description(text: str | None) -> str:
    """
    Normalize generated copy into paragraphs separated by blank lines.
    Idempotent: postprocess_description(postprocess_description(x)) == postprocess_description(x).
    """
    if not text:
        return ""
    t = text.replace("\r\n", "\n").replace("\r", "\n")
    t = re.sub(r"[ \t]+$", "", t, flags=re.M)
    t = re.sub(r"\n{3,}", "\n\n", t).strip()
    if not t:
        return ""

    has_list = any(_is_list_line(line.strip()) for line in t.split("\n"))
    if "\n\n" not in t and len(t) > REFLOW_MIN_CHARS and not has_list:
        t = _regroup_sentences(t)
    return _reflow_lines(t)
