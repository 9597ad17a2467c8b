"""
HTML table rendering for extraction results.
"""
import html
import logging
from typing import List

import pandas as pd

from autommr.models import ExtractedSection, FullExtractedData
from autommr.services.manifest_pipeline.normalizer import (
    HEADER_LABELS, HEADER_SECTION_TITLE, ITEM_LABELS, ITEMS_SECTION_TITLE
)

logger = logging.getLogger(__name__)

MISSING = "N/A"
TABLE_CLASSES = "table table-striped"


def header_frame(data: FullExtractedData) -> pd.DataFrame:
    """Two-column frame of header labels and values."""
    return pd.DataFrame(
        [(label, getattr(data.header, attr)) for attr, label in HEADER_LABELS],
        columns=["Campo", "Valor"],
    ).fillna(MISSING)


def items_frame(data: FullExtractedData) -> pd.DataFrame:
    """One row per waste item with display column names."""
    columns = [label for _, label in ITEM_LABELS]
    rows = [[getattr(item, attr) for attr, _ in ITEM_LABELS] for item in data.items]
    frame = pd.DataFrame(rows, columns=columns, dtype=object)
    return frame.where(frame.notna(), MISSING)


def sections_frame(section: ExtractedSection) -> pd.DataFrame:
    frame = pd.DataFrame(
        [(f.topic, f.answer) for f in section.fields],
        columns=["Tópico", "Resposta"],
        dtype=object,
    )
    return frame.where(frame.notna(), MISSING)


def _table(frame: pd.DataFrame) -> str:
    return frame.to_html(index=False, classes=TABLE_CLASSES, border=0, na_rep=MISSING)


def render_mmr_html(data: FullExtractedData) -> str:
    """Header table followed by the waste items table."""
    parts = [
        f"<section><h3>{html.escape(HEADER_SECTION_TITLE)}</h3>",
        _table(header_frame(data)),
        "</section>",
        f"<section><h3>{html.escape(ITEMS_SECTION_TITLE)}</h3>",
    ]
    if data.items:
        parts.append(_table(items_frame(data)))
    else:
        parts.append("<p>Nenhum item de resíduo encontrado ou extraído.</p>")
    parts.append("</section>")
    return "\n".join(parts)


def render_sections_html(sections: List[ExtractedSection]) -> str:
    """One titled table per section."""
    if not sections:
        return "<p>Nenhum dado extraído.</p>"

    parts = []
    for section in sections:
        parts.append(f"<section><h3>{html.escape(section.title)}</h3>")
        if section.fields:
            parts.append(_table(sections_frame(section)))
        else:
            parts.append("<p>Sem campos.</p>")
        parts.append("</section>")
    return "\n".join(parts)
