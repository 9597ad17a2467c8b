"""
Normalization of extraction results into the generic section/field shape.

Both the typed manifest result and the free-form sections answer end up as
``[ExtractedSection(title, [ExtractedField(topic, answer)])]`` so they can be
rendered the same way.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from autommr.models import ExtractedField, ExtractedSection, FullExtractedData

logger = logging.getLogger(__name__)

HEADER_SECTION_TITLE = "Dados Gerais do MMR"
ITEMS_SECTION_TITLE = "Itens de Resíduo"

# Display labels in form order
HEADER_LABELS = [
    ('mmr_no', 'MMR N°'),
    ('date', 'Data'),
    ('generator', 'Gerador'),
    ('carrier', 'Transportador'),
    ('base_location', 'Base de Apoio'),
    ('activity', 'Atividade'),
    ('basin', 'Bacia'),
    ('well', 'Poço'),
    ('project', 'Projeto'),
]

ITEM_LABELS = [
    ('item_id', 'Item'),
    ('code', 'Código'),
    ('waste_type', 'Tipo de Resíduo'),
    ('description', 'Descrição'),
    ('packaging', 'Acondicionamento'),
    ('quantity', 'Qtd.'),
    ('unit', 'Un.'),
    ('weight_kg', 'Peso (KG)'),
    ('nbr_class', 'Classe NBR'),
    ('mtr', 'MTR'),
]


def _answer(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def sections_from_mmr(data: FullExtractedData) -> List[ExtractedSection]:
    """Header section followed by one section per waste item."""
    sections = [
        ExtractedSection(
            title=HEADER_SECTION_TITLE,
            fields=[
                ExtractedField(topic=label, answer=_answer(getattr(data.header, attr)))
                for attr, label in HEADER_LABELS
            ],
        )
    ]

    for index, item in enumerate(data.items, 1):
        sections.append(
            ExtractedSection(
                title=f"{ITEMS_SECTION_TITLE} - {item.item_id or index}",
                fields=[
                    ExtractedField(topic=label, answer=_answer(getattr(item, attr)))
                    for attr, label in ITEM_LABELS
                ],
            )
        )
    return sections


def _fields_from_mapping(mapping: Dict[str, Any]) -> List[ExtractedField]:
    return [ExtractedField(topic=str(topic), answer=_answer(answer)) for topic, answer in mapping.items()]


def _fields_from_list(entries: List[Any]) -> List[ExtractedField]:
    fields = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Skipping non-object field entry: {str(entry)[:80]}")
            continue
        topic = entry.get('topic', entry.get('label', entry.get('name')))
        if topic is None:
            fields.extend(_fields_from_mapping(entry))
            continue
        fields.append(ExtractedField(topic=str(topic), answer=_answer(entry.get('answer', entry.get('value')))))
    return fields


def _section_from_object(obj: Dict[str, Any], index: int) -> ExtractedSection:
    title = obj.get('title') or obj.get('section') or f"Seção {index}"
    fields = obj.get('fields')
    if isinstance(fields, list):
        return ExtractedSection(title=str(title), fields=_fields_from_list(fields))
    if isinstance(fields, dict):
        return ExtractedSection(title=str(title), fields=_fields_from_mapping(fields))

    rest = {k: v for k, v in obj.items() if k not in ('title', 'section')}
    return ExtractedSection(title=str(title), fields=_fields_from_mapping(rest))


def sections_from_payload(value: Any) -> List[ExtractedSection]:
    """
    Normalize a free-form JSON answer into sections.

    Accepted shapes:
    - ``[{"title": ..., "fields": [{"topic": ..., "answer": ...}]}]``
    - ``{"Section title": {"topic": "answer"}}``
    - ``{"topic": "answer"}`` (a single untitled section)
    """
    if value is None:
        return []

    if isinstance(value, list):
        sections = []
        for index, obj in enumerate(value, 1):
            if isinstance(obj, dict):
                sections.append(_section_from_object(obj, index))
            else:
                logger.warning(f"Skipping non-object section entry: {str(obj)[:80]}")
        return sections

    if isinstance(value, dict):
        if 'title' in value or 'fields' in value:
            return [_section_from_object(value, 1)]

        if value and all(isinstance(v, dict) for v in value.values()):
            return [
                ExtractedSection(title=str(title), fields=_fields_from_mapping(fields))
                for title, fields in value.items()
            ]
        return [ExtractedSection(title="Dados Extraídos", fields=_fields_from_mapping(value))]

    return [ExtractedSection(title="Dados Extraídos", fields=[ExtractedField(topic="Resposta", answer=_answer(value))])]
