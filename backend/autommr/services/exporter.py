"""
Excel export service for extracted manifest data.

Maps the header and waste items onto a fixed column layout, one row per
item, and writes an .xlsx workbook in memory.
"""
import logging
import re
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, List, Optional

import pandas as pd
from openpyxl.utils import get_column_letter

from autommr.models import FullExtractedData, MMRWasteItem

logger = logging.getLogger(__name__)

SHEET_NAME = "Dados MMR"
MISSING = "N/A"
TOTAL_LABEL = "TOTAL"

EXPORT_COLUMNS = [
    "Atividade",
    "Bacia",
    "Projeto",
    "Poço",
    "Gerador",
    "Embarcação",
    "Base de Apoio",
    "MMR/MRB/FCDR",
    "Data MMR",
    "Item",
    "Código",
    "Tipo de Resíduo",
    "Descrição",
    "Acondicionamento",
    "Quantidade",
    "Unidade",
    "Peso (KG)",
    "Classe NBR",
    "MTR",
]

# Multipliers to kilograms
KG_UNITS = {'kg', 'kgs', 'quilo', 'quilos', 'quilograma', 'quilogramas'}
TONNE_UNITS = {'t', 'tn', 'ton', 'tons', 'tonelada', 'toneladas'}

_NUMBER_RE = re.compile(r"[-+]?\d[\d.,]*")
_TRAILING_UNIT_RE = re.compile(r"([A-Za-zÀ-ÿ]+)\.?\s*$")
_THOUSANDS_DOT_RE = re.compile(r"[-+]?[1-9]\d{0,2}\.\d{3}")


def clean_name(value: Optional[str]) -> Optional[str]:
    """Keep letters and single spaces only ('M/V DELTA-COMMANDER 2' -> 'M V DELTA COMMANDER')."""
    if value is None:
        return None
    letters = ''.join(c if c.isalpha() else ' ' for c in str(value))
    cleaned = ' '.join(letters.split())
    return cleaned or None


def extract_numeric_code(value: Optional[str]) -> Optional[str]:
    """Longest run of digits in a code field ('MTR nº 2113232195' -> '2113232195')."""
    if value is None:
        return None
    runs = re.findall(r"\d+", str(value))
    if not runs:
        return None
    return max(runs, key=len)


def parse_quantity(value: Any) -> Optional[float]:
    """
    Read a number written by hand or by the model.

    Handles '715', '12,5', '1.234,5', '1,234.5', '9 kg' and plain numbers.
    A single comma is a decimal separator. Several dots, or one dot
    followed by exactly three digits ('1.500'), are thousands separators.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    match = _NUMBER_RE.search(str(value))
    if not match:
        return None
    number = match.group(0).rstrip('.,')

    if ',' in number and '.' in number:
        if number.rfind(',') > number.rfind('.'):
            number = number.replace('.', '').replace(',', '.')
        else:
            number = number.replace(',', '')
    elif ',' in number:
        if number.count(',') > 1:
            number = number.replace(',', '')
        else:
            number = number.replace(',', '.')
    elif number.count('.') > 1 or _THOUSANDS_DOT_RE.fullmatch(number):
        number = number.replace('.', '')

    try:
        return float(number)
    except ValueError:
        return None


def normalize_unit(unit: Optional[str]) -> Optional[str]:
    if unit is None:
        return None
    return str(unit).strip().lower().rstrip('.') or None


def _unit_factor(unit: Optional[str]) -> Optional[float]:
    unit = normalize_unit(unit)
    if unit in KG_UNITS:
        return 1.0
    if unit in TONNE_UNITS:
        return 1000.0
    return None


def item_weight_kg(item: MMRWasteItem) -> Optional[float]:
    """
    Weight of one item in kilograms.

    When the quantity is expressed in a mass unit (kg or tonnes) it is
    converted; otherwise the 'Peso (KG)' column is used.
    """
    unit = item.unit
    if unit is None and isinstance(item.quantity, str):
        match = _TRAILING_UNIT_RE.search(item.quantity)
        if match:
            unit = match.group(1)

    factor = _unit_factor(unit)
    if factor is not None:
        quantity = parse_quantity(item.quantity)
        if quantity is not None:
            return quantity * factor

    return parse_quantity(item.weight_kg)


def total_weight_kg(items: List[MMRWasteItem]) -> float:
    """Sum of known item weights in kilograms."""
    total = 0.0
    for item in items:
        weight = item_weight_kg(item)
        if weight is not None:
            total += weight
    return total


def _or_missing(value: Any) -> Any:
    return MISSING if value is None else value


def build_rows(data: FullExtractedData) -> List[Dict[str, Any]]:
    """One export row per waste item, followed by a totals row."""
    header = data.header
    shared = {
        "Atividade": _or_missing(header.activity),
        # Basin goes under Projeto; the Bacia column is left unfilled
        "Bacia": MISSING,
        "Projeto": _or_missing(header.basin),
        "Poço": _or_missing(header.well),
        "Gerador": _or_missing(header.generator),
        "Embarcação": _or_missing(clean_name(header.carrier)),
        "Base de Apoio": _or_missing(clean_name(header.base_location)),
        "MMR/MRB/FCDR": _or_missing(header.mmr_no),
        "Data MMR": _or_missing(header.date),
    }

    rows = []
    for item in data.items:
        row = dict(shared)
        row.update({
            "Item": _or_missing(item.item_id),
            "Código": _or_missing(item.code),
            "Tipo de Resíduo": _or_missing(item.waste_type),
            "Descrição": _or_missing(item.description),
            "Acondicionamento": _or_missing(item.packaging),
            "Quantidade": _or_missing(item.quantity),
            "Unidade": _or_missing(item.unit),
            "Peso (KG)": _or_missing(item_weight_kg(item)),
            "Classe NBR": _or_missing(item.nbr_class),
            "MTR": _or_missing(extract_numeric_code(item.mtr)),
        })
        rows.append(row)

    totals = {column: "" for column in EXPORT_COLUMNS}
    totals["Item"] = TOTAL_LABEL
    totals["Peso (KG)"] = total_weight_kg(data.items)
    rows.append(totals)
    return rows


def export_filename(now: Optional[datetime] = None) -> str:
    """Timestamped workbook name, e.g. autommr_export_20250227_143005.xlsx."""
    now = now or datetime.now()
    return f"autommr_export_{now.strftime('%Y%m%d_%H%M%S')}.xlsx"


def build_workbook(data: Optional[FullExtractedData]) -> bytes:
    """
    Write the export sheet to an in-memory workbook.

    Raises:
        ValueError: If there is nothing to export
    """
    if data is None or not data.items:
        raise ValueError("There is no data to export.")

    frame = pd.DataFrame(build_rows(data), columns=EXPORT_COLUMNS)

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        frame.to_excel(writer, sheet_name=SHEET_NAME, index=False)
        worksheet = writer.sheets[SHEET_NAME]
        for index, column in enumerate(EXPORT_COLUMNS, 1):
            longest = max([len(str(v)) for v in frame[column]] + [len(column)])
            worksheet.column_dimensions[get_column_letter(index)].width = min(longest + 2, 60)

    logger.info(f"Built workbook with {len(data.items)} item row(s)")
    return buffer.getvalue()
