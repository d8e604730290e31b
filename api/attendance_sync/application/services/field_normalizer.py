"""
Normalizacion de celdas de fecha y hora escritas a mano en la hoja.

Las hojas de origen mezclan "16 Dec 25", "2025-12-16", "9:51 pm", "21:51"
y duraciones negativas ("-0:20:00") que salen de formulas. Ninguna funcion
de este modulo lanza excepciones: una celda mala no puede abortar el sync.
"""
import re
from datetime import date, datetime
from typing import Optional

from loguru import logger

_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
# "16 Dec 25", "1 jan 2026"
_DAY_MONTH_YEAR_RE = re.compile(r"(?<!\d)(\d{1,2})\s+([A-Za-z]{3})\s+(\d{4}|\d{2})(?!\d)")
# "9:51 pm", "12:00am", "9:51:00 PM"
_AMPM_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?\s?(am|pm)$", re.IGNORECASE)

# Formatos aceptados por parse_loose_date ademas de ISO
_LOOSE_DATE_FORMATS = (
    "%d/%m/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%d %B %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
)


def normalize_date(text: Optional[str]) -> str:
    """
    Convierte una fecha a YYYY-MM-DD cuando reconoce el formato.

    - vacio / None -> ""
    - YYYY-MM-DD -> igual
    - "<dia> <mes abreviado> <año 2 o 4 digitos>" -> YYYY-MM-DD (año corto => 20xx)
    - cualquier otra cosa -> el texto tal cual (el caller debe re-validar)
    """
    if text is None:
        return ""
    value = str(text).strip()
    if not value:
        return ""

    if _ISO_DATE_RE.match(value):
        return value

    match = _DAY_MONTH_YEAR_RE.search(value)
    if match:
        day, month, year = match.groups()
        month_key = month.lower()
        if month_key in _MONTHS:
            full_year = f"20{year}" if len(year) == 2 else year
            month_number = _MONTHS.index(month_key) + 1
            return f"{full_year}-{month_number:02d}-{day.zfill(2)}"

    return value


def is_canonical_date(text: Optional[str]) -> bool:
    """True solo para YYYY-MM-DD que ademas es una fecha de calendario real."""
    if not text or not _ISO_DATE_RE.match(text):
        return False
    try:
        date.fromisoformat(text)
    except ValueError:
        return False
    return True


def normalize_time(text: Optional[str]) -> Optional[str]:
    """
    Convierte una hora a HH:MM:SS o None si no es interpretable.

    Reglas en orden:
    - vacio, "-", "null" -> None
    - empieza con "-" (duracion negativa) -> None
    - contiene am/pm y es exactamente "H:MM[:SS] am" con hora 1-12 -> 24h
    - contiene ":" -> H:M[:S] con padding y validacion de rangos
    """
    if text is None:
        return None
    value = str(text).strip()
    if not value or value == "-" or value.lower() == "null":
        return None

    if value.startswith("-"):
        logger.debug(f"Hora negativa descartada: {value}")
        return None

    lowered = value.lower()
    if "am" in lowered or "pm" in lowered:
        match = _AMPM_RE.match(value)
        if match:
            hour_text, minute, second, meridiem = match.groups()
            second = second or "00"
            hour = int(hour_text)
            if not 1 <= hour <= 12 or int(minute) > 59 or int(second) > 59:
                logger.debug(f"Hora AM/PM fuera de rango: {value}")
                return None
            if meridiem.lower() == "pm" and hour < 12:
                hour += 12
            elif meridiem.lower() == "am" and hour == 12:
                hour = 0
            return f"{hour:02d}:{minute}:{second}"
        # Sin match AM/PM: se intenta como H:M[:S]

    if ":" in value:
        parts = value.split(":")
        if len(parts) >= 2:
            hour = parts[0].strip().zfill(2)
            minute = parts[1].strip().zfill(2)
            second = parts[2].strip().zfill(2) if len(parts) > 2 and parts[2].strip() else "00"
            if hour.isdecimal() and minute.isdecimal() and second.isdecimal():
                if int(hour) <= 23 and int(minute) <= 59 and int(second) <= 59:
                    return f"{hour}:{minute}:{second}"

    logger.debug(f"Formato de hora invalido: {value}")
    return None


def parse_loose_date(text: Optional[str]) -> Optional[date]:
    """
    Parseo general de fechas para parametros de entrada (rango de export).

    Acepta ISO (fecha o datetime), el formato "16 Dec 25" y _LOOSE_DATE_FORMATS.
    Retorna None si nada aplica; nunca lanza.
    """
    if text is None:
        return None
    value = str(text).strip()
    if not value or value.lower() in ("undefined", "null", "none"):
        return None

    normalized = normalize_date(value)
    if is_canonical_date(normalized):
        return date.fromisoformat(normalized)

    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    for fmt in _LOOSE_DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None
