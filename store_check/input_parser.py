from typing import List, Optional
from loguru import logger

from store_check.config import CITY_PREFIXES, DISTRICTS, MAP_APP_TAGS, URL_PREFIXES
from store_check.models import ParsedInput


def _strip_city_prefix(address: str) -> str:
    """Remove the leading city boilerplate that map apps put in front of every address."""
    address = address.strip()
    for prefix in CITY_PREFIXES:
        if address.startswith(prefix):
            return address[len(prefix):].strip()
    return address


def _is_noise(line: str) -> bool:
    # Tag markers like "[네이버 지도]" and share links
    if line.startswith("[") and line.endswith("]"):
        return True
    return line.startswith(URL_PREFIXES)


def _meaningful_lines(text: str) -> List[str]:
    lines = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if trimmed and not _is_noise(trimmed):
            lines.append(trimmed)
    return lines


def _line_at(lines: List[str], index: int) -> str:
    return lines[index].strip() if index < len(lines) else ""


def extract_fields(text: str, untagged_as_address: bool = False) -> ParsedInput:
    """
    Extract the store name and address from text pasted out of a map app.

    Text starting with a map app tag uses the fixed share layout: tag on line 1,
    name on line 2, address on line 3. Any other text is scanned line by line,
    skipping tag markers and URLs; the first remaining line is the name and the
    rest is joined into the address.

    Args:
        text (str): Raw pasted text.
        untagged_as_address (bool): Treat untagged text as an address only, leaving the name empty.

    Returns:
        ParsedInput: Extracted fields, empty strings for anything not found.
    """
    if not text:
        return ParsedInput()

    if text.startswith(MAP_APP_TAGS):
        lines = text.split("\n")
        name = _line_at(lines, 1)
        address = _strip_city_prefix(_line_at(lines, 2))
        logger.debug(f"🏷️ Tagged share text → name='{name}', address='{address}'")
        return ParsedInput(name=name, address=address)

    lines = _meaningful_lines(text)
    if untagged_as_address:
        return ParsedInput(name="", address=_strip_city_prefix(" ".join(lines)))

    name = lines[0] if lines else ""
    address = _strip_city_prefix(" ".join(lines[1:]))
    return ParsedInput(name=name, address=address)


def extract_district(address: str) -> Optional[str]:
    """Return the first known district contained in the address, or None."""
    if not address:
        return None
    for district in DISTRICTS:
        if district in address:
            return district
    return None
