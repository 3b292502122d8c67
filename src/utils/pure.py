from datetime import datetime
from typing import List, Literal, Optional

ALIGN_MAP = {
    "l": ":---",
    "c": ":---:",
    "r": "---:",
}


def generate_markdown_table(
    headers: Optional[List[str]],
    rows: List[List[object]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Render rows as a Markdown table.

    Args:
        headers: column headers, or None to promote the first row.
        rows: cell values, stringified on the way out.
        aligns: 'l', 'c' or 'r' per column, centered by default.
    """
    if not rows and not headers:
        return ""
    if not headers:
        headers, rows = rows[0], rows[1:]

    cols = [str(h) for h in headers]
    aligns = aligns or ["c"] * len(cols)
    if len(aligns) != len(cols):
        raise ValueError("Length of aligns must match number of headers.")

    def line(cells) -> str:
        return "| " + " | ".join(str(c) for c in cells) + " |"

    out = [line(cols), line(ALIGN_MAP[a] for a in aligns)]
    out.extend(line(row) for row in rows)
    return "\n".join(out)


def format_money(minor_units: int, symbol: str = "R$") -> str:
    """
    129900 -> 'R$ 1.299,00'. Presentation only, never parsed back.
    """
    sign = "-" if minor_units < 0 else ""
    units, cents = divmod(abs(int(minor_units)), 100)
    grouped = f"{units:,}".replace(",", ".")
    return f"{sign}{symbol} {grouped},{cents:02d}"


def parse_money_input(text: str) -> int:
    """
    Turn what an admin types ('1299', '1299.90', '1299,9') into minor units.

    Only for form input; raises ValueError on anything else.
    """
    cleaned = (text or "").strip().replace(",", ".")
    if not cleaned:
        raise ValueError("Price is required.")
    whole, _, frac = cleaned.partition(".")
    if not whole.isdigit() or (frac and not frac.isdigit()) or len(frac) > 2:
        raise ValueError(f"Invalid price: {text!r}")
    return int(whole) * 100 + int(frac.ljust(2, "0") or 0)


def format_when(when: datetime) -> str:
    return when.strftime("%Y-%m-%d %H:%M")


def tracking_code_arg(text: str, clear: bool = False) -> Optional[str]:
    """
    Map the dashboard's tracking field to ``update_status``: blank keeps the
    current code, ``clear`` wipes it, anything else replaces it.
    """
    if clear:
        return ""
    return (text or "").strip() or None
