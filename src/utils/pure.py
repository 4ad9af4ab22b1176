from typing import Iterable, List, Literal, Optional, Sequence


def format_amount(value: float) -> str:
    """
    Render a money amount the way the shop prints it in messages:
    whole amounts without decimals (300), others with up to two (19.9, 12.35).
    """
    rounded = round(float(value), 2)
    if rounded == int(rounded):
        return str(int(rounded))
    return f"{rounded:.2f}".rstrip("0")


def format_money(value: float, currency: str = "MAD") -> str:
    return f"{format_amount(value)} {currency}"


def generate_markdown_table(
    headers: Optional[Sequence[object]],
    rows: Iterable[Sequence[object]],
    aligns: Optional[List[Literal["l", "c", "r"]]] = None,
) -> str:
    """
    Generate a Markdown table for MarkdownViewer widgets.

    Args:
        headers: column headers, or None to promote the first row.
        rows: table rows; cells are converted with str().
        aligns: 'l', 'c' or 'r' per column, left aligned when omitted.

    Returns:
        str: the table, or "" when there is nothing to show.
    """
    rows = [[str(cell) for cell in row] for row in rows]
    if not headers:
        if not rows:
            return ""
        headers, rows = rows[0], rows[1:]
    headers = [str(h) for h in headers]

    if aligns is None:
        aligns = ["l"] * len(headers)
    elif len(aligns) != len(headers):
        raise ValueError("Length of aligns must match number of headers.")

    align_map = {"l": ":---", "c": ":---:", "r": "---:"}
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join(align_map[a] for a in aligns) + " |",
    ]
    # pipes inside cells would split the column
    lines += ["| " + " | ".join(c.replace("|", "\\|") for c in row) + " |" for row in rows]
    return "\n".join(lines)
