"""City extraction from Czech postal addresses."""


def extract_city(address: str) -> str:
    """Best-effort city from ``"<street>, <postal-code> <city...>"``.

    The last comma segment is split on whitespace; its first word is taken as
    the postal code and the remaining words as the city. Anything that does
    not fit that shape yields an empty string.

    Examples:
        "Stadionová 1, 10000 Praha"          -> "Praha"
        "Milady Horákové 98, 17000 Praha 7"   -> "Praha 7"
        "Sportovní 5, 29301 Mladá Boleslav"   -> "Mladá Boleslav"
        "Stadionová 1, Praha"                 -> ""
    """
    if not address:
        return ""
    parts = address.split(",")
    if len(parts) < 2:
        return ""
    words = parts[-1].split()
    if len(words) < 2:
        return ""
    return " ".join(words[1:])
