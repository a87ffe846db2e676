"""Best-effort decomposition of free-text Australian addresses.

DONMAN stores the whole postal address in one column, e.g.
"5 Smith St Mornington VIC 3931". The decomposer splits it into street,
suburb, state and postcode. It never reports errors: anything it cannot
place ends up in the street.
"""

from dataclasses import dataclass

AUSTRALIAN_STATES = frozenset({"NSW", "VIC", "QLD", "SA", "WA", "TAS", "NT", "ACT"})

# Compared lowercased, after stripping a trailing period
STREET_SUFFIXES = frozenset(
    {
        "st",
        "street",
        "rd",
        "road",
        "ave",
        "avenue",
        "dr",
        "drive",
        "ct",
        "court",
        "pl",
        "place",
        "cres",
        "crescent",
        "blvd",
        "boulevard",
        "ln",
        "lane",
        "tce",
        "terrace",
        "way",
        "cl",
        "close",
        "pde",
        "parade",
        "hwy",
        "highway",
        "cir",
        "circle",
        "gr",
        "grove",
    }
)


@dataclass(frozen=True)
class AustralianAddress:
    """Decomposed address. Missing parts are empty strings."""

    street: str = ""
    suburb: str = ""
    state: str = ""
    postcode: str = ""


def is_state(token: str) -> bool:
    """Check whether a token is an Australian state or territory abbreviation."""
    return token.upper() in AUSTRALIAN_STATES


def is_postcode(token: str) -> bool:
    """Check whether a token looks like a four digit postcode."""
    return len(token) == 4 and token.isascii() and token.isdigit()


def is_street_suffix(token: str) -> bool:
    """Check whether a token is a street type such as "St" or "Rd."."""
    return token.rstrip(".").lower() in STREET_SUFFIXES


def find_street_end(tokens: list[str], end: int) -> int:
    """Find where the street ends and the suburb begins.

    Args:
        tokens: Address tokens.
        end: Index one past the last token to consider.

    Returns:
        int: Index of the first suburb token, or 0 if no street suffix was found.
    """
    for i in range(end):
        if is_street_suffix(tokens[i]):
            return i + 1
    return 0


def parse_australian_address(address: str | None) -> AustralianAddress:
    """Split a one-line Australian address into its parts.

    The last token is the postcode if it has four digits, and the token
    before it is the state if it is a known abbreviation. Without a postcode
    the last token may still be a state. The street runs up to and including
    the first street-type suffix; the suburb is whatever follows it up to
    the state or postcode.

    Args:
        address: Raw address text.

    Returns:
        AustralianAddress: The decomposed address.
    """
    tokens = [token for token in (address or "").split(" ") if token]
    if not tokens:
        return AustralianAddress()

    state = ""
    postcode = ""
    state_index = -1
    postcode_index = -1

    if is_postcode(tokens[-1]):
        postcode = tokens[-1]
        postcode_index = len(tokens) - 1
        if len(tokens) >= 2 and is_state(tokens[-2]):
            state = tokens[-2].upper()
            state_index = len(tokens) - 2
    elif is_state(tokens[-1]):
        state = tokens[-1].upper()
        state_index = len(tokens) - 1

    if state_index >= 0:
        end = state_index
    elif postcode_index >= 0:
        end = postcode_index
    else:
        end = len(tokens)

    street_end = find_street_end(tokens, end)
    if 0 < street_end < end:
        street = " ".join(tokens[:street_end])
        suburb = " ".join(tokens[street_end:end])
    else:
        street = " ".join(tokens[:end])
        suburb = ""

    return AustralianAddress(street=street, suburb=suburb, state=state, postcode=postcode)
