"""Region and country codes offered by the shipping address form."""

# Brazilian federative units
STATE_CODES = (
    "AC", "AL", "AP", "AM", "BA", "CE", "DF", "ES", "GO",
    "MA", "MT", "MS", "MG", "PA", "PB", "PR", "PE", "PI",
    "RJ", "RN", "RS", "RO", "RR", "SC", "SP", "SE", "TO",
)  # fmt: skip

COUNTRIES = {
    "BR": "Brazil",
    "US": "United States",
    "CA": "Canada",
    "PT": "Portugal",
}

DEFAULT_COUNTRY = "BR"
