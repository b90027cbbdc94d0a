USD = "USD"
EUR = "EUR"
CAD = "CAD"

SUPPORTED_CURRENCIES = frozenset({USD, EUR, CAD})


def is_currency_supported(currency: str) -> bool:
    return currency in SUPPORTED_CURRENCIES
