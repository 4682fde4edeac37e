from babel.numbers import format_currency as babel_format_currency

DEFAULT_CURRENCY = "INR"
DEFAULT_LOCALE = "en_IN"


def format_currency(value: float, currency: str = DEFAULT_CURRENCY, locale_str: str = DEFAULT_LOCALE) -> str:
    return babel_format_currency(value, currency, locale=locale_str)
