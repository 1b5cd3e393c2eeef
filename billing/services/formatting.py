"""Display formatting for amounts, dates and percentages; bad input renders as zero."""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext

from flask import current_app, has_app_context

DEFAULT_DECIMALS = 3
DEFAULT_SYMBOL = 'DT'


def _to_decimal(value) -> Decimal:
    """Decimal for any numeric-looking value; NaN and infinities become 0."""
    if value is None or value == '':
        return Decimal('0')
    try:
        result = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return Decimal('0')
    return result if result.is_finite() else Decimal('0')


def _quantize(value: Decimal, decimals: int) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = max(28, value.adjusted() + decimals + 2)
        ctx.rounding = ROUND_HALF_UP
        return value.quantize(Decimal(1).scaleb(-decimals))


def _currency_defaults():
    if has_app_context():
        return (current_app.config.get('CURRENCY_DECIMALS', DEFAULT_DECIMALS),
                current_app.config.get('CURRENCY_SYMBOL', DEFAULT_SYMBOL))
    return DEFAULT_DECIMALS, DEFAULT_SYMBOL


def format_number(value, decimals: int = DEFAULT_DECIMALS) -> str:
    """1234.5 -> '1 234,500' (space for thousands, comma for decimals)."""
    quantized = _quantize(_to_decimal(value), decimals)
    return f"{quantized:,.{decimals}f}".replace(',', ' ').replace('.', ',')


def format_currency(amount, decimals: int = None, symbol: str = None) -> str:
    """'1 234,500 DT'. NaN and infinities give '0,000 DT'."""
    default_decimals, default_symbol = _currency_defaults()
    decimals = default_decimals if decimals is None else decimals
    symbol = default_symbol if symbol is None else symbol
    text = format_number(amount, decimals)
    return f"{text} {symbol}" if symbol else text


def format_percent(value) -> str:
    """10 -> '10 %', 12.5 -> '12,5 %'."""
    text = f"{_to_decimal(value).normalize():f}".replace('.', ',')
    return f"{text} %"


def format_date(value) -> str:
    """dd/mm/YYYY."""
    if not value:
        return ''
    if isinstance(value, (date, datetime)):
        return value.strftime('%d/%m/%Y')
    try:
        return datetime.fromisoformat(str(value)).strftime('%d/%m/%Y')
    except ValueError:
        return str(value)


# ---------- Amount in words ----------

_UNITS = [
    'zéro', 'un', 'deux', 'trois', 'quatre', 'cinq', 'six', 'sept', 'huit', 'neuf',
    'dix', 'onze', 'douze', 'treize', 'quatorze', 'quinze', 'seize',
]
_TENS = {2: 'vingt', 3: 'trente', 4: 'quarante', 5: 'cinquante', 6: 'soixante'}
_SCALES = [(10 ** 9, 'milliard'), (10 ** 6, 'million')]


def _below_hundred(n: int) -> str:
    if n < 17:
        return _UNITS[n]
    if n < 20:
        return f"dix-{_UNITS[n - 10]}"

    tens, unit = divmod(n, 10)
    if tens == 7:
        # 70-79 are built on soixante + 10..19
        return 'soixante et onze' if n == 71 else f"soixante-{_below_hundred(n - 60)}"
    if tens == 8:
        return 'quatre-vingts' if unit == 0 else f"quatre-vingt-{_UNITS[unit]}"
    if tens == 9:
        return f"quatre-vingt-{_below_hundred(n - 80)}"

    word = _TENS[tens]
    if unit == 0:
        return word
    if unit == 1:
        return f"{word} et un"
    return f"{word}-{_UNITS[unit]}"


def _below_thousand(n: int) -> str:
    hundreds, rest = divmod(n, 100)
    if not hundreds:
        return _below_hundred(rest)
    head = 'cent' if hundreds == 1 else f"{_UNITS[hundreds]} cent"
    if not rest:
        return head if hundreds == 1 else f"{head}s"
    return f"{head} {_below_hundred(rest)}"


def number_to_words(n: int) -> str:
    """Non-negative integer in lowercase French words."""
    if n == 0:
        return _UNITS[0]

    parts = []
    for value, name in _SCALES:
        count, n = divmod(n, value)
        if count:
            parts.append(f"{number_to_words(count)} {name}{'s' if count > 1 else ''}")

    thousands, n = divmod(n, 1000)
    if thousands == 1:
        parts.append('mille')
    elif thousands:
        words = _below_thousand(thousands)
        # "cents" and "vingts" lose their s before the invariable "mille"
        if words.endswith(('cents', 'vingts')):
            words = words[:-1]
        parts.append(f"{words} mille")

    if n:
        parts.append(_below_thousand(n))
    return ' '.join(parts)


def amount_in_words(amount, currency: str = 'dinar', subunit: str = 'millime') -> str:
    """169.220 -> 'CENT SOIXANTE-NEUF DINARS ET 220 MILLIMES'.

    The integer part is spelled out; the sub-unit is written as a 3-digit
    count and left out when it is zero.
    """
    value = _to_decimal(amount)
    prefix = ''
    if value < 0:
        prefix, value = 'moins ', -value

    value = _quantize(value, 3)
    units = int(value)
    sub = int((value - units) * 1000)

    words = f"{number_to_words(units)} {currency}{'s' if units > 1 else ''}"
    if sub:
        words += f" et {sub:03d} {subunit}{'s' if sub > 1 else ''}"
    return (prefix + words).upper()
