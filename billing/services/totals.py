from decimal import Decimal

TAX_RATE = Decimal('0.19')

_HUNDRED = Decimal('100')


def _decimal(value) -> Decimal:
    return Decimal(str(value or 0))


def calculate_line_total(quantity, unit_price, discount_percent=0) -> Decimal:
    """quantity * unit_price * (1 - discount_percent / 100)."""
    return _decimal(quantity) * _decimal(unit_price) * (1 - _decimal(discount_percent) / _HUNDRED)


def calculate_document_totals(lines, global_discount_percent=0, tax_enabled=True,
                              tax_rate=TAX_RATE) -> dict:
    """Totals of a document from its lines.

    ``lines`` is an iterable of mappings with ``quantity``, ``unit_price`` and
    an optional ``discount_percent``. Returns ``subtotal``, ``discount_amount``,
    ``net_subtotal``, ``tax`` and ``total``. An empty list gives zeros.
    """
    subtotal = Decimal('0')
    for line in lines:
        subtotal += calculate_line_total(
            line.get('quantity'),
            line.get('unit_price'),
            line.get('discount_percent'),
        )

    discount_amount = subtotal * _decimal(global_discount_percent) / _HUNDRED
    net_subtotal = subtotal - discount_amount
    tax = net_subtotal * _decimal(tax_rate) if tax_enabled else Decimal('0')

    return {
        'subtotal': subtotal,
        'discount_amount': discount_amount,
        'net_subtotal': net_subtotal,
        'tax': tax,
        'total': net_subtotal + tax,
    }
