from decimal import Decimal, InvalidOperation

from django import template

register = template.Library()


@register.filter
def hours(value):
    """Render an hours amount without trailing zeros: 2.50 -> 2.5, 3.00 -> 3."""
    if value is None or value == '':
        return ''
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return value
    text = format(amount.normalize(), 'f')
    return '0' if text in ('-0', '') else text
