from billing.models.client import Client
from billing.models.product import Product
from billing.models.document import DocumentLine
from billing.models.invoice import Invoice, InvoiceStatus
from billing.models.quote import Quote, QuoteStatus
from billing.models.delivery_note import DeliveryNote, DeliveryNoteStatus
from billing.models.payment import Payment, PaymentMethod, PaymentStatus
from billing.models.user import User
from billing.models.settings import Settings

__all__ = [
    'Client', 'Product', 'DocumentLine',
    'Invoice', 'InvoiceStatus', 'Quote', 'QuoteStatus',
    'DeliveryNote', 'DeliveryNoteStatus',
    'Payment', 'PaymentMethod', 'PaymentStatus',
    'User', 'Settings',
]
