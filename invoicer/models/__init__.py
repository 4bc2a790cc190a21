from invoicer.models.user import User
from invoicer.models.customer import Customer
from invoicer.models.invoice import Invoice
from invoicer.models.invoice_item import InvoiceItem
from invoicer.models.second_factor_attempt import SecondFactorAttempt
