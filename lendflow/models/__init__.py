# Automatically load all models so metadata knows them
from lendflow.models.customer_model import Customer
from lendflow.models.loan_model import Loan
from lendflow.models.loan_payment_model import LoanPayment
