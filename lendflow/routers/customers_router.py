# lendflow/routers/customers_router.py
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette import status

from lendflow.utils.database import get_db
from lendflow.models.customer_model import Customer
from lendflow.schemas.customer_schema import CustomerCreate, CustomerOut
from lendflow.schemas.loan_schema import LoanOut
from lendflow.services.store import Store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])


# READ ALL
@router.get("", response_model=list[CustomerOut])
def list_customers(db: Session = Depends(get_db)):
    return Store(db).list_customers()


# CREATE
@router.post("", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerCreate, db: Session = Depends(get_db)):
    store = Store(db)

    # Ensure unique email
    if store.find_customer_by_email(payload.email):
        raise HTTPException(status.HTTP_409_CONFLICT, "Customer with this email already exists")

    customer = Customer(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        address=payload.address,
    )

    try:
        store.save(customer)
        db.commit()
    except IntegrityError:
        # lost a race against another insert of the same email
        db.rollback()
        raise HTTPException(status.HTTP_409_CONFLICT, "Customer with this email already exists")
    except Exception:
        db.rollback()
        raise

    db.refresh(customer)
    logger.info("Customer %s created (%s)", customer.customer_id, customer.email)
    return customer


# READ ONE
@router.get("/{customer_id}", response_model=CustomerOut)
def get_customer(customer_id: str, db: Session = Depends(get_db)):
    customer = Store(db).find(Customer, customer_id)
    if not customer:
        raise HTTPException(404, "Customer not found")
    return customer


@router.get("/{customer_id}/loans", response_model=list[LoanOut])
def customer_loans(customer_id: str, db: Session = Depends(get_db)):
    store = Store(db)
    if not store.find(Customer, customer_id):
        raise HTTPException(404, "Customer not found")
    return store.list_loans(customer_id=customer_id)
