# lendflow/models/customer_model.py

from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from lendflow.utils.database import Base
from lendflow.utils.ids import generate_id, utcnow


class Customer(Base):
    __tablename__ = "customers"

    customer_id = Column(String(20), primary_key=True, default=lambda: generate_id("CUST"))

    name = Column(String(100), nullable=False)
    email = Column(String(254), unique=True, nullable=False, index=True)
    phone = Column(String(30), nullable=False)
    address = Column(Text, nullable=False)

    created_on = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_on = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    loans = relationship("Loan", back_populates="customer", passive_deletes=True)
