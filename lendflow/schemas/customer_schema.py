from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class CustomerCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: str = Field(max_length=254, pattern=r"^\S+@\S+\.\S+$")
    phone: str = Field(min_length=3, max_length=30, pattern=r"^\+?[\d\s()-]+$")
    address: str = Field(min_length=1, max_length=500)

    @field_validator("name", "email", "phone", "address", mode="before")
    def strip_text(cls, v):
        if v is None:
            return v
        return str(v).strip()

    @field_validator("email")
    def lower_email(cls, v):
        return v.lower()


class CustomerOut(BaseModel):
    customer_id: str
    name: str
    email: str
    phone: str
    address: str
    created_on: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerSummary(BaseModel):
    customer_id: str
    name: str
    email: str
    phone: str

    class Config:
        from_attributes = True


class CustomerDetail(CustomerSummary):
    address: str
