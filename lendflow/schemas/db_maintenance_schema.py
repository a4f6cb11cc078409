from pydantic import BaseModel, Field
from typing import Literal


class ClearRequest(BaseModel):
    collections: list[Literal["customers", "loans", "payments"]] = Field(min_length=1)


class TableStatus(BaseModel):
    name: str
    count: int


class DatabaseStatusOut(BaseModel):
    connection: str
    database: str
    collections: list[TableStatus]
