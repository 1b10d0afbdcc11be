"""Receipt Sequence Domain Entity

One counter row per receipt day prefix (YYMMDD).
"""

from datetime import datetime
from sqlmodel import Field, Column
from sqlalchemy import Integer, String
from src.domain.base import BaseModel


class ReceiptSequence(BaseModel, table=True):
    __tablename__ = "receipt_sequences"

    date_prefix: str = Field(
        sa_column=Column(String(6), primary_key=True),
        description="Day bucket, YYMMDD",
    )

    last_value: int = Field(
        sa_column=Column(Integer, nullable=False),
        description="Highest sequence issued for the day",
    )

    updated_at: datetime = Field(default_factory=datetime.utcnow)
