import uuid

from sqlalchemy import Column, DateTime
from sqlalchemy.orm import declarative_base, declared_attr
from sqlalchemy.types import Uuid

from paddock.core.clock import utcnow


# Define a base model with common fields
class BaseModel(declarative_base()):
    __abstract__ = True

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Timestamps are set application-side so they are never expired after a
    # flush and always carry UTC.
    @declared_attr
    def created_at(cls):
        return Column(DateTime(timezone=True), nullable=False, default=utcnow)

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            onupdate=utcnow,
        )


metadata = BaseModel.metadata
