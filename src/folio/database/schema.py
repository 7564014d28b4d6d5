from sqlalchemy import Column, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Document(Base):
    """One stored document. The body is the document's field map serialized as JSON."""

    __tablename__ = "documents"

    collection = Column(String, primary_key=True)
    doc_id = Column(String, primary_key=True)
    body_json = Column(Text, nullable=False)
    written_at_utc = Column(String, nullable=False)  # ISO 8601 string, last write

    __table_args__ = (Index("ix_documents_collection", "collection"),)

