from sqlalchemy import Column, Integer, String, Time

from collector_app.database.connection import Base

MAX_FIELD_LENGTH = 255


class Hit(Base):
    """
    One recorded POST event.

    Rows are inserted once and never updated or deleted by the service.
    `created` holds the server time of the insert (a TIME column, no date).
    """
    __tablename__ = "requests"
    __table_args__ = {"mysql_engine": "InnoDB"}

    id = Column("ID", Integer, primary_key=True, autoincrement=True)
    domain = Column(String(MAX_FIELD_LENGTH), nullable=False)
    path = Column(String(MAX_FIELD_LENGTH), nullable=False)
    user = Column(String(MAX_FIELD_LENGTH), nullable=False)
    timezone = Column(String(MAX_FIELD_LENGTH), nullable=False, default="")
    address = Column(String(MAX_FIELD_LENGTH), nullable=False)
    created = Column(Time, nullable=False)
