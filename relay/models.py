# relay/models.py
from sqlalchemy import Column, Integer, DateTime, Text

from relay.db import Base


class ProcessLog(Base):
    __tablename__ = "process_logs"

    process_number = Column(Integer, primary_key=True, autoincrement=True)
    time = Column(DateTime, nullable=False)
    processing_time = Column(Text, nullable=False)
