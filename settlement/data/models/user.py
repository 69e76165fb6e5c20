# settlement/data/models/user.py
from sqlalchemy import Column, String

from settlement.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    name = Column(String(100), nullable=True)
    surname = Column(String(100), nullable=True)
    email = Column(String(320), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=True)
