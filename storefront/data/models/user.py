from sqlalchemy import Column, Integer, String
from storefront.data.database import Base

class UserModel(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String(50), nullable=False, unique=True)
    role = Column(String(50), nullable=False, default="ROLE_USER")
