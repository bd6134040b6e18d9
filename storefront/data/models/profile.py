from sqlalchemy import Column, Integer, ForeignKey, String

from storefront.data.database import Base


class ProfileModel(Base):
    __tablename__ = "profiles"

    user_id = Column(Integer, ForeignKey("users.id"), primary_key=True)

    first_name = Column(String(50))
    last_name = Column(String(50))
    phone = Column(String(20))
    email = Column(String(200))

    # adres wysylki kopiowany do zamowienia przy checkoucie
    address = Column(String(200), nullable=False)
    city = Column(String(50), nullable=False)
    state = Column(String(2), nullable=False)
    zip = Column(String(20), nullable=False)
