from sqlalchemy import Boolean, Column, Integer, Numeric, String, Text

from storefront.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category_id = Column(Integer, nullable=True)
    description = Column(Text)
    subcategory = Column(String(20))
    stock = Column(Integer, nullable=False, default=0)
    featured = Column(Boolean, nullable=False, default=False)
    image_url = Column(String(200))
