# models/category.py
from training_portal.extensions import db
from .base import BaseModel


class Category(BaseModel):
    __tablename__ = 'categories'

    name = db.Column(db.String(100), nullable=False, index=True)
    color = db.Column(db.String(7), nullable=False)

    def __repr__(self):
        return f'<Category {self.name}>'
