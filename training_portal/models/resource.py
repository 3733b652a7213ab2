# models/resource.py
from training_portal.extensions import db
from .base import BaseModel


class ResourceType:
    GUIDELINE = 'Guideline'
    USER_GUIDE = 'User Guide'
    TEMPLATE = 'Template'
    FAQ = 'FAQ'

    ALL = (GUIDELINE, USER_GUIDE, TEMPLATE, FAQ)


class Resource(BaseModel):
    """Static reference material (file URL or external link)."""

    __tablename__ = 'resources'

    title = db.Column(db.String(200), nullable=False, index=True)
    type = db.Column(db.String(20), nullable=False, default=ResourceType.GUIDELINE)
    file_url = db.Column(db.String(2048), nullable=True)
    file_path = db.Column(db.String(512), nullable=True)
    external_link = db.Column(db.String(2048), nullable=True)

    def __repr__(self):
        return f'<Resource {self.title}>'
