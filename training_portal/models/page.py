# models/page.py
from sqlalchemy import Index

from training_portal.extensions import db
from .base import BaseModel


class PageContent(BaseModel):
    """Live block tree of a CMS page, addressed by slug."""

    __tablename__ = 'page_content'

    page_slug = db.Column(db.String(100), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    blocks = db.Column(db.JSON, nullable=False, default=list)
    is_published = db.Column(db.Boolean, default=False, nullable=False)
    published_at = db.Column(db.DateTime, nullable=True)

    versions = db.relationship('PageVersion', back_populates='page', lazy='dynamic',
                               cascade='all, delete-orphan')

    __table_args__ = (
        Index('uq_page_content_slug', 'page_slug', unique=True),
    )

    def __repr__(self):
        return f'<PageContent {self.page_slug}>'


class PageVersion(BaseModel):
    """Snapshot of a page's blocks taken before each save."""

    __tablename__ = 'page_versions'

    page_id = db.Column(db.String(36), db.ForeignKey('page_content.id'), nullable=False, index=True)
    version_number = db.Column(db.Integer, nullable=False)
    blocks = db.Column(db.JSON, nullable=False, default=list)
    notes = db.Column(db.String(500), nullable=True)

    page = db.relationship('PageContent', back_populates='versions')

    __table_args__ = (
        Index('uq_page_version_number', 'page_id', 'version_number', unique=True),
    )

    def __repr__(self):
        return f'<PageVersion {self.page_id} v{self.version_number}>'
