"""
Catalog Models
==============

Products and categories. List-shaped and free-form fields (images, tags,
variants, attributes, reviews) are JSON columns; `to_dict()` produces the
camelCase shape the store API speaks.
"""

import logging
from datetime import datetime

from ...core.database import db, new_object_id

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ('1:1', '4:5', '3:4', '16:9')


def _iso(value):
    return value.isoformat() if value else None


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    name = db.Column(db.String(120), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {'_id': self.id, 'name': self.name}


class Product(db.Model):
    __tablename__ = 'products'
    __table_args__ = (
        db.Index('idx_products_store_in_stock', 'store_id', 'in_stock'),
    )

    id = db.Column(db.String(24), primary_key=True, default=new_object_id)
    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), unique=True, index=True)
    description = db.Column(db.Text, default='')
    short_description = db.Column(db.Text, default='')
    mrp = db.Column(db.Float, nullable=False)
    price = db.Column(db.Float, nullable=False)
    images = db.Column(db.JSON, default=list)
    # Deprecated single category, still read by older storefront pages
    category = db.Column(db.String(24))
    categories = db.Column(db.JSON, default=list)
    sku = db.Column(db.String(120))
    in_stock = db.Column(db.Boolean, default=True)
    stock_quantity = db.Column(db.Integer, default=0)
    has_variants = db.Column(db.Boolean, default=False)
    variants = db.Column(db.JSON, default=list)
    attributes = db.Column(db.JSON, default=dict)
    colors = db.Column(db.JSON, default=list)
    sizes = db.Column(db.JSON, default=list)
    reviews = db.Column(db.JSON, default=list)
    fast_delivery = db.Column(db.Boolean, default=False)
    allow_return = db.Column(db.Boolean, default=True)
    allow_replacement = db.Column(db.Boolean, default=True)
    image_aspect_ratio = db.Column(db.String(8), default='1:1')
    store_id = db.Column(db.String(64))
    tags = db.Column(db.JSON, default=list)

    # Frequently bought together
    enable_fbt = db.Column(db.Boolean, default=False)
    fbt_product_ids = db.Column(db.JSON, default=list)
    fbt_bundle_price = db.Column(db.Float)
    fbt_bundle_discount = db.Column(db.Float)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def get_by_id(cls, product_id):
        if not product_id:
            return None
        return db.session.get(cls, product_id)

    @classmethod
    def for_store(cls, store_id):
        return cls.query.filter_by(store_id=store_id).order_by(cls.created_at.desc()).all()

    @classmethod
    def get_all_in_stock(cls):
        return cls.query.filter_by(in_stock=True).order_by(cls.created_at.desc()).all()

    @classmethod
    def slug_taken(cls, slug, exclude_id=None):
        query = cls.query.filter_by(slug=slug)
        if exclude_id:
            query = query.filter(cls.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    def fbt_products(self):
        ids = self.fbt_product_ids or []
        if not ids:
            return []
        found = {p.id: p for p in Product.query.filter(Product.id.in_(ids)).all()}
        # Keep the merchant's chosen order
        return [found[i] for i in ids if i in found]

    def fbt_dict(self):
        return {
            'enableFBT': bool(self.enable_fbt),
            'products': [p.summary_dict() for p in self.fbt_products()],
            'bundlePrice': self.fbt_bundle_price,
            'bundleDiscount': self.fbt_bundle_discount,
        }

    def summary_dict(self):
        return {
            '_id': self.id,
            'name': self.name,
            'slug': self.slug,
            'sku': self.sku,
            'price': self.price,
            'mrp': self.mrp,
            'images': list(self.images or []),
            'inStock': bool(self.in_stock),
        }

    def to_dict(self):
        attributes = dict(self.attributes or {})
        return {
            '_id': self.id,
            'name': self.name,
            'slug': self.slug,
            'brand': attributes.get('brand', ''),
            'description': self.description or '',
            'shortDescription': self.short_description or '',
            'mrp': self.mrp,
            'price': self.price,
            'images': list(self.images or []),
            'category': self.category,
            'categories': list(self.categories or []),
            'sku': self.sku,
            'inStock': bool(self.in_stock),
            'stockQuantity': self.stock_quantity or 0,
            'hasVariants': bool(self.has_variants),
            'variants': list(self.variants or []),
            'attributes': attributes,
            'colors': list(self.colors or []),
            'sizes': list(self.sizes or []),
            'reviews': list(self.reviews or []),
            'fastDelivery': bool(self.fast_delivery),
            'allowReturn': bool(self.allow_return),
            'allowReplacement': bool(self.allow_replacement),
            'imageAspectRatio': self.image_aspect_ratio or '1:1',
            'storeId': self.store_id,
            'tags': list(self.tags or []),
            'enableFBT': bool(self.enable_fbt),
            'fbtProductIds': list(self.fbt_product_ids or []),
            'fbtBundlePrice': self.fbt_bundle_price,
            'fbtBundleDiscount': self.fbt_bundle_discount,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Product {self.id} {self.slug!r}>"


# Storefront listing: in-stock products, newest first
db.Index('idx_products_in_stock_created', Product.in_stock, Product.created_at.desc())
