"""
Catalog API Routes
==================

Store-side product management plus the public product and FBT endpoints.
"""

import logging
from flask import request, jsonify, g, send_from_directory
from flask_cors import cross_origin
from sqlalchemy.exc import IntegrityError

from ...core.config import Config
from ...core.database import db
from ...core.logging_service import db_log
from ...core.storage import UploadRejected, save_upload, upload_folder
from . import store_bp, products_public_bp
from .auth import require_store_token
from .forms import ProductFormError, parse_product_form
from .models import Category, Product

logger = logging.getLogger(__name__)

MAX_FBT_PRODUCTS = 4


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


def _product_id_from_request():
    if request.is_json:
        return (request.get_json(silent=True) or {}).get('productId')
    return request.form.get('productId') or request.args.get('productId')


def _owned_product(product_id):
    """Product by id, only if it belongs to the calling store"""
    product = Product.get_by_id(product_id)
    if not product or product.store_id != g.store_id:
        return None
    return product


# ===== Store: products =====

@store_bp.route('/product', methods=['GET'])
@require_store_token
def list_store_products():
    """All products of the calling store, newest first"""
    try:
        products = Product.for_store(g.store_id)
        return jsonify({'products': [p.to_dict() for p in products]})
    except Exception as e:
        logger.error(f"Error listing products: {e}")
        return _error(str(e), 500)


@store_bp.route('/product', methods=['POST'])
@require_store_token
def create_product():
    """Create a product from the editor's multipart form"""
    try:
        values = parse_product_form(request.form, request.files, creating=True)
        if Product.slug_taken(values['slug']):
            return _error('A product with this slug already exists', 409)

        product = Product(store_id=g.store_id, **values)
        db.session.add(product)
        db.session.commit()

        db_log('info', 'catalog', f"Product created: {product.name}", {'product_id': product.id})
        return jsonify({'success': True, 'message': 'Product added successfully', 'product': product.to_dict()})

    except (ProductFormError, UploadRejected) as e:
        return _error(str(e), 400)
    except IntegrityError:
        db.session.rollback()
        return _error('A product with this slug already exists', 409)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error creating product: {e}")
        db_log('error', 'catalog', 'Product create failed', {'error': str(e)})
        return _error(str(e), 500)


@store_bp.route('/product', methods=['PUT'])
@require_store_token
def update_product():
    """Update a product: full multipart form, or a JSON image-list update"""
    try:
        product = _owned_product(_product_id_from_request())
        if not product:
            return _error('Product not found', 404)

        if request.is_json:
            images = (request.get_json(silent=True) or {}).get('images')
            if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
                return _error('images must be a list of URLs', 400)
            product.images = images
            db.session.commit()
            return jsonify({'success': True, 'message': 'Images updated', 'product': product.to_dict()})

        values = parse_product_form(request.form, request.files, creating=False)
        if 'slug' in values and Product.slug_taken(values['slug'], exclude_id=product.id):
            return _error('A product with this slug already exists', 409)

        for column, value in values.items():
            setattr(product, column, value)
        db.session.commit()

        db_log('info', 'catalog', f"Product updated: {product.name}", {'product_id': product.id})
        return jsonify({'success': True, 'message': 'Product updated successfully', 'product': product.to_dict()})

    except (ProductFormError, UploadRejected) as e:
        return _error(str(e), 400)
    except IntegrityError:
        db.session.rollback()
        return _error('A product with this slug already exists', 409)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error updating product: {e}")
        db_log('error', 'catalog', 'Product update failed', {'error': str(e)})
        return _error(str(e), 500)


@store_bp.route('/product', methods=['DELETE'])
@require_store_token
def delete_product():
    """Delete product"""
    try:
        product = _owned_product(request.args.get('productId'))
        if not product:
            return _error('Product not found', 404)

        db.session.delete(product)
        db.session.commit()

        db_log('info', 'catalog', f"Product deleted: {product.id}")
        return jsonify({'success': True, 'message': 'Product deleted successfully'})

    except Exception as e:
        db.session.rollback()
        logger.error(f"Error deleting product: {e}")
        return _error(str(e), 500)


def _toggle(column, label):
    product = _owned_product(_product_id_from_request())
    if not product:
        return _error('Product not found', 404)

    new_value = not bool(getattr(product, column))
    setattr(product, column, new_value)
    db.session.commit()

    state = 'enabled' if new_value else 'disabled'
    return jsonify({'success': True, 'message': f'{label} {state} successfully', column: new_value})


@store_bp.route('/stock-toggle', methods=['POST'])
@require_store_token
def stock_toggle():
    try:
        return _toggle('in_stock', 'Stock')
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error toggling stock: {e}")
        return _error(str(e), 500)


@store_bp.route('/fast-delivery-toggle', methods=['POST'])
@require_store_token
def fast_delivery_toggle():
    try:
        return _toggle('fast_delivery', 'Fast delivery')
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error toggling fast delivery: {e}")
        return _error(str(e), 500)


# ===== Store: categories and media =====

@store_bp.route('/categories', methods=['GET'])
def list_categories():
    try:
        categories = Category.query.order_by(Category.name).all()
        return jsonify({'categories': [c.to_dict() for c in categories]})
    except Exception as e:
        logger.error(f"Error listing categories: {e}")
        return _error(str(e), 500)


@store_bp.route('/upload-image', methods=['POST'])
@require_store_token
def upload_image():
    """Single image or video for the description editor"""
    try:
        url = save_upload(request.files.get('image'), 'editor')
        return jsonify({'success': True, 'url': url})
    except UploadRejected as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.error(f"Error uploading file: {e}")
        return _error(str(e), 500)


@store_bp.route('/uploads/<path:filename>', methods=['GET'])
def uploaded_file(filename):
    return send_from_directory(upload_folder(), filename)


# ===== Public: products and FBT =====

@products_public_bp.route('', methods=['GET', 'OPTIONS'])
@cross_origin(origins=Config.CORS_ORIGINS, supports_credentials=False)
def list_products():
    """In-stock products, newest first"""
    try:
        products = Product.get_all_in_stock()
        return jsonify({'products': [p.summary_dict() for p in products]})
    except Exception as e:
        logger.error(f"Error fetching products: {e}")
        return jsonify({'success': False, 'error': 'Internal error', 'products': []}), 500


@products_public_bp.route('/<product_id>/fbt', methods=['GET', 'OPTIONS'])
@cross_origin(origins=Config.CORS_ORIGINS, supports_credentials=False)
def get_fbt(product_id):
    product = Product.get_by_id(product_id)
    if not product:
        return _error('Product not found', 404)
    return jsonify(product.fbt_dict())


def _optional_number(data, key):
    value = data.get(key)
    if value is None or value == '':
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ProductFormError(f'{key} must be a number')
    if value < 0:
        raise ProductFormError(f'{key} cannot be negative')
    return float(value)


@products_public_bp.route('/<product_id>/fbt', methods=['PATCH'])
@require_store_token
def patch_fbt(product_id):
    """Replace the product's FBT config; a disabled config clears ids and prices"""
    try:
        product = _owned_product(product_id)
        if not product:
            return _error('Product not found', 404)

        data = request.get_json(silent=True) or {}
        enabled = bool(data.get('enableFBT'))
        ids = data.get('fbtProductIds') or []
        if not isinstance(ids, list):
            return _error('fbtProductIds must be a list', 400)

        ids = [str(i) for i in ids]
        if len(ids) > MAX_FBT_PRODUCTS:
            return _error(f'Maximum {MAX_FBT_PRODUCTS} products allowed', 400)
        if product.id in ids:
            return _error('A product cannot be bought together with itself', 400)
        if len(set(ids)) != len(ids):
            return _error('Duplicate products in fbtProductIds', 400)

        bundle_discount = _optional_number(data, 'fbtBundleDiscount')
        if bundle_discount is not None and bundle_discount > 100:
            return _error('fbtBundleDiscount cannot exceed 100', 400)

        product.enable_fbt = enabled
        product.fbt_product_ids = ids if enabled else []
        product.fbt_bundle_price = _optional_number(data, 'fbtBundlePrice') if enabled else None
        product.fbt_bundle_discount = bundle_discount if enabled else None
        db.session.commit()

        return jsonify({'success': True, 'message': 'FBT configuration saved', **product.fbt_dict()})

    except ProductFormError as e:
        return _error(str(e), 400)
    except Exception as e:
        db.session.rollback()
        logger.error(f"Error saving FBT config: {e}")
        return _error(str(e), 500)
