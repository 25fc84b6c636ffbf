import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from django.db import IntegrityError
from django.db.models import Prefetch

from backend.core.exceptions import StorageError, error_response
from backend.core.permissions import IsAdminRole
from backend.core.storage import delete_files, product_bucket, upload_file
from backend.core.utils import get_user_label, request_payload, run_audited, with_retry
from .filters import ProductFilter
from .models import Brand, KategoriProduk, SubkategoriProduk, Produk, DetailProduk
from .serializers import (
    BrandSerializer, BrandWriteSerializer,
    CategorySerializer, SubcategorySerializer, KategoriProdukSerializer, SubkategoriProdukSerializer,
    ProdukSerializer, ProdukWriteSerializer, DetailProdukSerializer,
)

logger = logging.getLogger(__name__)

TYPE_CATEGORY = 'category'
TYPE_SUBCATEGORY = 'subcategory'


def _brand_queryset():
    return Brand.objects.prefetch_related(
        Prefetch(
            'kategori_produks',
            queryset=KategoriProduk.objects.prefetch_related('subkategori_produks'),
        )
    )


def _product_queryset():
    return Produk.objects.select_related(
        'subkategori_produk__kategori_produk__brand',
        'kategori_produk__brand',
        'brand',
    ).prefetch_related('detail_produks')


# Brand views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def brand_list_create(request):
    """List all brands or create a new brand"""
    if request.method == 'GET':
        brands = with_retry(lambda: list(_brand_queryset().order_by('-created_at')))
        return Response(BrandSerializer(brands, many=True).data)

    data = request_payload(request)
    if not data.get('name'):
        return error_response('Name is required')
    if Brand.objects.filter(name=data['name']).exists():
        return error_response('Brand name already exists')

    data.setdefault('images', [])
    if not data.get('colorbase'):
        data.pop('colorbase', None)
    serializer = BrandWriteSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    try:
        brand = run_audited(
            request.user.pk,
            lambda: serializer.save(created_by=get_user_label(request.user) or 'system'),
        )
    except IntegrityError:
        return error_response('Brand name already exists')
    logger.info(f"Brand {brand.name} created by {request.user.email}")
    return Response(BrandSerializer(brand).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def brand_detail(request, pk):
    """Retrieve, update or delete a brand"""
    brand = with_retry(lambda: _brand_queryset().filter(pk=pk).first())
    if brand is None:
        return error_response('Brand not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(BrandSerializer(brand).data)

    if request.method == 'PUT':
        data = request_payload(request)
        if not data.get('name'):
            return error_response('Name is required')
        if Brand.objects.filter(name=data['name']).exclude(pk=brand.pk).exists():
            return error_response('Brand name already exists')

        data.setdefault('images', [])
        if not data.get('colorbase'):
            data.pop('colorbase', None)
        serializer = BrandWriteSerializer(brand, data=data)
        serializer.is_valid(raise_exception=True)
        try:
            brand = run_audited(
                request.user.pk,
                lambda: serializer.save(updated_by=get_user_label(request.user) or 'system'),
            )
        except IntegrityError:
            return error_response('Brand name already exists')
        return Response(BrandSerializer(_brand_queryset().get(pk=brand.pk)).data)

    # DELETE
    if brand.kategori_produks.exists():
        return error_response('Cannot delete brand with associated categories')

    delete_files(brand.images, product_bucket())
    run_audited(request.user.pk, brand.delete)
    logger.info(f"Brand {brand.name} deleted by {request.user.email}")
    return Response({'message': 'Brand deleted successfully'})


# Category views
@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def category_list_create(request):
    """
    GET: every category (with brand and subcategories) and every subcategory
    (with category and brand). POST: create either, depending on ``type``.
    """
    if request.method == 'GET':
        def load():
            categories = list(
                KategoriProduk.objects.select_related('brand')
                .prefetch_related('subkategori_produks')
                .order_by('-created_at')
            )
            subcategories = list(
                SubkategoriProduk.objects.select_related('kategori_produk__brand').order_by('-created_at')
            )
            return categories, subcategories

        categories, subcategories = with_retry(load)
        return Response({
            'categories': CategorySerializer(categories, many=True).data,
            'subcategories': SubcategorySerializer(subcategories, many=True).data,
        })

    data = request_payload(request)
    if not data.get('name'):
        return error_response('Name is required')

    category_type = data.get('type') or TYPE_CATEGORY
    fields = {
        'name': data['name'],
        'description': data.get('description'),
        'images': data.get('images') or [],
        'created_by': get_user_label(request.user) or 'system',
    }

    if category_type == TYPE_CATEGORY:
        brand = Brand.objects.filter(pk=data.get('brand')).first() if data.get('brand') else None
        if brand is None:
            return error_response('Brand is required for category')
        category = run_audited(request.user.pk, lambda: KategoriProduk.objects.create(brand=brand, **fields))
        return Response(KategoriProdukSerializer(category).data, status=status.HTTP_201_CREATED)

    if category_type == TYPE_SUBCATEGORY:
        parent_id = data.get('parent_category')
        parent = KategoriProduk.objects.filter(pk=parent_id).first() if parent_id else None
        if parent is None:
            return error_response('Parent category is required for subcategory')
        subcategory = run_audited(
            request.user.pk,
            lambda: SubkategoriProduk.objects.create(kategori_produk=parent, **fields),
        )
        return Response(SubkategoriProdukSerializer(subcategory).data, status=status.HTTP_201_CREATED)

    return error_response('Invalid type')


def _find_category(pk):
    category = (
        KategoriProduk.objects.select_related('brand')
        .prefetch_related('subkategori_produks')
        .filter(pk=pk).first()
    )
    if category is not None:
        return category, TYPE_CATEGORY
    subcategory = SubkategoriProduk.objects.select_related('kategori_produk__brand').filter(pk=pk).first()
    if subcategory is not None:
        return subcategory, TYPE_SUBCATEGORY
    return None, None


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def category_detail(request, pk):
    """Retrieve, update or delete a category or subcategory"""
    if request.method == 'GET':
        instance, category_type = with_retry(lambda: _find_category(pk))
        if instance is None:
            return error_response('Category not found', status.HTTP_404_NOT_FOUND)
        if category_type == TYPE_CATEGORY:
            data = CategorySerializer(instance).data
        else:
            data = SubcategorySerializer(instance).data
        return Response({**data, 'type': category_type})

    data = request_payload(request)
    category_type = data.get('type') or TYPE_CATEGORY

    if request.method == 'PUT':
        if not data.get('name'):
            return error_response('Name is required')
        if not data.get('update_notes'):
            return error_response('Update notes is required')
        if not data.get('updated_by'):
            return error_response('Updated by is required')

        fields = {
            'name': data['name'],
            'description': data.get('description'),
            'images': data.get('images') or [],
            'updated_by': data['updated_by'],
            'update_notes': data['update_notes'],
        }

        if category_type == TYPE_CATEGORY:
            if not data.get('brand'):
                return error_response('Brand is required for category')
            instance = KategoriProduk.objects.filter(pk=pk).first()
            if instance is None:
                return error_response('Category not found', status.HTTP_404_NOT_FOUND)
            brand = Brand.objects.filter(pk=data['brand']).first()
            if brand is None:
                return error_response('Brand not found', status.HTTP_404_NOT_FOUND)
            fields['brand'] = brand
            serializer_class = KategoriProdukSerializer
        elif category_type == TYPE_SUBCATEGORY:
            if not data.get('parent_category'):
                return error_response('Parent category is required for subcategory')
            instance = SubkategoriProduk.objects.filter(pk=pk).first()
            if instance is None:
                return error_response('Category not found', status.HTTP_404_NOT_FOUND)
            parent = KategoriProduk.objects.filter(pk=data['parent_category']).first()
            if parent is None:
                return error_response('Parent category not found', status.HTTP_404_NOT_FOUND)
            fields['kategori_produk'] = parent
            serializer_class = SubkategoriProdukSerializer
        else:
            return error_response('Invalid type')

        def update():
            for field, value in fields.items():
                setattr(instance, field, value)
            instance.save()
            return instance

        instance = run_audited(request.user.pk, update)
        return Response(serializer_class(instance).data)

    # DELETE
    if category_type == TYPE_CATEGORY:
        instance = KategoriProduk.objects.filter(pk=pk).first()
        if instance is not None and instance.subkategori_produks.exists():
            return error_response('Cannot delete category with associated subcategories')
    elif category_type == TYPE_SUBCATEGORY:
        instance = SubkategoriProduk.objects.filter(pk=pk).first()
        if instance is not None and instance.produks.exists():
            return error_response('Cannot delete subcategory with associated products')
    else:
        return error_response('Invalid type')

    if instance is None:
        return error_response('Category not found', status.HTTP_404_NOT_FOUND)
    if category_type == TYPE_CATEGORY and instance.produks.exists():
        return error_response('Cannot delete category with associated products')

    delete_files(instance.images, product_bucket())
    run_audited(request.user.pk, instance.delete)
    return Response({'message': 'Category deleted successfully'})


# Product views
def _resolve_placement(data):
    """
    Subcategory or category for a product payload.

    Returns ``(subcategory, category, error)``; a subcategory of ``-`` means
    the product sits directly under the category.
    """
    subcategory_id = data.get('subcategory')
    category_id = data.get('category')
    if subcategory_id == '-':
        subcategory_id = None

    if not subcategory_id and not category_id:
        return None, None, 'Either category or subcategory is required'

    if subcategory_id:
        subcategory = SubkategoriProduk.objects.select_related('kategori_produk__brand').filter(
            pk=subcategory_id
        ).first()
        if subcategory is None:
            return None, None, 'Subcategory not found'
        return subcategory, None, None

    category = KategoriProduk.objects.select_related('brand').filter(pk=category_id).first()
    if category is None:
        return None, None, 'Category not found'
    return None, category, None


def _detail_rows(details):
    rows = []
    for detail in details or []:
        if not isinstance(detail, dict) or not detail.get('name'):
            continue
        rows.append({
            'name': detail['name'],
            'value': detail.get('value', detail.get('detail')),
            'images': detail.get('images') or [],
        })
    return rows


@api_view(['GET', 'POST'])
@permission_classes([IsAdminRole])
def product_list_create(request):
    """List products (filterable) or create a product with its details"""
    if request.method == 'GET':
        filterset = ProductFilter(request.query_params, queryset=_product_queryset().order_by('-created_at'))
        if not filterset.is_valid():
            return error_response('Invalid filter parameters')
        products = with_retry(lambda: list(filterset.qs))
        return Response(ProdukSerializer(products, many=True).data)

    data = request_payload(request)
    if not data.get('name'):
        return error_response('Name is required')

    subcategory, category, error = _resolve_placement(data)
    if error:
        return error_response(error)

    data.setdefault('images', [])
    if not data.get('status'):
        data.pop('status', None)
    serializer = ProdukWriteSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    details = _detail_rows(data.get('details'))

    def create():
        product = serializer.save(
            subkategori_produk=subcategory,
            kategori_produk=category,
            brand=(subcategory.kategori_produk.brand if subcategory else category.brand),
            created_by=get_user_label(request.user) or 'system',
        )
        for row in details:
            DetailProduk.objects.create(produk=product, **row)
        return product

    product = run_audited(request.user.pk, create)
    logger.info(f"Product {product.name} created by {request.user.email}")
    return Response(ProdukSerializer(_product_queryset().get(pk=product.pk)).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAdminRole])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = with_retry(lambda: _product_queryset().filter(pk=pk).first())
    if product is None:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return Response(ProdukSerializer(product).data)

    if request.method == 'PUT':
        data = request_payload(request)
        if not data.get('name'):
            return error_response('Name is required')

        subcategory, category, error = _resolve_placement(data)
        if error:
            return error_response(error)

        data.setdefault('images', [])
        if not data.get('status'):
            data.pop('status', None)
        serializer = ProdukWriteSerializer(product, data=data)
        serializer.is_valid(raise_exception=True)
        details = _detail_rows(data.get('details'))

        def update():
            saved = serializer.save(
                subkategori_produk=subcategory,
                kategori_produk=category,
                brand=(subcategory.kategori_produk.brand if subcategory else category.brand),
                updated_by=get_user_label(request.user) or 'system',
            )
            # A non-empty details list replaces every existing detail
            if details:
                saved.detail_produks.all().delete()
                for row in details:
                    DetailProduk.objects.create(produk=saved, **row)
            return saved

        product = run_audited(request.user.pk, update)
        return Response(ProdukSerializer(_product_queryset().get(pk=product.pk)).data)

    # DELETE
    image_urls = list(product.images or [])
    for detail in product.detail_produks.all():
        image_urls.extend(detail.images or [])
    delete_files(image_urls, product_bucket())
    run_audited(request.user.pk, product.delete)
    logger.info(f"Product {product.name} deleted by {request.user.email}")
    return Response({'message': 'Product deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAdminRole])
def product_detail_create(request, pk):
    """Add a detail line to a product"""
    product = Produk.objects.filter(pk=pk).first()
    if product is None:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    data = request_payload(request)
    if not data.get('name') or not data.get('value'):
        return error_response('Name and value are required')

    data.setdefault('images', [])
    serializer = DetailProdukSerializer(data=data)
    serializer.is_valid(raise_exception=True)
    detail = run_audited(request.user.pk, lambda: serializer.save(produk=product))
    return Response(DetailProdukSerializer(detail).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAdminRole])
def product_detail_delete(request, pk):
    """Delete one product detail and its images"""
    detail = DetailProduk.objects.filter(pk=pk).first()
    if detail is None:
        return error_response('Product detail not found', status.HTTP_404_NOT_FOUND)

    delete_files(detail.images, product_bucket())
    run_audited(request.user.pk, detail.delete)
    return Response({'message': 'Product detail deleted successfully'})


@api_view(['POST'])
@permission_classes([IsAdminRole])
@parser_classes([MultiPartParser, FormParser])
def upload(request):
    """Store a product image and return its public URL"""
    file = request.FILES.get('file')
    path = request.data.get('path')
    if not file or not path:
        return error_response('File and path are required')

    try:
        url = upload_file(file, path, product_bucket())
    except StorageError as e:
        return error_response(str(e), status.HTTP_500_INTERNAL_SERVER_ERROR)
    return Response({'url': url})
