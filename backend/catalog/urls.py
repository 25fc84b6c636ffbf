from django.urls import path
from .views import (
    brand_list_create, brand_detail,
    category_list_create, category_detail,
    product_list_create, product_detail,
    product_detail_create, product_detail_delete,
    upload,
)

urlpatterns = [
    # Brand endpoints
    path('brands/', brand_list_create, name='brand-list-create'),
    path('brands/<uuid:pk>/', brand_detail, name='brand-detail'),

    # Category endpoints (categories and subcategories)
    path('categories/', category_list_create, name='category-list-create'),
    path('categories/<uuid:pk>/', category_detail, name='category-detail'),

    # Product endpoints
    path('products/', product_list_create, name='product-list-create'),
    path('products/details/<uuid:pk>/', product_detail_delete, name='product-detail-delete'),
    path('products/<uuid:pk>/', product_detail, name='product-detail'),
    path('products/<uuid:pk>/details/', product_detail_create, name='product-detail-create'),

    # Product image upload
    path('upload/', upload, name='upload'),
]
