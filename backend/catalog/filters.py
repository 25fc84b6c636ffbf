import django_filters
from django.db.models import Q
from .models import Produk


class ProductFilter(django_filters.FilterSet):
    """
    Product list filters.

    Products may sit under a subcategory or directly under a category, so
    brand and category filters match both placements.
    """
    brand_id = django_filters.UUIDFilter(method='filter_brand')
    category_id = django_filters.UUIDFilter(method='filter_category')
    subcategory_id = django_filters.UUIDFilter(field_name='subkategori_produk_id')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Produk
        fields = ['brand_id', 'category_id', 'subcategory_id', 'search', 'status']

    def filter_brand(self, queryset, name, value):
        return queryset.filter(
            Q(brand_id=value)
            | Q(kategori_produk__brand_id=value)
            | Q(subkategori_produk__kategori_produk__brand_id=value)
        )

    def filter_category(self, queryset, name, value):
        return queryset.filter(
            Q(kategori_produk_id=value) | Q(subkategori_produk__kategori_produk_id=value)
        )

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value)
            | Q(description__icontains=value)
            | Q(kapasitas__icontains=value)
        )
